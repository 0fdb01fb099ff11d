"""
Template narratives — deterministic, no network.

Used whenever the language model is disabled, slow or broken. Output is
a pure function of the score band, the first factor and a handful of
event fields, so identical inputs give byte-identical text.

Bands:
  score >= 70  → high risk, alert raised
  score >= 50  → moderate risk, monitoring
  otherwise    → low risk, continue protocols
"""
from __future__ import annotations

from typing import Optional, Sequence

from app.schemas.baseline import Baseline
from app.schemas.waste import Narrative, NarrativeSource, WasteEvent

HIGH_RISK_SCORE = 70
MODERATE_RISK_SCORE = 50


def _bullets(*lines: str) -> str:
    return "\n".join(f"• {line}" for line in lines)


def build_fallback_narrative(
    event: WasteEvent,
    score: int,
    factors: Sequence[str],
) -> Narrative:
    department = event.department.value
    waste_type = event.waste_type.value
    first_factor = factors[0] if factors else None

    if score >= HIGH_RISK_SCORE:
        return Narrative(
            assessment=(
                f"High risk detected ({score}/100) in {department}. "
                f"{first_factor or 'Multiple risk factors identified'}. "
                "Immediate review required."
            ),
            recommended_action=_bullets(
                f"Review waste disposal protocols for {department}",
                f"Verify staff training on {waste_type} waste handling",
                "Evaluate quantity against baseline standards",
            ),
            alert_message=f"Potential Anomaly in {waste_type} Waste Generation",
            source=NarrativeSource.FALLBACK,
        )

    if score >= MODERATE_RISK_SCORE:
        return Narrative(
            assessment=(
                f"Moderate risk ({score}/100) detected. "
                f"{first_factor or 'Some concerns identified'}. "
                "Monitoring recommended."
            ),
            recommended_action=_bullets(
                "Monitor waste trends over next 48 hours",
                f"Ensure proper segregation of {waste_type} waste",
                "Consider staff refresher training",
            ),
            source=NarrativeSource.FALLBACK,
        )

    return Narrative(
        assessment=(
            f"Low risk ({score}/100). Waste handling appears appropriate for "
            f"{event.procedure_category.value} in {department}."
        ),
        recommended_action=_bullets(
            "Continue current protocols",
            "Maintain proper documentation",
            "Regular monitoring recommended",
        ),
        source=NarrativeSource.FALLBACK,
    )


class TemplateNarrativeGenerator:
    async def generate(
        self,
        event: WasteEvent,
        score: int,
        factors: Sequence[str],
        baseline: Optional[Baseline] = None,
    ) -> Narrative:
        return build_fallback_narrative(event, score, factors)
