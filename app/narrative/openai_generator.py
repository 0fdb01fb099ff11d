"""
Language-model narratives via the OpenAI chat completions API.

Requests a JSON object matching the Narrative aliases:
    {"assessment": str, "recommendedAction": str, "alertMessage": str | null}

Any failure (network, non-2xx, empty or malformed JSON, schema mismatch)
is raised to the caller. FallbackNarrativeGenerator decides what to do.
"""
from __future__ import annotations

from typing import Optional, Sequence

import structlog
from openai import AsyncOpenAI

from app.narrative.base import NarrativeGenerationError
from app.schemas.baseline import Baseline
from app.schemas.waste import Narrative, NarrativeSource, WasteEvent

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are a clinical waste management expert. "
    "Provide concise, actionable insights for hospital waste officers."
)

# Alert text is requested above this score; the engine's anomaly cutoff is separate
ALERT_PROMPT_SCORE = 60


def build_prompt(
    event: WasteEvent,
    score: int,
    factors: Sequence[str],
    baseline: Optional[Baseline] = None,
) -> str:
    lines = [
        "Analyse this hospital waste disposal record.",
        "",
        "Waste entry:",
        f"- Department: {event.department.value}",
        f"- Waste type: {event.waste_type.value}",
        f"- Quantity: {event.quantity:g} kg",
        f"- Procedure: {event.procedure_category.value}",
        f"- Disposal method: {event.disposal_method.value}",
        f"- Shift: {event.shift.value}",
    ]
    if event.notes:
        lines.append(f"- Notes: {event.notes}")

    lines += [
        "",
        "Risk analysis:",
        f"- Risk score: {score}/100",
        f"- Risk factors: {'; '.join(factors) if factors else 'none'}",
    ]
    if baseline is not None:
        lines.append(f"- Expected daily volume: {baseline.expected_daily:g} kg")

    lines += [
        "",
        "Respond with a JSON object with exactly these keys:",
        '  "assessment": 2-3 sentence evaluation,',
        '  "recommendedAction": 2-3 bullet points, one per line, each starting with "• ",',
        f'  "alertMessage": a short alert title if the risk score is above {ALERT_PROMPT_SCORE}, otherwise null',
    ]
    return "\n".join(lines)


class OpenAINarrativeGenerator:
    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 500,
    ):
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(
        self,
        event: WasteEvent,
        score: int,
        factors: Sequence[str],
        baseline: Optional[Baseline] = None,
    ) -> Narrative:
        completion = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(event, score, factors, baseline)},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )

        if not completion.choices:
            raise NarrativeGenerationError("completion returned no choices")
        content = completion.choices[0].message.content
        if not content or not content.strip():
            raise NarrativeGenerationError("completion returned empty content")

        narrative = Narrative.model_validate_json(content)
        logger.debug("narrative_generated", model=self.model, score=score)
        return narrative.model_copy(update={"source": NarrativeSource.MODEL})
