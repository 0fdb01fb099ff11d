"""
Waste Risk Engine

Orchestrates:
  1. Baseline lookup (absence is fine)
  2. Recent department history (7-day window)
  3. Factor scores → clamped composite score + ordered factor texts
  4. Narrative (language model, falling back to templates)
  5. Anomaly verdict

Called once per event, before the event is persisted.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional, Sequence

import structlog

from app.core.metrics import ANOMALIES, RISK_SCORE
from app.narrative.base import NarrativeGenerator
from app.schemas.baseline import Baseline
from app.schemas.waste import AnalysisResult, WasteEvent
from app.scoring import factors
from app.scoring.factors import FactorContribution
from app.scoring.tables import DEFAULT_TABLES, ScoringTables
from app.scoring.trend import TrendFactor
from app.services.stores import BaselineStore, WasteEventStore

logger = structlog.get_logger()

MAX_SCORE = 100

# Fixed engine cutoff. Baseline.anomaly_threshold is only consulted
# under AnomalyThresholdPolicy.BASELINE.
ANOMALY_SCORE_THRESHOLD = 65

HISTORY_WINDOW = timedelta(days=7)


class AnomalyThresholdPolicy(str, Enum):
    FIXED = "fixed"
    BASELINE = "baseline"


@dataclass(frozen=True)
class RiskScore:
    score: int
    factors: list[str] = field(default_factory=list)
    contributions: tuple[FactorContribution, ...] = ()


# ═══════════════════════════════════════════════════════════════
# Risk aggregation
# ═══════════════════════════════════════════════════════════════

def aggregate_risk(
    event: WasteEvent,
    baseline: Optional[Baseline],
    tables: ScoringTables = DEFAULT_TABLES,
    history: Sequence[WasteEvent] = (),
    trend_factors: Sequence[TrendFactor] = (),
) -> RiskScore:
    """
    Sum the factors in a fixed order and collect their notes in that
    same order. The order is what the UI displays; do not reorder.
    """
    contributions = [
        factors.compare_to_baseline(event.quantity, baseline, tables),
        factors.score_waste_category(event.waste_type, tables),
        factors.score_disposal_method(event.waste_type, event.disposal_method, tables),
        factors.assess_procedure_risk(event, tables),
    ]
    for trend in trend_factors:
        contributions.append(trend.evaluate(event, history, baseline))

    total = sum(c.score for c in contributions)
    factor_notes = [c.note for c in contributions if c.note]

    return RiskScore(
        score=max(0, min(total, MAX_SCORE)),
        factors=factor_notes,
        contributions=tuple(contributions),
    )


# ═══════════════════════════════════════════════════════════════
# Anomaly classification
# ═══════════════════════════════════════════════════════════════

def classify_anomaly(
    score: int,
    baseline: Optional[Baseline] = None,
    policy: AnomalyThresholdPolicy = AnomalyThresholdPolicy.FIXED,
) -> bool:
    if policy == AnomalyThresholdPolicy.BASELINE and baseline is not None:
        return score >= baseline.anomaly_threshold
    return score >= ANOMALY_SCORE_THRESHOLD


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WasteAnalysisEngine:
    """
    Scores one event against its department's baseline and history.

    Store failures propagate: without knowing whether a baseline exists
    no score can be produced. Narrative failures never propagate.
    """

    def __init__(
        self,
        baselines: BaselineStore,
        history: WasteEventStore,
        narrator: NarrativeGenerator,
        *,
        tables: ScoringTables = DEFAULT_TABLES,
        trend_factors: Sequence[TrendFactor] = (),
        anomaly_policy: AnomalyThresholdPolicy = AnomalyThresholdPolicy.FIXED,
        history_window: timedelta = HISTORY_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._baselines = baselines
        self._history = history
        self._narrator = narrator
        self.tables = tables
        self.trend_factors = tuple(trend_factors)
        self.anomaly_policy = anomaly_policy
        self.history_window = history_window
        self._clock = clock

    async def analyze(self, event: WasteEvent, tenant_id: str) -> AnalysisResult:
        t0 = time.perf_counter_ns()

        baseline = await self._baselines.find_baseline(tenant_id, event.department)
        since = self._clock() - self.history_window
        recent = await self._history.find_recent_events(tenant_id, event.department, since)

        risk = aggregate_risk(event, baseline, self.tables, recent, self.trend_factors)

        narrative = await self._narrator.generate(event, risk.score, risk.factors, baseline)
        anomaly = classify_anomaly(risk.score, baseline, self.anomaly_policy)

        elapsed_ms = int((time.perf_counter_ns() - t0) / 1_000_000)
        RISK_SCORE.observe(risk.score)
        if anomaly:
            ANOMALIES.labels(department=event.department.value).inc()

        logger.info(
            "waste_analysis_complete",
            tenant_id=tenant_id,
            department=event.department.value,
            waste_type=event.waste_type.value,
            score=risk.score,
            anomaly=anomaly,
            factors_count=len(risk.factors),
            history_count=len(recent),
            has_baseline=baseline is not None,
            narrative_source=narrative.source.value,
            elapsed_ms=elapsed_ms,
        )

        return AnalysisResult(
            risk_score=risk.score,
            anomaly_detected=anomaly,
            assessment=narrative.assessment,
            recommended_action=narrative.recommended_action,
            alert_message=narrative.alert_message,
            factors=list(risk.factors),
            narrative_source=narrative.source,
        )
