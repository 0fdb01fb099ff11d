"""
Request-scoped wiring: stores over the request's DB session, and the
analysis engine built on top of them.
"""
from __future__ import annotations

from datetime import timedelta

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.models.database import get_db
from app.narrative.base import NarrativeGenerator
from app.narrative.fallback import get_narrative_generator
from app.scoring.engine import AnomalyThresholdPolicy, WasteAnalysisEngine
from app.services.stores import (
    BaselineStore,
    SqlBaselineStore,
    SqlWasteEventStore,
    WasteEventStore,
)


def get_baseline_store(db: AsyncSession = Depends(get_db)) -> BaselineStore:
    return SqlBaselineStore(db)


def get_waste_store(db: AsyncSession = Depends(get_db)) -> WasteEventStore:
    return SqlWasteEventStore(db)


def get_analysis_engine(
    baselines: BaselineStore = Depends(get_baseline_store),
    history: WasteEventStore = Depends(get_waste_store),
    narrator: NarrativeGenerator = Depends(get_narrative_generator),
    settings: Settings = Depends(get_settings),
) -> WasteAnalysisEngine:
    return WasteAnalysisEngine(
        baselines,
        history,
        narrator,
        anomaly_policy=AnomalyThresholdPolicy(settings.anomaly_threshold_policy),
        history_window=timedelta(days=settings.history_window_days),
    )
