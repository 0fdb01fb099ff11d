"""
Trend factors — extension point for history-based scoring.

The engine fetches the department's recent events (7 days by default)
and hands them to every registered TrendFactor after the static
factors have run. No trend factor is registered by default, so the
history currently has no effect on the score.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from app.schemas.baseline import Baseline
from app.schemas.waste import WasteEvent
from app.scoring.factors import FactorContribution


@runtime_checkable
class TrendFactor(Protocol):
    factor_name: str

    def evaluate(
        self,
        event: WasteEvent,
        history: Sequence[WasteEvent],
        baseline: Optional[Baseline],
    ) -> FactorContribution:
        """Return a non-negative contribution. Must be deterministic."""
        ...
