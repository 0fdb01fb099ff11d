"""
Narrative capability shared by the language-model and template generators.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence

from app.schemas.baseline import Baseline
from app.schemas.waste import Narrative, WasteEvent


class NarrativeGenerationError(RuntimeError):
    """The external generator returned nothing usable."""


class NarrativeGenerator(Protocol):
    async def generate(
        self,
        event: WasteEvent,
        score: int,
        factors: Sequence[str],
        baseline: Optional[Baseline] = None,
    ) -> Narrative:
        ...
