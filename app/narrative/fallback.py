"""
Timeout/failure policy around the language-model generator.

One attempt, bounded by a fixed timeout. Any failure → template
narrative. The caller never sees an exception from this step and never
gets an empty narrative.
"""
from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Optional, Sequence

import structlog
from openai import AsyncOpenAI

from app.core.config import Settings, get_settings
from app.core.metrics import NARRATIVE_OUTCOMES
from app.narrative.base import NarrativeGenerator
from app.narrative.openai_generator import OpenAINarrativeGenerator
from app.narrative.template import TemplateNarrativeGenerator
from app.schemas.baseline import Baseline
from app.schemas.waste import Narrative, WasteEvent

logger = structlog.get_logger()


class FallbackNarrativeGenerator:
    def __init__(
        self,
        primary: Optional[NarrativeGenerator],
        fallback: Optional[NarrativeGenerator] = None,
        timeout_seconds: float = 10.0,
    ):
        self.primary = primary
        self.fallback = fallback or TemplateNarrativeGenerator()
        self.timeout_seconds = timeout_seconds

    async def generate(
        self,
        event: WasteEvent,
        score: int,
        factors: Sequence[str],
        baseline: Optional[Baseline] = None,
    ) -> Narrative:
        if self.primary is None:
            NARRATIVE_OUTCOMES.labels(outcome="disabled").inc()
            return await self.fallback.generate(event, score, factors, baseline)

        try:
            narrative = await asyncio.wait_for(
                self.primary.generate(event, score, factors, baseline),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            NARRATIVE_OUTCOMES.labels(outcome="timeout").inc()
            logger.warning(
                "narrative_fallback_used",
                reason="timeout",
                timeout_seconds=self.timeout_seconds,
                department=event.department.value,
            )
        except Exception as e:
            # Fallback: log but don't fail the analysis
            NARRATIVE_OUTCOMES.labels(outcome="error").inc()
            logger.warning(
                "narrative_fallback_used",
                reason="error",
                error_type=type(e).__name__,
                error=str(e),
                department=event.department.value,
            )
        else:
            NARRATIVE_OUTCOMES.labels(outcome="model").inc()
            return narrative

        return await self.fallback.generate(event, score, factors, baseline)


def build_narrative_generator(settings: Settings) -> FallbackNarrativeGenerator:
    """Language model when an API key is configured, templates otherwise."""
    primary = None
    if settings.openai_api_key:
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url or None,
            timeout=settings.narrative_timeout_seconds,
            max_retries=0,
        )
        primary = OpenAINarrativeGenerator(
            client,
            model=settings.openai_model,
            temperature=settings.narrative_temperature,
            max_tokens=settings.narrative_max_tokens,
        )
    else:
        logger.info("narrative_model_disabled", reason="no OPENAI_API_KEY")

    return FallbackNarrativeGenerator(primary, timeout_seconds=settings.narrative_timeout_seconds)


@lru_cache
def get_narrative_generator() -> FallbackNarrativeGenerator:
    return build_narrative_generator(get_settings())
