"""
POST /v1/waste          → analyse + persist a waste event
GET  /v1/waste          → list events for the caller's tenant
GET  /v1/waste/alerts   → anomalous events

An event is stored only after its analysis succeeded. If analysis
fails the submission is rejected and nothing is written.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_analysis_engine, get_waste_store
from app.core.auth import get_tenant_id, verify_token
from app.schemas.waste import Department, ScoredWasteEvent, WasteEvent, WasteEventCreate, as_utc
from app.scoring.engine import WasteAnalysisEngine
from app.services.event_publisher import publish_waste_event
from app.services.stores import WasteEventStore

logger = structlog.get_logger()
router = APIRouter(prefix="/v1/waste", tags=["waste"])

ACTIVE_ALERT_WINDOW = timedelta(days=7)


@router.post(
    "",
    response_model=ScoredWasteEvent,
    status_code=201,
    summary="Log a waste event",
    description="Scores the event, generates a narrative, then persists event + analysis.",
)
async def log_waste_event(
    payload: WasteEventCreate,
    tenant_id: str = Depends(get_tenant_id),
    token_payload: dict = Depends(verify_token),
    engine: WasteAnalysisEngine = Depends(get_analysis_engine),
    store: WasteEventStore = Depends(get_waste_store),
) -> ScoredWasteEvent:
    event = WasteEvent.from_request(tenant_id, payload)
    user_id = token_payload.get("sub")

    logger.info(
        "waste_analysis_started",
        tenant_id=tenant_id,
        department=event.department.value,
        waste_type=event.waste_type.value,
        caller=user_id or "unknown",
    )

    # ── Analyse ──
    try:
        analysis = await engine.analyze(event, tenant_id)
    except Exception as e:
        logger.error("waste_analysis_failed", tenant_id=tenant_id, error=str(e))
        raise HTTPException(status_code=500, detail=f"Waste analysis failed: {e}")

    # ── Persist ──
    scored = await store.add_event(event, analysis, user_id=user_id)
    await store.commit()

    # ── Publish to Kafka (fire-and-forget) ──
    await publish_waste_event(scored)

    return scored


@router.get("", response_model=list[ScoredWasteEvent], summary="List waste events")
async def list_waste_events(
    department: Optional[Department] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=500),
    tenant_id: str = Depends(get_tenant_id),
    store: WasteEventStore = Depends(get_waste_store),
) -> list[ScoredWasteEvent]:
    start = as_utc(start_date) if start_date else None
    end = as_utc(end_date) if end_date else None
    return await store.list_events(
        tenant_id, department=department, start=start, end=end, limit=limit,
    )


@router.get("/alerts", response_model=list[ScoredWasteEvent], summary="List anomalous events")
async def list_alerts(
    status: Literal["active", "all"] = "active",
    tenant_id: str = Depends(get_tenant_id),
    store: WasteEventStore = Depends(get_waste_store),
) -> list[ScoredWasteEvent]:
    since = None
    if status == "active":
        since = datetime.now(timezone.utc) - ACTIVE_ALERT_WINDOW
    return await store.list_alerts(tenant_id, since=since, limit=50)


@router.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "service": "waste-risk-engine"}
