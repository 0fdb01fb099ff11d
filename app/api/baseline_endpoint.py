"""
Department baselines — configuration owned by tenant administrators.

POST   /v1/baselines               → create or replace (keyed on tenant + department)
GET    /v1/baselines               → list, ordered by department
DELETE /v1/baselines/{department}  → remove

Changing a baseline affects future events only; stored analyses are
never recomputed.
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_baseline_store
from app.core.auth import get_tenant_id, verify_token
from app.schemas.baseline import Baseline, BaselineUpsert
from app.schemas.waste import Department
from app.services.stores import BaselineStore

logger = structlog.get_logger()
router = APIRouter(prefix="/v1/baselines", tags=["baselines"])


@router.post("", response_model=Baseline, status_code=201, summary="Create or update a department baseline")
async def upsert_baseline(
    payload: BaselineUpsert,
    tenant_id: str = Depends(get_tenant_id),
    token: dict = Depends(verify_token),
    store: BaselineStore = Depends(get_baseline_store),
) -> Baseline:
    baseline = Baseline(tenant_id=tenant_id, **payload.model_dump())
    saved = await store.upsert_baseline(baseline)
    await store.commit()

    logger.info(
        "baseline_saved",
        tenant_id=tenant_id,
        department=baseline.department.value,
        expected_daily=baseline.expected_daily,
        changed_by=token.get("sub", "unknown"),
    )
    return saved


@router.get("", response_model=list[Baseline], summary="List department baselines")
async def list_baselines(
    tenant_id: str = Depends(get_tenant_id),
    store: BaselineStore = Depends(get_baseline_store),
) -> list[Baseline]:
    return await store.list_baselines(tenant_id)


@router.delete("/{department}", summary="Delete a department baseline")
async def delete_baseline(
    department: Department,
    tenant_id: str = Depends(get_tenant_id),
    token: dict = Depends(verify_token),
    store: BaselineStore = Depends(get_baseline_store),
):
    deleted = await store.delete_baseline(tenant_id, department)
    if not deleted:
        raise HTTPException(404, "Baseline not found")
    await store.commit()

    logger.info(
        "baseline_deleted",
        tenant_id=tenant_id,
        department=department.value,
        changed_by=token.get("sub", "unknown"),
    )
    return {"status": "deleted", "department": department.value}
