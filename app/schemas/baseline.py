"""
Department baselines — expected volume and thresholds per tenant.

One baseline per (tenant, department). A department without a baseline
is a valid state; the engine scores it as moderately risky.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.waste import Department


class BaselineUpsert(BaseModel):
    """POST /v1/baselines body."""
    department: Department
    expected_daily: float = Field(ge=0, description="Expected kg per day")
    anomaly_threshold: float = Field(70, ge=0, le=100)
    infectious_ratio: float = Field(30, ge=0, le=100, description="Expected % infectious")
    sharps_ratio: float = Field(15, ge=0, le=100, description="Expected % sharps")
    cost_per_kg: float = Field(2.5, ge=0)


class Baseline(BaselineUpsert):
    model_config = ConfigDict(frozen=True)

    tenant_id: str
