"""
Waste event payloads and analysis output.

Departments submit one event per disposal. The engine scores it,
attaches an AnalysisResult, and only then is the event persisted.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Enums matching the hospital domain ──

class Department(str, Enum):
    EMERGENCY = "Emergency"
    SURGERY = "Surgery"
    ICU = "ICU"
    PEDIATRICS = "Pediatrics"
    ONCOLOGY = "Oncology"
    RADIOLOGY = "Radiology"
    LABORATORY = "Laboratory"
    PHARMACY = "Pharmacy"
    GENERAL_WARD = "General Ward"
    OUTPATIENT = "Outpatient"


class WasteType(str, Enum):
    INFECTIOUS = "Infectious"
    PHARMACEUTICAL = "Pharmaceutical"
    SHARPS = "Sharps"
    CHEMICAL = "Chemical"
    RADIOACTIVE = "Radioactive"
    GENERAL = "General"
    RECYCLABLE = "Recyclable"


class ProcedureCategory(str, Enum):
    ROUTINE_CARE = "Routine Care"
    MINOR_PROCEDURE = "Minor Procedure"
    MAJOR_SURGERY = "Major Surgery"
    DIAGNOSTIC = "Diagnostic"
    TREATMENT = "Treatment"
    EMERGENCY_RESPONSE = "Emergency Response"
    CHEMOTHERAPY = "Chemotherapy"
    DIALYSIS = "Dialysis"


class DisposalMethod(str, Enum):
    INCINERATION = "Incineration"
    AUTOCLAVE = "Autoclave"
    CHEMICAL_TREATMENT = "Chemical Treatment"
    SECURE_LANDFILL = "Secure Landfill"
    RECYCLING = "Recycling"
    SPECIAL_HANDLING = "Special Handling"


class Shift(str, Enum):
    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    NIGHT = "Night"


class NarrativeSource(str, Enum):
    MODEL = "model"
    FALLBACK = "fallback"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Inbound ──

class WasteEventCreate(BaseModel):
    """POST /v1/waste body. Tenant and user come from the token, not the payload."""
    department: Department
    waste_type: WasteType
    quantity: float = Field(ge=0, description="Kilograms")
    procedure_category: ProcedureCategory
    disposal_method: DisposalMethod
    shift: Shift
    notes: Optional[str] = Field(None, max_length=2000)
    timestamp: Optional[datetime] = Field(None, description="Defaults to server time (UTC)")


class WasteEvent(BaseModel):
    """A single disposal event. Immutable once constructed."""
    model_config = ConfigDict(frozen=True)

    tenant_id: str
    department: Department
    waste_type: WasteType
    quantity: float = Field(ge=0)
    procedure_category: ProcedureCategory
    disposal_method: DisposalMethod
    shift: Shift
    notes: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("timestamp")
    @classmethod
    def timestamp_in_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @classmethod
    def from_request(cls, tenant_id: str, payload: WasteEventCreate) -> "WasteEvent":
        data = payload.model_dump(exclude_none=True)
        return cls(tenant_id=tenant_id, **data)


# ── Outbound ──

class Narrative(BaseModel):
    """
    Human-readable explanation for a scored event.

    Field aliases are the JSON contract requested from the language model:
    {"assessment", "recommendedAction", "alertMessage"}.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    assessment: str = Field(min_length=1)
    recommended_action: str = Field(min_length=1, alias="recommendedAction")
    alert_message: Optional[str] = Field(None, alias="alertMessage")
    source: NarrativeSource = NarrativeSource.MODEL

    @field_validator("assessment", "recommended_action")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("alert_message")
    @classmethod
    def blank_alert_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v


class AnalysisResult(BaseModel):
    """Scoring annex attached to a WasteEvent. Never recomputed."""
    model_config = ConfigDict(frozen=True)

    risk_score: int = Field(ge=0, le=100)
    anomaly_detected: bool
    assessment: str
    recommended_action: str
    alert_message: Optional[str] = None
    factors: list[str] = []
    narrative_source: NarrativeSource = NarrativeSource.FALLBACK


class ScoredWasteEvent(WasteEvent):
    """Persisted view: the event plus its analysis."""
    id: str
    user_id: Optional[str] = None
    analysis: AnalysisResult
