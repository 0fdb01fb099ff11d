"""
Persistent tables — scored waste events and department baselines.
Schema: waste_risk_engine
"""
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, Float, Index, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase

from app.schemas.baseline import Baseline
from app.schemas.waste import (
    AnalysisResult, Department, DisposalMethod, NarrativeSource, ProcedureCategory,
    ScoredWasteEvent, Shift, WasteEvent, WasteType,
)

SCHEMA = "waste_risk_engine"


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WasteEventRecord(Base):
    __tablename__ = "waste_event"
    __table_args__ = (
        Index("ix_waste_event_tenant_timestamp", "tenant_id", "timestamp"),
        Index("ix_waste_event_tenant_department_timestamp", "tenant_id", "department", "timestamp"),
        Index("ix_waste_event_anomaly", "tenant_id", "anomaly_detected"),
        {"schema": SCHEMA},
    )

    id = Column(String(36), primary_key=True)
    tenant_id = Column(String(100), nullable=False, index=True)
    user_id = Column(String(100), nullable=True)

    # ── Event ──
    department = Column(String(32), nullable=False)
    waste_type = Column(String(32), nullable=False)
    quantity = Column(Float, nullable=False)
    procedure_category = Column(String(32), nullable=False)
    disposal_method = Column(String(32), nullable=False)
    shift = Column(String(16), nullable=False)
    notes = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    # ── Analysis annex (written once, never updated) ──
    risk_score = Column(Integer, nullable=False)
    anomaly_detected = Column(Boolean, nullable=False, default=False)
    assessment = Column(Text, nullable=False)
    recommended_action = Column(Text, nullable=False)
    alert_message = Column(Text, nullable=True)
    factors_json = Column(JSON, nullable=False)
    narrative_source = Column(String(16), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    @classmethod
    def from_scored(cls, event_id: str, event: WasteEvent, analysis: AnalysisResult, user_id=None):
        return cls(
            id=event_id,
            tenant_id=event.tenant_id,
            user_id=user_id,
            department=event.department.value,
            waste_type=event.waste_type.value,
            quantity=event.quantity,
            procedure_category=event.procedure_category.value,
            disposal_method=event.disposal_method.value,
            shift=event.shift.value,
            notes=event.notes,
            timestamp=event.timestamp,
            risk_score=analysis.risk_score,
            anomaly_detected=analysis.anomaly_detected,
            assessment=analysis.assessment,
            recommended_action=analysis.recommended_action,
            alert_message=analysis.alert_message,
            factors_json=list(analysis.factors),
            narrative_source=analysis.narrative_source.value,
        )

    def _event_fields(self) -> dict:
        return dict(
            tenant_id=self.tenant_id,
            department=Department(self.department),
            waste_type=WasteType(self.waste_type),
            quantity=self.quantity,
            procedure_category=ProcedureCategory(self.procedure_category),
            disposal_method=DisposalMethod(self.disposal_method),
            shift=Shift(self.shift),
            notes=self.notes,
            timestamp=self.timestamp,
        )

    def to_event(self) -> WasteEvent:
        return WasteEvent(**self._event_fields())

    def to_scored(self) -> ScoredWasteEvent:
        return ScoredWasteEvent(
            id=self.id,
            user_id=self.user_id,
            analysis=AnalysisResult(
                risk_score=self.risk_score,
                anomaly_detected=self.anomaly_detected,
                assessment=self.assessment,
                recommended_action=self.recommended_action,
                alert_message=self.alert_message,
                factors=list(self.factors_json or []),
                narrative_source=NarrativeSource(self.narrative_source),
            ),
            **self._event_fields(),
        )

    def __repr__(self):
        return f"<WasteEventRecord {self.id} {self.department}/{self.waste_type} score={self.risk_score}>"


class DepartmentBaseline(Base):
    __tablename__ = "department_baseline"
    __table_args__ = (
        UniqueConstraint("tenant_id", "department", name="uq_department_baseline_tenant_department"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(100), nullable=False, index=True)
    department = Column(String(32), nullable=False)

    expected_daily = Column(Float, nullable=False)
    anomaly_threshold = Column(Float, nullable=False, default=70)
    infectious_ratio = Column(Float, nullable=False, default=30)
    sharps_ratio = Column(Float, nullable=False, default=15)
    cost_per_kg = Column(Float, nullable=False, default=2.5)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def to_baseline(self) -> Baseline:
        return Baseline(
            tenant_id=self.tenant_id,
            department=Department(self.department),
            expected_daily=self.expected_daily,
            anomaly_threshold=self.anomaly_threshold,
            infectious_ratio=self.infectious_ratio,
            sharps_ratio=self.sharps_ratio,
            cost_per_kg=self.cost_per_kg,
        )

    def __repr__(self):
        return f"<DepartmentBaseline {self.tenant_id}/{self.department} expected={self.expected_daily}>"
