"""
Baseline + event history stores.

The engine depends only on the two Protocols. The SQLAlchemy classes
are the production implementations; neither commits. The endpoint
owns the transaction.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Protocol, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.waste_records import DepartmentBaseline, WasteEventRecord
from app.schemas.baseline import Baseline
from app.schemas.waste import AnalysisResult, Department, ScoredWasteEvent, WasteEvent

MAX_LIST_LIMIT = 500


class BaselineStore(Protocol):
    async def find_baseline(self, tenant_id: str, department: Department) -> Optional[Baseline]: ...

    async def upsert_baseline(self, baseline: Baseline) -> Baseline: ...

    async def list_baselines(self, tenant_id: str) -> list[Baseline]: ...

    async def delete_baseline(self, tenant_id: str, department: Department) -> bool: ...

    async def commit(self) -> None: ...


class WasteEventStore(Protocol):
    async def find_recent_events(
        self, tenant_id: str, department: Department, since: datetime,
    ) -> Sequence[WasteEvent]: ...

    async def add_event(
        self, event: WasteEvent, analysis: AnalysisResult, user_id: Optional[str] = None,
    ) -> ScoredWasteEvent: ...

    async def list_events(
        self,
        tenant_id: str,
        department: Optional[Department] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 100,
    ) -> list[ScoredWasteEvent]: ...

    async def list_alerts(
        self, tenant_id: str, since: Optional[datetime] = None, limit: int = 50,
    ) -> list[ScoredWasteEvent]: ...

    async def commit(self) -> None: ...


# ═══════════════════════════════════════════════════════════════
# SQLAlchemy implementations
# ═══════════════════════════════════════════════════════════════

class SqlBaselineStore:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_baseline(self, tenant_id: str, department: Department) -> Optional[Baseline]:
        stmt = select(DepartmentBaseline).where(
            DepartmentBaseline.tenant_id == tenant_id,
            DepartmentBaseline.department == department.value,
        )
        row = (await self._db.execute(stmt)).scalar_one_or_none()
        return row.to_baseline() if row else None

    async def upsert_baseline(self, baseline: Baseline) -> Baseline:
        values = baseline.model_dump(mode="json")
        updates = {k: v for k, v in values.items() if k not in ("tenant_id", "department")}
        updates["updated_at"] = func.now()
        stmt = (
            pg_insert(DepartmentBaseline)
            .values(**values)
            .on_conflict_do_update(
                constraint="uq_department_baseline_tenant_department",
                set_=updates,
            )
        )
        await self._db.execute(stmt)
        return baseline

    async def list_baselines(self, tenant_id: str) -> list[Baseline]:
        stmt = (
            select(DepartmentBaseline)
            .where(DepartmentBaseline.tenant_id == tenant_id)
            .order_by(DepartmentBaseline.department)
        )
        result = await self._db.execute(stmt)
        return [row.to_baseline() for row in result.scalars()]

    async def delete_baseline(self, tenant_id: str, department: Department) -> bool:
        stmt = delete(DepartmentBaseline).where(
            DepartmentBaseline.tenant_id == tenant_id,
            DepartmentBaseline.department == department.value,
        )
        result = await self._db.execute(stmt)
        return result.rowcount > 0

    async def commit(self) -> None:
        await self._db.commit()


class SqlWasteEventStore:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_recent_events(
        self, tenant_id: str, department: Department, since: datetime,
    ) -> list[WasteEvent]:
        stmt = select(WasteEventRecord).where(
            WasteEventRecord.tenant_id == tenant_id,
            WasteEventRecord.department == department.value,
            WasteEventRecord.timestamp >= since,
        ).order_by(WasteEventRecord.timestamp)
        result = await self._db.execute(stmt)
        return [row.to_event() for row in result.scalars()]

    async def add_event(
        self, event: WasteEvent, analysis: AnalysisResult, user_id: Optional[str] = None,
    ) -> ScoredWasteEvent:
        record = WasteEventRecord.from_scored(str(uuid.uuid4()), event, analysis, user_id)
        self._db.add(record)
        await self._db.flush()
        return record.to_scored()

    async def list_events(
        self,
        tenant_id: str,
        department: Optional[Department] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 100,
    ) -> list[ScoredWasteEvent]:
        stmt = select(WasteEventRecord).where(WasteEventRecord.tenant_id == tenant_id)
        if department is not None:
            stmt = stmt.where(WasteEventRecord.department == department.value)
        if start is not None:
            stmt = stmt.where(WasteEventRecord.timestamp >= start)
        if end is not None:
            stmt = stmt.where(WasteEventRecord.timestamp <= end)
        stmt = stmt.order_by(WasteEventRecord.timestamp.desc()).limit(min(limit, MAX_LIST_LIMIT))
        result = await self._db.execute(stmt)
        return [row.to_scored() for row in result.scalars()]

    async def list_alerts(
        self, tenant_id: str, since: Optional[datetime] = None, limit: int = 50,
    ) -> list[ScoredWasteEvent]:
        stmt = select(WasteEventRecord).where(
            WasteEventRecord.tenant_id == tenant_id,
            WasteEventRecord.anomaly_detected.is_(True),
        )
        if since is not None:
            stmt = stmt.where(WasteEventRecord.timestamp >= since)
        stmt = stmt.order_by(WasteEventRecord.timestamp.desc()).limit(min(limit, MAX_LIST_LIMIT))
        result = await self._db.execute(stmt)
        return [row.to_scored() for row in result.scalars()]

    async def commit(self) -> None:
        await self._db.commit()
