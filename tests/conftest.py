"""
Shared fixtures: in-memory stores standing in for the SQLAlchemy ones.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import pytest

from app.schemas.baseline import Baseline
from app.schemas.waste import AnalysisResult, Department, ScoredWasteEvent, WasteEvent


class InMemoryBaselineStore:
    def __init__(self):
        self._rows: dict[tuple[str, Department], Baseline] = {}
        self.fail: Optional[Exception] = None
        self.commits = 0

    def seed(self, *baselines: Baseline) -> None:
        for b in baselines:
            self._rows[(b.tenant_id, b.department)] = b

    async def find_baseline(self, tenant_id, department):
        if self.fail:
            raise self.fail
        return self._rows.get((tenant_id, department))

    async def upsert_baseline(self, baseline):
        self._rows[(baseline.tenant_id, baseline.department)] = baseline
        return baseline

    async def list_baselines(self, tenant_id):
        rows = [b for (t, _), b in self._rows.items() if t == tenant_id]
        return sorted(rows, key=lambda b: b.department.value)

    async def delete_baseline(self, tenant_id, department):
        return self._rows.pop((tenant_id, department), None) is not None

    async def commit(self):
        self.commits += 1


class InMemoryWasteStore:
    def __init__(self):
        self.history: list[WasteEvent] = []
        self.stored: list[ScoredWasteEvent] = []
        self.last_since: Optional[datetime] = None
        self.fail: Optional[Exception] = None
        self.commits = 0

    def seed(self, *events: WasteEvent) -> None:
        self.history.extend(events)

    async def find_recent_events(self, tenant_id, department, since):
        if self.fail:
            raise self.fail
        self.last_since = since
        return [
            e for e in self.history
            if e.tenant_id == tenant_id and e.department == department and e.timestamp >= since
        ]

    async def add_event(self, event: WasteEvent, analysis: AnalysisResult, user_id=None):
        scored = ScoredWasteEvent(
            id=str(uuid.uuid4()),
            user_id=user_id,
            analysis=analysis,
            **event.model_dump(),
        )
        self.stored.append(scored)
        return scored

    async def list_events(self, tenant_id, department=None, start=None, end=None, limit=100):
        rows = [
            s for s in self.stored
            if s.tenant_id == tenant_id
            and (department is None or s.department == department)
            and (start is None or s.timestamp >= start)
            and (end is None or s.timestamp <= end)
        ]
        rows.sort(key=lambda s: s.timestamp, reverse=True)
        return rows[:limit]

    async def list_alerts(self, tenant_id, since=None, limit=50):
        rows = [
            s for s in self.stored
            if s.tenant_id == tenant_id
            and s.analysis.anomaly_detected
            and (since is None or s.timestamp >= since)
        ]
        rows.sort(key=lambda s: s.timestamp, reverse=True)
        return rows[:limit]

    async def commit(self):
        self.commits += 1


@pytest.fixture
def baseline_store() -> InMemoryBaselineStore:
    return InMemoryBaselineStore()


@pytest.fixture
def waste_store() -> InMemoryWasteStore:
    return InMemoryWasteStore()
