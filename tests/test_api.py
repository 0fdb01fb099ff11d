"""
HTTP layer tests — FastAPI TestClient with in-memory stores.
"""
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_baseline_store, get_waste_store
from app.core.auth import verify_token
from app.main import app
from app.narrative.fallback import FallbackNarrativeGenerator, get_narrative_generator

CLAIMS = {"sub": "nurse-17", "organization_id": "HOSP-001"}


def _waste_payload(**kwargs) -> dict:
    payload = {
        "department": "ICU",
        "waste_type": "Infectious",
        "quantity": 12,
        "procedure_category": "Routine Care",
        "disposal_method": "Incineration",
        "shift": "Morning",
    }
    payload.update(kwargs)
    return payload


@pytest.fixture
def client(baseline_store, waste_store):
    app.dependency_overrides[verify_token] = lambda: dict(CLAIMS)
    app.dependency_overrides[get_baseline_store] = lambda: baseline_store
    app.dependency_overrides[get_waste_store] = lambda: waste_store
    app.dependency_overrides[get_narrative_generator] = lambda: FallbackNarrativeGenerator(None)
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestWasteEndpoint:

    def test_log_event_with_baseline(self, client, waste_store):
        resp = client.post("/v1/baselines", json={"department": "ICU", "expected_daily": 5})
        assert resp.status_code == 201

        resp = client.post("/v1/waste", json=_waste_payload())

        assert resp.status_code == 201
        body = resp.json()
        assert body["tenant_id"] == "HOSP-001"
        assert body["user_id"] == "nurse-17"
        assert body["analysis"]["risk_score"] == 70
        assert body["analysis"]["anomaly_detected"] is True
        assert body["analysis"]["alert_message"] == "Potential Anomaly in Infectious Waste Generation"
        assert body["analysis"]["factors"] == [
            "Quantity is 240% of expected baseline",
            "High-risk waste type: Infectious",
        ]
        assert len(waste_store.stored) == 1
        assert waste_store.commits == 1

    def test_log_event_without_baseline(self, client):
        resp = client.post("/v1/waste", json=_waste_payload(
            waste_type="Recyclable", quantity=1, disposal_method="Recycling",
        ))

        assert resp.status_code == 201
        analysis = resp.json()["analysis"]
        assert analysis["risk_score"] == 20
        assert analysis["anomaly_detected"] is False
        assert analysis["factors"] == ["No baseline data available for this department"]

    def test_analysis_failure_stores_nothing(self, client, baseline_store, waste_store):
        baseline_store.fail = RuntimeError("datastore unavailable")

        resp = client.post("/v1/waste", json=_waste_payload())

        assert resp.status_code == 500
        assert waste_store.stored == []
        assert waste_store.commits == 0

    def test_negative_quantity_rejected(self, client):
        resp = client.post("/v1/waste", json=_waste_payload(quantity=-1))
        assert resp.status_code == 422

    def test_unknown_department_rejected(self, client):
        resp = client.post("/v1/waste", json=_waste_payload(department="Cafeteria"))
        assert resp.status_code == 422

    def test_list_and_alerts(self, client):
        client.post("/v1/baselines", json={"department": "ICU", "expected_daily": 5})
        client.post("/v1/waste", json=_waste_payload())
        client.post("/v1/waste", json=_waste_payload(quantity=1))

        events = client.get("/v1/waste").json()
        alerts = client.get("/v1/waste/alerts").json()

        assert len(events) == 2
        assert len(alerts) == 1
        assert alerts[0]["analysis"]["anomaly_detected"] is True

    def test_list_filters_by_department(self, client):
        client.post("/v1/waste", json=_waste_payload())
        client.post("/v1/waste", json=_waste_payload(department="Pharmacy"))

        events = client.get("/v1/waste", params={"department": "Pharmacy"}).json()

        assert [e["department"] for e in events] == ["Pharmacy"]


class TestBaselineEndpoint:

    def test_upsert_is_idempotent(self, client):
        client.post("/v1/baselines", json={"department": "Surgery", "expected_daily": 10})
        client.post("/v1/baselines", json={"department": "Surgery", "expected_daily": 12})

        baselines = client.get("/v1/baselines").json()

        assert len(baselines) == 1
        assert baselines[0]["expected_daily"] == 12
        assert baselines[0]["anomaly_threshold"] == 70
        assert baselines[0]["cost_per_kg"] == 2.5

    def test_threshold_out_of_range_rejected(self, client):
        resp = client.post(
            "/v1/baselines", json={"department": "Surgery", "expected_daily": 10, "anomaly_threshold": 120},
        )
        assert resp.status_code == 422

    def test_delete(self, client):
        client.post("/v1/baselines", json={"department": "ICU", "expected_daily": 5})

        assert client.delete("/v1/baselines/ICU").status_code == 200
        assert client.delete("/v1/baselines/ICU").status_code == 404

    def test_baseline_change_does_not_rescore_stored_events(self, client, waste_store):
        client.post("/v1/baselines", json={"department": "ICU", "expected_daily": 5})
        client.post("/v1/waste", json=_waste_payload())
        client.post("/v1/baselines", json={"department": "ICU", "expected_daily": 50})

        stored = client.get("/v1/waste").json()
        assert stored[0]["analysis"]["risk_score"] == 70


class TestHealth:

    def test_health(self, client):
        resp = client.get("/v1/waste/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestTimestamps:

    def test_naive_timestamp_and_bounds_are_treated_as_utc(self, client):
        client.post("/v1/waste", json=_waste_payload(timestamp="2026-10-18T08:00:00"))
        client.post("/v1/waste", json=_waste_payload(timestamp="2026-10-16T08:00:00+02:00"))

        events = client.get("/v1/waste", params={
            "start_date": "2026-10-18T00:00:00",
            "end_date": "2026-10-18T23:59:59+00:00",
        })

        assert events.status_code == 200
        assert len(events.json()) == 1
