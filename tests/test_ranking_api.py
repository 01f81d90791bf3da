import asyncio

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.database import AsyncSessionLocal
from app.services import calculation
from app.services.calculation import CalculationStep, run_calculation
from conftest import create_student


@pytest.fixture
def weighted(client, auth_headers, criteria_ids):
    # all judgments equal -> every criterion weighs 0.2
    resp = client.post("/criteria/weights/calculate", headers=auth_headers)
    assert resp.json()["calculation"]["decision"] == "accepted"
    return criteria_ids


@pytest.fixture
def three_students(client, auth_headers, weighted):
    ani = create_student(client, auth_headers, "Ani", "1001", {cid: 80 for cid in weighted})
    budi = create_student(client, auth_headers, "Budi", "1002", {cid: 100 for cid in weighted})
    citra = create_student(client, auth_headers, "Citra", "1003", {cid: 90 for cid in weighted})
    return ani, budi, citra


def test_calculation_needs_weights(client, auth_headers, criteria_ids):
    create_student(client, auth_headers, "Ani", "1001", {cid: 80 for cid in criteria_ids})

    resp = client.post("/ranking/calculate", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "insufficient_data"


def test_calculation_needs_students(client, auth_headers, weighted):
    resp = client.post("/ranking/calculate", headers=auth_headers)
    assert resp.status_code == 400
    assert "No students" in resp.json()["detail"]["detail"]


def test_calculation_needs_score_coverage(client, auth_headers, weighted):
    create_student(client, auth_headers, "Ani", "1001", {weighted[0]: 80, weighted[1]: 70})
    create_student(client, auth_headers, "Budi", "1002", {})

    resp = client.post("/ranking/calculate", headers=auth_headers)
    assert resp.status_code == 400
    assert "2/10" in resp.json()["detail"]["detail"]


def test_ranking_run(client, auth_headers, three_students):
    resp = client.post("/ranking/calculate", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()

    assert data["saved"] is True
    assert data["warnings"] == []
    assert data["total_students"] == 3
    assert [r["name"] for r in data["results"]] == ["Budi", "Citra", "Ani"]
    assert [r["rank"] for r in data["results"]] == [1, 2, 3]
    assert [r["final_score"] for r in data["results"]] == pytest.approx([1.0, 0.9, 0.8])
    assert data["results"][2]["class"] == "9A"
    assert sum(data["weights"].values()) == pytest.approx(1.0)

    stored = client.get("/ranking/results", headers=auth_headers).json()
    assert stored["total_students"] == 3
    assert [r["name"] for r in stored["results"]] == ["Budi", "Citra", "Ani"]
    assert set(stored["results"][0]["criteria_scores"].values()) == {100.0}


def test_rerun_replaces_previous_results(client, auth_headers, three_students, weighted):
    client.post("/ranking/calculate", headers=auth_headers)
    ani = three_students[0]
    client.put(
        f"/students/{ani['id']}/scores",
        json={"scores": {str(cid): 100 for cid in weighted}},
        headers=auth_headers,
    )

    data = client.post("/ranking/calculate", headers=auth_headers).json()
    assert [r["name"] for r in data["results"]] == ["Ani", "Budi", "Citra"]

    stored = client.get("/ranking/results", headers=auth_headers).json()
    assert stored["total_students"] == 3
    assert [r["rank"] for r in stored["results"]] == [1, 2, 3]
    assert [r["name"] for r in stored["results"]] == ["Ani", "Budi", "Citra"]


def test_persistence_failure_still_returns_results(client, auth_headers, three_students, monkeypatch):
    client.post("/ranking/calculate", headers=auth_headers)

    async def failing_replace(db, results):
        raise SQLAlchemyError("database is unavailable")

    monkeypatch.setattr(calculation, "replace_results", failing_replace)

    resp = client.post("/ranking/calculate", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["saved"] is False
    assert [w["kind"] for w in data["warnings"]] == ["persistence_failure"]
    assert [r["name"] for r in data["results"]] == ["Budi", "Citra", "Ani"]

    # the previous ranking stays in place
    stored = client.get("/ranking/results", headers=auth_headers).json()
    assert stored["total_students"] == 3


def test_progress_is_reported_in_order(client, auth_headers, three_students):
    steps = []

    async def go():
        async with AsyncSessionLocal() as session:
            return await run_calculation(session, on_progress=steps.append)

    outcome = asyncio.run(go())

    assert outcome.saved is True
    assert steps == [
        CalculationStep.DATA_LOADED,
        CalculationStep.SCORES_COMPUTED,
        CalculationStep.RESULTS_SAVED,
    ]


def test_progress_stops_before_saving_on_failure(client, auth_headers, three_students, monkeypatch):
    async def failing_replace(db, results):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(calculation, "replace_results", failing_replace)
    steps = []

    async def go():
        async with AsyncSessionLocal() as session:
            return await run_calculation(session, on_progress=steps.append)

    outcome = asyncio.run(go())

    assert outcome.saved is False
    assert len(outcome.results) == 3
    assert steps == [CalculationStep.DATA_LOADED, CalculationStep.SCORES_COMPUTED]


def test_reset_clears_results(client, auth_headers, three_students):
    client.post("/ranking/calculate", headers=auth_headers)

    resp = client.delete("/ranking/results", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["deleted"] == 3
    assert client.get("/ranking/results", headers=auth_headers).json() == {
        "total_students": 0, "results": []
    }


def test_dashboard_counts(client, auth_headers, three_students):
    before = client.get("/dashboard", headers=auth_headers).json()
    assert before == {"students": 3, "criteria": 5, "calculations": 0, "top_students": 0}

    client.post("/ranking/calculate", headers=auth_headers)
    after = client.get("/dashboard", headers=auth_headers).json()
    assert after["calculations"] == 3
    assert after["top_students"] == 3
