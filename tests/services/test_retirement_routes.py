"""Retirement Routes — evaluate endpoint, sweep endpoint, and health probes."""

import uuid
from datetime import date


async def test_evaluate_endpoint_reports_deleted(client, seed_rule, rule_exists):
    rule = await seed_rule(start_date=date(2025, 1, 2), end_date=date(2025, 1, 1))
    res = await client.post(f"/api/v1/repeating-sessions/{rule.id}/evaluate")
    assert res.status_code == 200
    assert res.json() == {"rule_id": str(rule.id), "outcome": "deleted"}
    assert not await rule_exists(rule.id)


async def test_evaluate_endpoint_reports_kept(client, seed_rule):
    rule = await seed_rule()
    res = await client.post(f"/api/v1/repeating-sessions/{rule.id}/evaluate")
    assert res.json()["outcome"] == "kept"


async def test_evaluate_missing_rule_is_not_an_error(client):
    res = await client.post(f"/api/v1/repeating-sessions/{uuid.uuid4()}/evaluate")
    assert res.status_code == 200
    assert res.json()["outcome"] == "not_found"


async def test_evaluate_malformed_rule_returns_structured_422(client, seed_rule):
    rule = await seed_rule(frequency="weekly", day_of_week=None)
    res = await client.post(f"/api/v1/repeating-sessions/{rule.id}/evaluate")
    assert res.status_code == 422
    error = res.json()["error"]
    assert error["code"] == "MALFORMED_RULE"
    assert error["category"] == "validation"
    assert error["context"]["rule_id"] == str(rule.id)


async def test_evaluate_unknown_zone_names_rule_in_422(client, seed_rule):
    rule = await seed_rule(timezone="Not/AZone")
    res = await client.post(f"/api/v1/repeating-sessions/{rule.id}/evaluate")
    assert res.status_code == 422
    context = res.json()["error"]["context"]
    assert context == {"rule_id": str(rule.id), "user_id": str(rule.user_id)}


async def test_evaluate_rejects_non_uuid(client, test_manager):
    res = await client.post("/api/v1/repeating-sessions/not-a-uuid/evaluate")
    assert res.status_code == 400


async def test_sweep_endpoint_returns_counts(client, seed_rule, seed_exception):
    done = await seed_rule(start_date=date(2025, 1, 1), end_date=date(2025, 1, 1))
    await seed_exception(done, date(2025, 1, 1))
    await seed_rule()
    broken = await seed_rule(frequency="weekly", day_of_week=None)

    res = await client.post("/api/v1/retirement/sweep")

    assert res.status_code == 200
    assert res.json() == {
        "deleted": 1, "kept": 2, "not_found": 0, "failed": 1,
        "failed_rule_ids": [str(broken.id)],
    }


async def test_health_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_health_readiness_with_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_health_readiness_without_database(client, monkeypatch):
    import taskwatch.infrastructure.database as db_module
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
