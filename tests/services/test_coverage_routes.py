"""Coverage Write Routes — writes commit, then triggers retire completed rules.

Invariants:
    - POST /history with a confirmation link retires a rule it completes
    - POST /repeating-exceptions retires a rule it completes
    - PATCH /history re-triggers only when the confirmation link changed
    - PATCH /history answers 400 for nulls in required fields and for a merged
      entry that create would reject
    - A failing retirement never changes the write's 201/200 response

Design Decisions:
    - Background tasks run before the httpx test client returns (FastAPI behavior)
      so we can assert DB state after the response
"""

import uuid
from datetime import date

from taskwatch.config import get_settings
from taskwatch.core.domain_types import RetirementOutcome
from taskwatch.services.retirement_evaluator import RetirementEvaluator


def _history_body(rule, day: int, **overrides) -> dict:
    body = {
        "user_id": str(rule.user_id),
        "task_name": "Morning pages",
        "started_at": f"2025-01-{day:02d}T09:00:00Z",
        "ended_at": f"2025-01-{day:02d}T09:30:00Z",
        "repeating_session_id": str(rule.id),
        "original_time": f"2025-01-{day:02d}T09:00:00Z",
    }
    body.update(overrides)
    return body


async def test_confirmation_completing_rule_retires_it(
    client, seed_rule, seed_exception, rule_exists,
):
    rule = await seed_rule()
    await seed_exception(rule, date(2025, 1, 1))
    await seed_exception(rule, date(2025, 1, 2))

    res = await client.post("/api/v1/history", json=_history_body(rule, 3))

    assert res.status_code == 201
    assert res.json()["repeating_session_id"] == str(rule.id)
    assert not await rule_exists(rule.id)


async def test_partial_confirmation_keeps_rule(client, seed_rule, rule_exists):
    rule = await seed_rule()
    res = await client.post("/api/v1/history", json=_history_body(rule, 1))
    assert res.status_code == 201
    assert await rule_exists(rule.id)


async def test_offset_timestamps_are_normalized_before_matching(
    client, seed_rule, rule_exists,
):
    rule = await seed_rule(start_date=date(2025, 1, 1), end_date=date(2025, 1, 1))
    body = _history_body(
        rule, 1,
        started_at="2025-01-01T10:00:00+01:00",
        ended_at="2025-01-01T10:30:00+01:00",
        original_time="2025-01-01T10:00:00+01:00",
    )
    res = await client.post("/api/v1/history", json=body)
    assert res.status_code == 201
    assert not await rule_exists(rule.id)


async def test_unlinked_history_entry_is_plain_write(client, seed_rule, rule_exists):
    rule = await seed_rule()
    body = _history_body(rule, 1, repeating_session_id=None, original_time=None)
    res = await client.post("/api/v1/history", json=body)
    assert res.status_code == 201
    assert res.json()["repeating_session_id"] is None
    assert await rule_exists(rule.id)


async def test_history_requires_link_and_time_together(client, seed_rule):
    rule = await seed_rule()
    res = await client.post(
        "/api/v1/history", json=_history_body(rule, 1, original_time=None),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_history_rejects_naive_timestamps(client, seed_rule):
    rule = await seed_rule()
    res = await client.post(
        "/api/v1/history",
        json=_history_body(rule, 1, original_time="2025-01-01T09:00:00"),
    )
    assert res.status_code == 400


async def test_exception_completing_rule_retires_it(client, seed_rule, rule_exists):
    rule = await seed_rule(start_date=date(2025, 1, 1), end_date=date(2025, 1, 1))
    res = await client.post("/api/v1/repeating-exceptions", json={
        "user_id": str(rule.user_id),
        "routine_id": str(rule.id),
        "occurrence_date": "2025-01-01",
    })
    assert res.status_code == 201
    assert res.json()["action"] == "skipped"
    assert not await rule_exists(rule.id)


async def test_rescheduled_exception_covers_occurrence(client, seed_rule, rule_exists):
    rule = await seed_rule(start_date=date(2025, 1, 1), end_date=date(2025, 1, 1))
    res = await client.post("/api/v1/repeating-exceptions", json={
        "user_id": str(rule.user_id),
        "routine_id": str(rule.id),
        "occurrence_date": "2025-01-01",
        "action": "rescheduled",
        "new_started_at": "2025-01-01T18:00:00Z",
        "new_ended_at": "2025-01-01T19:00:00Z",
    })
    assert res.status_code == 201
    assert not await rule_exists(rule.id)


async def test_skipped_exception_cannot_carry_new_times(client, seed_rule):
    rule = await seed_rule()
    res = await client.post("/api/v1/repeating-exceptions", json={
        "user_id": str(rule.user_id),
        "routine_id": str(rule.id),
        "occurrence_date": "2025-01-01",
        "new_started_at": "2025-01-01T18:00:00Z",
    })
    assert res.status_code == 400


async def test_exception_with_unknown_action_is_rejected(client, seed_rule):
    rule = await seed_rule()
    res = await client.post("/api/v1/repeating-exceptions", json={
        "user_id": str(rule.user_id),
        "routine_id": str(rule.id),
        "occurrence_date": "2025-01-01",
        "action": "cancelled",
    })
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "body.action"


async def test_patch_moving_confirmation_onto_last_occurrence_retires_rule(
    client, seed_rule, seed_exception, rule_exists,
):
    rule = await seed_rule()
    await seed_exception(rule, date(2025, 1, 1))
    await seed_exception(rule, date(2025, 1, 2))
    res = await client.post(
        "/api/v1/history",
        json=_history_body(rule, 3, original_time="2025-01-03T08:00:00Z"),
    )
    entry_id = res.json()["id"]
    assert await rule_exists(rule.id)

    res = await client.patch(
        f"/api/v1/history/{entry_id}",
        json={"original_time": "2025-01-03T09:00:00Z"},
    )

    assert res.status_code == 200
    assert not await rule_exists(rule.id)


async def test_patch_without_link_change_does_not_trigger(
    client, seed_rule, monkeypatch,
):
    rule = await seed_rule()
    res = await client.post("/api/v1/history", json=_history_body(rule, 1))
    calls = []

    async def spy(self, rule_id):
        calls.append(rule_id)
        return RetirementOutcome.KEPT

    monkeypatch.setattr(RetirementEvaluator, "evaluate", spy)
    res = await client.patch(
        f"/api/v1/history/{res.json()['id']}", json={"task_name": "Journal"},
    )
    assert res.status_code == 200
    assert res.json()["task_name"] == "Journal"
    assert calls == []


async def test_patch_unknown_entry_returns_404(client, test_manager):
    res = await client.patch(
        f"/api/v1/history/{uuid.uuid4()}", json={"task_name": "x"},
    )
    assert res.status_code == 404


async def test_failing_retirement_does_not_fail_write(
    client, seed_rule, monkeypatch, rule_exists,
):
    rule = await seed_rule()

    async def explode(self, rule_id):
        raise RuntimeError("evaluator down")

    monkeypatch.setattr(RetirementEvaluator, "evaluate", explode)
    res = await client.post("/api/v1/history", json=_history_body(rule, 1))
    assert res.status_code == 201
    assert await rule_exists(rule.id)


async def test_disabled_triggers_leave_rule_for_sweep(
    client, seed_rule, monkeypatch, rule_exists,
):
    rule = await seed_rule(start_date=date(2025, 1, 1), end_date=date(2025, 1, 1))
    monkeypatch.setattr(get_settings(), "retirement_triggers_enabled", False)
    res = await client.post("/api/v1/history", json=_history_body(rule, 1))
    assert res.status_code == 201
    assert await rule_exists(rule.id)


async def test_patch_rejects_null_for_required_fields(client, seed_rule):
    rule = await seed_rule()
    res = await client.post("/api/v1/history", json=_history_body(rule, 1))
    entry_id = res.json()["id"]

    for field in ("task_name", "started_at", "ended_at"):
        res = await client.patch(f"/api/v1/history/{entry_id}", json={field: None})
        assert res.status_code == 400
        error = res.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["field"] == f"body.{field}"


async def test_patch_rejects_end_before_stored_start(client, seed_rule):
    rule = await seed_rule()
    res = await client.post("/api/v1/history", json=_history_body(rule, 1))

    res = await client.patch(
        f"/api/v1/history/{res.json()['id']}",
        json={"ended_at": "2024-01-01T00:00:00Z"},
    )

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_patch_cannot_drop_original_time_from_linked_entry(
    client, seed_rule,
):
    rule = await seed_rule()
    res = await client.post("/api/v1/history", json=_history_body(rule, 1))
    entry_id = res.json()["id"]

    res = await client.patch(
        f"/api/v1/history/{entry_id}", json={"original_time": None},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"

    res = await client.patch(
        f"/api/v1/history/{entry_id}",
        json={"repeating_session_id": None, "original_time": None},
    )
    assert res.status_code == 200
    assert res.json()["repeating_session_id"] is None
