from __future__ import annotations

import asyncio
from uuid import uuid4

import httpx
import pytest

from parentai.sleep_insights import INSIGHTS_UNAVAILABLE, NOT_ENOUGH_SESSIONS
from parentai.trackers import FEEDING, FEATURE_TABLES, list_records

FEATURE_PAYLOADS = {
    "feeding": (
        {
            "feeding_type": "bottle",
            "amount": "4 oz",
            "duration_minutes": 15,
            "food_items": "formula, water",
            "notes": "Finished the bottle",
            "fed_at": "2025-03-01T08:30:00+00:00",
        },
        {"feeding_type": "bottle", "amount": "4 oz", "food_items": ["formula", "water"]},
    ),
    "sleep": (
        {
            "sleep_start": "2025-03-01T13:00:00+00:00",
            "sleep_end": "2025-03-01T14:35:00+00:00",
            "sleep_quality": "good",
        },
        {"duration_minutes": 95, "sleep_quality": "good"},
    ),
    "growth": (
        {"measurement_date": "2025-03-01", "height_cm": 62.5, "weight_kg": 6.1},
        {"measurement_date": "2025-03-01", "height_cm": 62.5, "weight_kg": 6.1},
    ),
    "vaccines": (
        {"vaccine_name": "DTaP", "scheduled_date": "2025-04-01", "provider": "Dr. Lee"},
        {"vaccine_name": "DTaP", "scheduled_date": "2025-04-01", "provider": "Dr. Lee"},
    ),
    "photos": (
        {"photo_url": "https://example.com/first-smile.jpg", "caption": "First smile", "date_taken": "2025-02-14"},
        {"photo_url": "https://example.com/first-smile.jpg", "caption": "First smile", "ai_tags": []},
    ),
    "doctor-notes": (
        {"visit_date": "2025-03-02", "reason": "Two-month checkup", "diagnosis": "Healthy"},
        {"reason": "Two-month checkup", "diagnosis": "Healthy", "prescriptions": []},
    ),
}


def test_every_feature_has_a_fixture() -> None:
    assert {feature.slug for feature in FEATURE_TABLES} == set(FEATURE_PAYLOADS)


@pytest.mark.parametrize("slug", sorted(FEATURE_PAYLOADS))
def test_insert_then_fetch_returns_record(client, child_id, slug) -> None:
    payload, expected = FEATURE_PAYLOADS[slug]

    created = client.post(f"/api/v1/children/{child_id}/{slug}", json=payload)
    assert created.status_code == 201, created.text
    record = created.json()
    assert record["child_id"] == child_id

    listed = client.get(f"/api/v1/children/{child_id}/{slug}")
    assert listed.status_code == 200
    rows = listed.json()
    assert [row["id"] for row in rows] == [record["id"]]
    for key, value in expected.items():
        assert rows[0][key] == value


@pytest.mark.parametrize("slug", sorted(FEATURE_PAYLOADS))
def test_delete_removes_record(client, child_id, slug) -> None:
    payload, _ = FEATURE_PAYLOADS[slug]
    keep = client.post(f"/api/v1/children/{child_id}/{slug}", json=payload).json()
    drop = client.post(f"/api/v1/children/{child_id}/{slug}", json=payload).json()

    resp = client.delete(f"/api/v1/children/{child_id}/{slug}/{drop['id']}")
    assert resp.status_code == 204

    remaining = client.get(f"/api/v1/children/{child_id}/{slug}").json()
    assert [row["id"] for row in remaining] == [keep["id"]]


def test_records_are_scoped_to_child(client, child_id) -> None:
    payload, _ = FEATURE_PAYLOADS["growth"]
    client.post(f"/api/v1/children/{child_id}/growth", json=payload)

    other = client.get(f"/api/v1/children/{uuid4()}/growth")
    assert other.status_code == 200
    assert other.json() == []


def test_feeding_logs_newest_first_and_capped(client, child_id, fake_supabase) -> None:
    for day in range(1, 23):
        client.post(
            f"/api/v1/children/{child_id}/feeding",
            json={"feeding_type": "snack", "fed_at": f"2025-03-{day:02d}T09:00:00+00:00"},
        )

    rows = client.get(f"/api/v1/children/{child_id}/feeding").json()
    assert len(rows) == 20
    assert rows[0]["fed_at"].startswith("2025-03-22")

    select_call = [call for call in fake_supabase.calls if call[0] == "select"][-1]
    assert select_call[1] == "feeding_logs"
    assert select_call[2]["order"] == "fed_at.desc"
    assert select_call[2]["limit"] == "20"


def test_vaccines_are_ordered_by_schedule_ascending(client, child_id) -> None:
    for scheduled in ["2025-06-01", "2025-04-01", "2025-05-01"]:
        client.post(
            f"/api/v1/children/{child_id}/vaccines",
            json={"vaccine_name": "Hep B", "scheduled_date": scheduled},
        )
    rows = client.get(f"/api/v1/children/{child_id}/vaccines").json()
    assert [row["scheduled_date"] for row in rows] == ["2025-04-01", "2025-05-01", "2025-06-01"]


def test_sleep_end_before_start_is_rejected(client, child_id, fake_supabase) -> None:
    resp = client.post(
        f"/api/v1/children/{child_id}/sleep",
        json={"sleep_start": "2025-03-01T14:00:00+00:00", "sleep_end": "2025-03-01T13:00:00+00:00"},
    )
    assert resp.status_code == 400
    assert fake_supabase.tables["sleep_logs"] == []


@pytest.mark.parametrize(
    "start,end",
    [
        ("2025-03-01T13:00:00Z", "2025-03-01T14:00:00"),
        ("2025-03-01T13:00:00", "2025-03-01T15:00:00+01:00"),
    ],
)
def test_sleep_accepts_naive_and_offset_times(client, child_id, start, end) -> None:
    resp = client.post(
        f"/api/v1/children/{child_id}/sleep",
        json={"sleep_start": start, "sleep_end": end},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["duration_minutes"] == 60


@pytest.mark.parametrize(
    "slug,payload",
    [
        ("vaccines", {"vaccine_name": "   "}),
        ("photos", {"date_taken": "2025-02-14"}),
        ("doctor-notes", {"visit_date": "2025-03-02"}),
        ("sleep", {"sleep_start": "2025-03-01T13:00:00+00:00"}),
        ("feeding", {"fed_at": "2025-03-01T08:30:00+00:00"}),
    ],
)
def test_missing_required_fields_are_rejected(client, child_id, slug, payload) -> None:
    resp = client.post(f"/api/v1/children/{child_id}/{slug}", json=payload)
    assert resp.status_code == 422


def test_invalid_child_id_is_rejected(client) -> None:
    resp = client.get("/api/v1/children/not-a-uuid/feeding")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid child_id."


def test_fetch_failure_degrades_to_empty_list(client, child_id, fake_supabase) -> None:
    fake_supabase.fail_selects = True
    resp = client.get(f"/api/v1/children/{child_id}/sleep")
    assert resp.status_code == 200
    assert resp.json() == []


def test_network_error_degrades_to_empty_list(child_id) -> None:
    class Unreachable:
        async def select(self, table, params):
            raise httpx.ConnectError("connection refused")

    assert asyncio.run(list_records(Unreachable(), FEEDING, child_id)) == []


def _log_sleep(client, child_id, day, quality=None) -> None:
    resp = client.post(
        f"/api/v1/children/{child_id}/sleep",
        json={
            "sleep_start": f"2025-03-{day:02d}T13:00:00+00:00",
            "sleep_end": f"2025-03-{day:02d}T14:00:00+00:00",
            "sleep_quality": quality,
        },
    )
    assert resp.status_code == 201, resp.text


def test_sleep_insights_need_three_sessions(client, child_id, fake_llm) -> None:
    _log_sleep(client, child_id, 1, "good")
    _log_sleep(client, child_id, 2, "good")

    resp = client.post(f"/api/v1/children/{child_id}/sleep/insights")
    assert resp.status_code == 200
    assert resp.json() == {"insights": NOT_ENOUGH_SESSIONS, "sessions_analyzed": 2, "used_fallback": False}
    assert fake_llm.calls == []


def test_sleep_insights_prompt_lists_sessions_newest_first(client, child_id, fake_llm) -> None:
    _log_sleep(client, child_id, 1, "good")
    _log_sleep(client, child_id, 2)
    _log_sleep(client, child_id, 3, "restless")

    resp = client.get(f"/api/v1/children/{child_id}/sleep/insights")
    assert resp.status_code == 200
    assert resp.json() == {
        "insights": "Try a consistent bedtime routine.",
        "sessions_analyzed": 3,
        "used_fallback": False,
    }

    prompt = fake_llm.calls[0]["messages"][-1]["content"]
    assert prompt == (
        "Sleep logs: Start: 2025-03-03 13:00, Duration: 60 min, Quality: restless; "
        "Start: 2025-03-02 13:00, Duration: 60 min, Quality: not rated; "
        "Start: 2025-03-01 13:00, Duration: 60 min, Quality: good. "
        "Provide insights on sleep patterns, average duration, quality trends, "
        "and recommendations for better sleep."
    )


def test_sleep_insights_fall_back_without_llm(client, child_id, no_llm_key) -> None:
    for day in (1, 2, 3):
        _log_sleep(client, child_id, day, "good")

    resp = client.post(f"/api/v1/children/{child_id}/sleep/insights")
    assert resp.status_code == 200
    assert resp.json() == {"insights": INSIGHTS_UNAVAILABLE, "sessions_analyzed": 3, "used_fallback": True}


def test_sleep_insights_fall_back_on_upstream_error(client, child_id, fake_llm) -> None:
    fake_llm.error = RuntimeError("socket closed")
    for day in (1, 2, 3):
        _log_sleep(client, child_id, day)

    body = client.get(f"/api/v1/children/{child_id}/sleep/insights").json()
    assert body["insights"] == INSIGHTS_UNAVAILABLE
    assert body["used_fallback"] is True
