"""Mentor self-service scheduling under /api/v1/scheduling/me"""

from __future__ import annotations

from mentorbook.core.enums import RoleName
from tests.utils.scheduling_helpers import auth_headers, parse_ts, utc

BASE = "/api/v1/scheduling/me"


def _tutor_headers(tutor) -> dict:
    return auth_headers(tutor.user_id, RoleName.TUTOR)


def test_overview(client, ny_tutor) -> None:
    response = client.get(BASE, headers=_tutor_headers(ny_tutor))

    assert response.status_code == 200
    assert response.json() == {
        "timezone": "America/New_York",
        "rules": [{"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}],
        "blocks": [],
    }


def test_students_cannot_manage_scheduling(client, student) -> None:
    response = client.get(BASE, headers=auth_headers(student.user_id, RoleName.STUDENT))

    assert response.status_code == 403


def test_tutor_token_without_profile_is_not_found(client) -> None:
    response = client.get(BASE, headers=auth_headers("01J00000000000000000000000", RoleName.TUTOR))

    assert response.status_code == 404
    assert response.json()["code"] == "tutor_not_found"


def test_set_timezone(client, ny_tutor) -> None:
    headers = _tutor_headers(ny_tutor)

    ok = client.put(f"{BASE}/timezone", json={"timezone": "Europe/Berlin"}, headers=headers)
    bad = client.put(f"{BASE}/timezone", json={"timezone": "Europe/Atlantis"}, headers=headers)

    assert ok.status_code == 200
    assert ok.json() == {"timezone": "Europe/Berlin"}
    assert bad.status_code == 400
    assert bad.json()["code"] == "invalid_timezone"
    assert client.get(BASE, headers=headers).json()["timezone"] == "Europe/Berlin"


def test_replace_availability(client, ny_tutor) -> None:
    response = client.put(
        f"{BASE}/availability",
        json={
            "rules": [
                {"day_of_week": 4, "start_time": "14:00", "end_time": "18:00"},
                {"day_of_week": 0, "start_time": "10:00", "end_time": "12:00"},
            ]
        },
        headers=_tutor_headers(ny_tutor),
    )

    assert response.status_code == 200
    assert response.json()["rules"] == [
        {"day_of_week": 0, "start_time": "10:00", "end_time": "12:00"},
        {"day_of_week": 4, "start_time": "14:00", "end_time": "18:00"},
    ]


def test_invalid_rules_leave_existing_set(client, ny_tutor) -> None:
    headers = _tutor_headers(ny_tutor)

    response = client.put(
        f"{BASE}/availability",
        json={
            "rules": [
                {"day_of_week": 2, "start_time": "10:00", "end_time": "12:00"},
                {"day_of_week": 2, "start_time": "25:00", "end_time": "26:00"},
            ]
        },
        headers=headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "invalid_rules"
    assert [e["index"] for e in body["errors"]["errors"]] == [1]
    assert client.get(BASE, headers=headers).json()["rules"] == [
        {"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}
    ]


def test_rule_with_wrong_type_is_unprocessable(client, ny_tutor) -> None:
    response = client.put(
        f"{BASE}/availability",
        json={"rules": [{"day_of_week": "monday", "start_time": "10:00", "end_time": "12:00"}]},
        headers=_tutor_headers(ny_tutor),
    )

    assert response.status_code == 422


def test_new_rules_drive_slot_query(client, ny_tutor) -> None:
    client.put(
        f"{BASE}/availability",
        json={"rules": [{"day_of_week": 1, "start_time": "12:00", "end_time": "14:00"}]},
        headers=_tutor_headers(ny_tutor),
    )

    slots = client.get(
        f"/api/v1/availability/tutors/{ny_tutor.id}/slots",
        params={"from": "2025-03-03T05:00:00Z", "to": "2025-03-04T05:00:00Z"},
    ).json()["slots"]

    assert [parse_ts(s["start"]) for s in slots] == [utc(2025, 3, 3, 17), utc(2025, 3, 3, 18)]


def test_time_block_crud(client, ny_tutor) -> None:
    headers = _tutor_headers(ny_tutor)

    created = client.post(
        f"{BASE}/blocks",
        json={
            "start_time": "2025-03-03T15:00:00Z",
            "end_time": "2025-03-03T17:00:00Z",
            "reason": "Workshop",
        },
        headers=headers,
    )
    assert created.status_code == 201
    block = created.json()
    assert block["reason"] == "Workshop"

    slots = client.get(
        f"/api/v1/availability/tutors/{ny_tutor.id}/slots",
        params={"from": "2025-03-03T05:00:00Z", "to": "2025-03-04T05:00:00Z"},
    ).json()["slots"]
    assert len(slots) == 6

    updated = client.put(
        f"{BASE}/blocks/{block['id']}",
        json={"end_time": "2025-03-03T16:00:00Z", "reason": ""},
        headers=headers,
    )
    assert updated.status_code == 200
    assert parse_ts(updated.json()["start_time"]) == utc(2025, 3, 3, 15)
    assert parse_ts(updated.json()["end_time"]) == utc(2025, 3, 3, 16)
    assert updated.json()["reason"] is None

    listed = client.get(
        f"{BASE}/blocks",
        params={"from": "2025-03-03T00:00:00Z", "to": "2025-03-04T00:00:00Z"},
        headers=headers,
    )
    assert [b["id"] for b in listed.json()["blocks"]] == [block["id"]]

    deleted = client.delete(f"{BASE}/blocks/{block['id']}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"{BASE}/blocks", headers=headers).json()["blocks"] == []


def test_invalid_block_window(client, ny_tutor) -> None:
    response = client.post(
        f"{BASE}/blocks",
        json={"start_time": "2025-03-03T17:00:00Z", "end_time": "2025-03-03T15:00:00Z"},
        headers=_tutor_headers(ny_tutor),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_time_block"


def test_other_mentors_block_is_not_found(client, ny_tutor, make_tutor) -> None:
    created = client.post(
        f"{BASE}/blocks",
        json={"start_time": "2025-03-03T15:00:00Z", "end_time": "2025-03-03T17:00:00Z"},
        headers=_tutor_headers(ny_tutor),
    ).json()
    intruder = _tutor_headers(make_tutor())

    update = client.put(f"{BASE}/blocks/{created['id']}", json={"reason": "x"}, headers=intruder)
    delete = client.delete(f"{BASE}/blocks/{created['id']}", headers=intruder)

    assert update.status_code == 404
    assert update.json()["code"] == "time_block_not_found"
    assert delete.status_code == 404
