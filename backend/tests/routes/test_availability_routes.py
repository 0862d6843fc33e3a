"""GET /api/v1/availability/tutors/{tutor_id}/slots"""

from __future__ import annotations

import pytest

from mentorbook.domain.interval import Interval
from tests.utils.scheduling_helpers import parse_ts, utc


def _url(tutor_id: str) -> str:
    return f"/api/v1/availability/tutors/{tutor_id}/slots"


WINDOW = {"from": "2025-03-03T05:00:00Z", "to": "2025-03-04T05:00:00Z"}


def test_slots_response_shape(client, ny_tutor) -> None:
    response = client.get(_url(ny_tutor.id), params=WINDOW)

    assert response.status_code == 200
    body = response.json()
    assert body["tutor_id"] == ny_tutor.id
    assert parse_ts(body["from"]) == utc(2025, 3, 3, 5)
    assert parse_ts(body["to"]) == utc(2025, 3, 4, 5)
    assert body["duration_minutes"] == 60
    assert body["step_minutes"] == 60
    assert body["timezone"] == "America/New_York"
    assert [parse_ts(s["start"]) for s in body["slots"]] == [utc(2025, 3, 3, h) for h in range(14, 22)]
    assert parse_ts(body["slots"][0]["end"]) == utc(2025, 3, 3, 15)


def test_slots_echo_clamped_parameters(client, ny_tutor) -> None:
    response = client.get(
        _url(ny_tutor.id), params={**WINDOW, "durationMinutes": 10, "stepMinutes": 2}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["duration_minutes"] == 15
    assert body["step_minutes"] == 5
    # 09:00 to 16:45 local start times every 5 minutes
    assert len(body["slots"]) == 94


def test_slots_exclude_calendar_busy(client, calendar, ny_tutor) -> None:
    calendar.busy = [Interval(utc(2025, 3, 3, 14), utc(2025, 3, 3, 16))]

    response = client.get(_url(ny_tutor.id), params=WINDOW)

    assert [parse_ts(s["start"]) for s in response.json()["slots"]][0] == utc(2025, 3, 3, 16)


def test_slots_survive_calendar_outage(client, calendar, ny_tutor) -> None:
    calendar.fail_busy = True

    response = client.get(_url(ny_tutor.id), params=WINDOW)

    assert response.status_code == 200
    assert len(response.json()["slots"]) == 8


def test_inverted_window_is_bad_request(client, ny_tutor) -> None:
    response = client.get(
        _url(ny_tutor.id), params={"from": WINDOW["to"], "to": WINDOW["from"]}
    )

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "invalid_window"


def test_oversized_window_is_bad_request(client, ny_tutor) -> None:
    response = client.get(
        _url(ny_tutor.id), params={"from": "2025-01-01T00:00:00Z", "to": "2025-06-01T00:00:00Z"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "window_too_large"


@pytest.mark.parametrize(
    "params",
    [
        {"durationMinutes": 10_000_000_000},
        {"stepMinutes": 10**12},
        {"durationMinutes": 62 * 24 * 60 + 1, "stepMinutes": 30},
    ],
)
def test_oversized_slot_parameters_are_bad_request(client, ny_tutor, params) -> None:
    response = client.get(_url(ny_tutor.id), params={**WINDOW, **params})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_slot_parameters"


def test_missing_or_malformed_window_is_unprocessable(client, ny_tutor) -> None:
    missing = client.get(_url(ny_tutor.id), params={"to": WINDOW["to"]})
    malformed = client.get(_url(ny_tutor.id), params={"from": "yesterday", "to": WINDOW["to"]})

    assert missing.status_code == 422
    assert missing.json()["code"] == "validation_error"
    assert malformed.status_code == 422


def test_unknown_tutor_has_no_slots(client) -> None:
    response = client.get(_url("01J0000000000000000000NONE"), params=WINDOW)

    assert response.status_code == 200
    assert response.json()["slots"] == []
    assert response.json()["timezone"] == "UTC"
