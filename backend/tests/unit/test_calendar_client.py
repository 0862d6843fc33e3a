"""HttpCalendarClient against a mocked gateway transport."""

from __future__ import annotations

import json

import httpx
import pytest

from mentorbook.domain.interval import Interval
from mentorbook.integrations.calendar_client import CalendarError, HttpCalendarClient
from mentorbook.services.busy_interval_service import BusyIntervalService
from tests.utils.scheduling_helpers import metric_value, utc

BASE_URL = "https://calendar-gateway.test/api/"
START = utc(2025, 3, 3, 5)
END = utc(2025, 3, 4, 5)


def _client(handler) -> HttpCalendarClient:
    return HttpCalendarClient(
        base_url=BASE_URL,
        api_key="gateway-key",
        transport=httpx.MockTransport(handler),
    )


def test_fetch_busy_parses_periods_and_skips_malformed() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "busy": [
                    {"start": "2025-03-03T15:00:00+00:00", "end": "2025-03-03T16:00:00+00:00"},
                    {"start": "2025-03-03T12:00:00-05:00", "end": "2025-03-03T12:30:00-05:00"},
                    {"start": "2025-03-03T19:00:00Z", "end": "2025-03-03T19:45:00Z"},
                    {"start": "not a date", "end": "2025-03-03T16:00:00+00:00"},
                    {"start": "2025-03-03T18:00:00+00:00"},
                ]
            },
        )

    busy = _client(handler).fetch_busy("tutor-1", START, END)

    assert busy == [
        Interval(utc(2025, 3, 3, 15), utc(2025, 3, 3, 16)),
        Interval(utc(2025, 3, 3, 17), utc(2025, 3, 3, 17, 30)),
        Interval(utc(2025, 3, 3, 19), utc(2025, 3, 3, 19, 45)),
    ]
    assert seen["url"] == "https://calendar-gateway.test/api/tutors/tutor-1/freebusy"
    assert seen["auth"] == "Bearer gateway-key"
    assert seen["body"] == {"time_min": START.isoformat(), "time_max": END.isoformat()}


def test_fetch_busy_empty_list_is_connected_and_free() -> None:
    busy = _client(lambda request: httpx.Response(200, json={"busy": []})).fetch_busy(
        "tutor-1", START, END
    )
    assert busy == []


def test_not_connected_returns_none() -> None:
    client = _client(lambda request: httpx.Response(404, json={"error": "not connected"}))
    assert client.fetch_busy("tutor-1", START, END) is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(401, json={"error": "token revoked"}),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=["unexpected"]),
    ],
)
def test_gateway_failures_raise_calendar_error(response: httpx.Response) -> None:
    with pytest.raises(CalendarError):
        _client(lambda request: response).fetch_busy("tutor-1", START, END)


def test_timeout_raises_calendar_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(CalendarError) as exc_info:
        _client(handler).fetch_busy("tutor-1", START, END, timeout=0.5)
    assert "timed out" in str(exc_info.value)


def test_connection_error_raises_calendar_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CalendarError):
        _client(handler).fetch_busy("tutor-1", START, END)


def _corrupt_gzip(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        headers={"content-type": "application/json", "content-encoding": "gzip"},
        content=b"not gzip",
    )


def test_undecodable_body_raises_calendar_error() -> None:
    with pytest.raises(CalendarError) as exc_info:
        _client(_corrupt_gzip).fetch_busy("tutor-1", START, END)
    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)


def test_redirect_loop_raises_calendar_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)

    with pytest.raises(CalendarError):
        _client(handler).fetch_busy("tutor-1", START, END)


def test_busy_lookup_degrades_on_undecodable_body(db) -> None:
    service = BusyIntervalService(db, _client(_corrupt_gzip))
    before = metric_value("mentorbook_calendar_fallbacks_total", operation="fetch_busy")

    assert service.fetch_external_busy("tutor-1", START, END) == []
    assert (
        metric_value("mentorbook_calendar_fallbacks_total", operation="fetch_busy") == before + 1
    )


def test_create_meeting_event() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            201,
            json={
                "id": "evt-42",
                "html_link": "https://calendar.example.com/evt-42",
                "meeting_link": "https://meet.example.com/xyz",
            },
        )

    event = _client(handler).create_meeting_event(
        "tutor-1",
        request_id="lesson-1",
        summary="Mentoring session with Ada",
        start=utc(2025, 3, 3, 14),
        end=utc(2025, 3, 3, 14, 50),
        attendee_emails=["sam@example.com", "ada@example.com"],
    )

    assert event is not None
    assert event.event_id == "evt-42"
    assert event.meeting_link == "https://meet.example.com/xyz"
    assert seen["url"].endswith("/tutors/tutor-1/events")
    assert seen["body"]["request_id"] == "lesson-1"
    assert seen["body"]["attendees"] == [{"email": "sam@example.com"}, {"email": "ada@example.com"}]


def test_create_meeting_event_requires_an_id() -> None:
    client = _client(lambda request: httpx.Response(200, json={"html_link": "x"}))

    with pytest.raises(CalendarError):
        client.create_meeting_event(
            "tutor-1",
            request_id="lesson-1",
            summary="s",
            start=utc(2025, 3, 3, 14),
            end=utc(2025, 3, 3, 15),
        )
