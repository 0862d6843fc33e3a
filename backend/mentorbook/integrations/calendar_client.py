# backend/mentorbook/integrations/calendar_client.py
"""External calendar gateway integration.

The scheduling core consumes two capabilities from a mentor's connected
calendar: free/busy lookup for a window and creation of a remote meeting
event. OAuth and provider specifics live behind the gateway.

``fetch_busy`` returns ``None`` when the mentor has no calendar connected,
which is distinct from a connected calendar with no busy periods (``[]``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Protocol, Sequence

import httpx
from pydantic import SecretStr, TypeAdapter

from ..domain.interval import Interval

logger = logging.getLogger(__name__)

_timestamp = TypeAdapter(datetime)


class CalendarError(RuntimeError):
    """Raised when the calendar gateway fails or responds with an error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


@dataclass(frozen=True)
class MeetingEvent:
    event_id: str
    html_link: str | None = None
    meeting_link: str | None = None


class CalendarProvider(Protocol):
    def fetch_busy(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: float | None = None,
    ) -> list[Interval] | None: ...

    def create_meeting_event(
        self,
        tutor_id: str,
        *,
        request_id: str,
        summary: str,
        start: datetime,
        end: datetime,
        attendee_emails: Sequence[str] = (),
    ) -> MeetingEvent | None: ...


class NullCalendarProvider:
    """Provider used when no calendar gateway is configured."""

    def fetch_busy(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: float | None = None,
    ) -> list[Interval] | None:
        return None

    def create_meeting_event(
        self,
        tutor_id: str,
        *,
        request_id: str,
        summary: str,
        start: datetime,
        end: datetime,
        attendee_emails: Sequence[str] = (),
    ) -> MeetingEvent | None:
        return None


class HttpCalendarClient:
    """HTTP client for the calendar gateway REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | SecretStr | None = None,
        timeout: float = 2.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        self._timeout = timeout
        self._transport = transport

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any] | None:
        """Make a request to the gateway. Returns None on 404 (calendar not connected)."""
        url = f"{self._base_url}/{path.lstrip('/')}"
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            with httpx.Client(
                timeout=timeout if timeout is not None else self._timeout,
                transport=self._transport,
            ) as client:
                response = client.request(method, url, headers=headers, json=json_body)
        except httpx.TimeoutException as exc:
            raise CalendarError(f"Calendar gateway timed out: {exc}") from exc
        except httpx.TransportError as exc:
            logger.error("Calendar gateway unreachable for %s %s: %s", method, path, exc)
            raise CalendarError(f"Calendar gateway unreachable: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("Calendar gateway request failed for %s %s: %s", method, path, exc)
            raise CalendarError(f"Calendar gateway request failed: {exc}") from exc

        if response.status_code == 404:
            return None

        if response.status_code >= 400:
            raise CalendarError(
                f"Calendar gateway error {response.status_code} for {method} {path}",
                status_code=response.status_code,
                details=response.text[:500],
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise CalendarError(
                "Calendar gateway returned invalid JSON", status_code=response.status_code
            ) from exc
        if not isinstance(body, dict):
            raise CalendarError("Calendar gateway returned an unexpected payload")
        return body

    def fetch_busy(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: float | None = None,
    ) -> list[Interval] | None:
        body = self._request(
            "POST",
            f"/tutors/{tutor_id}/freebusy",
            json_body={"time_min": start.isoformat(), "time_max": end.isoformat()},
            timeout=timeout,
        )
        if body is None:
            return None

        intervals: list[Interval] = []
        for item in body.get("busy") or []:
            try:
                intervals.append(
                    Interval(
                        _timestamp.validate_python(item["start"]),
                        _timestamp.validate_python(item["end"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                # Skip malformed periods rather than dropping the whole response
                logger.warning("Ignoring malformed busy period %r for tutor %s: %s", item, tutor_id, exc)
        return intervals

    def create_meeting_event(
        self,
        tutor_id: str,
        *,
        request_id: str,
        summary: str,
        start: datetime,
        end: datetime,
        attendee_emails: Sequence[str] = (),
    ) -> MeetingEvent | None:
        body = self._request(
            "POST",
            f"/tutors/{tutor_id}/events",
            json_body={
                "request_id": request_id,
                "summary": summary,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "attendees": [{"email": email} for email in attendee_emails],
            },
        )
        if body is None:
            return None
        event_id = body.get("event_id") or body.get("id")
        if not event_id:
            raise CalendarError("Calendar gateway response missing event id", details=body)
        return MeetingEvent(
            event_id=str(event_id),
            html_link=body.get("html_link"),
            meeting_link=body.get("meeting_link"),
        )
