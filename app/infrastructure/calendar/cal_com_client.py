from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from app.application.exceptions import ExternalSyncError
from app.application.ports.calendar import CalendarPort
from app.core.config import settings
from app.domain.entities.external_event import Attendee, ExternalEvent


class CalComCalendar(CalendarPort):
    def __init__(
        self,
        timezone: ZoneInfo,
        api_key: str | None = None,
        calendar_id: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._timezone = timezone
        self._api_key = api_key or settings.CAL_COM_API_KEY
        self._calendar_id = calendar_id or settings.CAL_COM_CALENDAR_ID
        self._base_url = base_url or settings.CAL_COM_BASE_URL
        self._client = http_client or httpx.Client(timeout=timeout or settings.EXTERNAL_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._api_key:
            raise ValueError("CAL_COM_API_KEY is required for Cal.com calendar")

    def list_events(self, day: date) -> list[ExternalEvent]:
        start_datetime = datetime.combine(day, time.min, tzinfo=self._timezone)
        end_datetime = start_datetime + timedelta(days=1)
        params = {
            "calendarId": self._calendar_id,
            "afterStartTime": start_datetime.isoformat(),
            "beforeEndTime": end_datetime.isoformat(),
        }
        try:
            response = self._client.get(f"{self._base_url}/bookings", params=params, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Error listing calendar events", extra={"date": day.isoformat(), "error": str(e)})
            raise ExternalSyncError(f"Calendar listing failed: {e}") from e

        events: list[ExternalEvent] = []
        for raw in data.get("bookings", []):
            event = self._parse_booking(raw)
            if event is None:
                continue
            if event.start.astimezone(self._timezone).date() == day:
                events.append(event)
        return events

    def create_event(
        self,
        subject: str,
        description: str,
        start: datetime,
        end: datetime,
        attendee_email: str,
    ) -> str:
        payload: dict[str, Any] = {
            "eventTypeId": self._calendar_id,
            "startTime": start.isoformat(),
            "endTime": end.isoformat(),
            "title": subject,
            "description": description or "",
            "timeZone": self._timezone.key,
        }
        if attendee_email:
            payload["attendeeEmail"] = attendee_email

        try:
            response = self._client.post(
                f"{self._base_url}/bookings",
                json=payload,
                headers={**self._headers(), "Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Error creating calendar event", extra={"error": str(e)})
            raise ExternalSyncError(f"Calendar event creation failed: {e}") from e

        event_id = data.get("id") or data.get("bookingId")
        if not event_id:
            raise ExternalSyncError("No event ID returned from Cal.com API")

        self._logger.info("Calendar event created", extra={"event_id": event_id})
        return str(event_id)

    def delete_event(self, event_id: str) -> bool:
        try:
            response = self._client.delete(f"{self._base_url}/bookings/{event_id}", headers=self._headers())
            if response.status_code in (404, 410):
                self._logger.info("Calendar event already gone", extra={"event_id": event_id})
                return False
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error("Error deleting calendar event", extra={"event_id": event_id, "error": str(e)})
            raise ExternalSyncError(f"Calendar event deletion failed: {e}") from e

        self._logger.info("Calendar event deleted", extra={"event_id": event_id})
        return True

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _parse_booking(self, raw: dict[str, Any]) -> ExternalEvent | None:
        if str(raw.get("status", "")).lower() in {"cancelled", "rejected"}:
            return None
        try:
            start = datetime.fromisoformat(str(raw["startTime"]).replace("Z", "+00:00"))
            end = datetime.fromisoformat(str(raw["endTime"]).replace("Z", "+00:00"))
        except (KeyError, ValueError):
            return None
        attendees = tuple(
            Attendee(email=str(a.get("email", "")), name=str(a.get("name", "")))
            for a in raw.get("attendees", []) or []
            if a.get("email")
        )
        return ExternalEvent(
            event_id=str(raw.get("id", "")),
            start=start,
            end=end,
            summary=str(raw.get("title", "")),
            attendees=attendees,
            description=str(raw.get("description", "") or ""),
        )
