from __future__ import annotations

import logging

import httpx

from app.application.exceptions import ExternalSyncError
from app.application.ports.notifier import NotifierPort


class HttpEmailNotifier(NotifierPort):
    """Sends attendee mail through a transactional e-mail HTTP API."""

    def __init__(
        self,
        api_key: str,
        send_endpoint: str,
        from_email: str,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._send_endpoint = send_endpoint
        self._from_email = from_email
        self._client = http_client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def send(self, to_email: str, subject: str, body: str) -> None:
        payload = {
            "from": self._from_email,
            "to": [to_email],
            "subject": subject,
            "text": body,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            resp = self._client.post(self._send_endpoint, json=payload, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Email send failed", extra={"error": str(e)})
            raise ExternalSyncError(f"Email send failed: {e}") from e

        if resp.status_code >= 400:
            try:
                error_message = resp.json().get("message") or resp.text
            except Exception:
                error_message = resp.text
            self._logger.error(
                "Email send rejected",
                extra={"error": error_message, "status": resp.status_code},
            )
            raise ExternalSyncError(f"Email send rejected ({resp.status_code}): {error_message}")
