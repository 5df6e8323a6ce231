"""HTTPX client for the Meta Conversions API.

One ``send()`` is one POST to ``/{pixel_id}/events``; there are no
retries here.  Webhook redelivery upstream is the retry mechanism.

Usage::

    settings = ConversionsSettings.from_env()
    client = ConversionsAPIClient(settings)
    ack = await client.send([event])
    # {"events_received": 1, "messages": [], "fbtrace_id": "..."}
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from capi_bridge.config import ConversionsSettings
from capi_bridge.events import PurchaseEvent

logger = logging.getLogger(__name__)


class TransmissionError(Exception):
    """The Conversions API call failed (network, auth or API rejection)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


async def log_response(response: httpx.Response) -> None:
    """HTTPX response hook: log status and latency of each outbound call."""
    await response.aread()
    latency_ms = None
    try:
        latency_ms = round(response.elapsed.total_seconds() * 1000, 2)
    except RuntimeError:
        pass
    logger.info(
        "Conversions API %s %s -> %d (%s ms)",
        response.request.method,
        response.request.url.path,
        response.status_code,
        latency_ms,
    )


class ConversionsAPIClient:
    """Sends purchase events to a single pixel."""

    def __init__(
        self,
        settings: ConversionsSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self.settings.events_endpoint

    def build_body(self, events: Sequence[PurchaseEvent]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "data": [event.to_capi_dict() for event in events],
            "access_token": self.settings.access_token,
        }
        if self.settings.test_event_code:
            body["test_event_code"] = self.settings.test_event_code
        return body

    async def send(self, events: Sequence[PurchaseEvent]) -> Dict[str, Any]:
        """POST ``events`` and return the API acknowledgment.

        Raises:
            TransmissionError: on a body that is not valid JSON, connection
                errors, timeouts, non-2xx responses or an unreadable
                acknowledgment.
        """
        try:
            content = json.dumps(self.build_body(events), allow_nan=False)
        except ValueError as exc:
            raise TransmissionError(f"Conversions API request not sent: {exc}") from exc

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.settings.request_timeout_seconds,
                event_hooks={"response": [log_response]},
            ) as client:
                response = await client.post(
                    self.endpoint,
                    content=content,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException as exc:
            raise TransmissionError(f"Conversions API timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransmissionError(f"Conversions API request failed: {exc}") from exc

        if response.is_error:
            raise TransmissionError(
                self._error_message(response), status_code=response.status_code
            )

        try:
            ack = response.json()
        except ValueError as exc:
            raise TransmissionError(
                "Conversions API returned a non-JSON acknowledgment",
                status_code=response.status_code,
            ) from exc
        if not isinstance(ack, dict):
            raise TransmissionError(
                "Conversions API returned an unexpected acknowledgment",
                status_code=response.status_code,
            )
        return ack

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the Graph API ``error.message`` over the raw body."""
        detail = ""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            detail = str(payload["error"].get("message") or "")
        if not detail:
            detail = response.text[:500]
        return f"Conversions API returned {response.status_code}: {detail}"
