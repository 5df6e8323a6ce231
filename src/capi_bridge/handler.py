"""OrderConfirmedHandler: one webhook delivery in, one HTTP outcome out.

Usage::

    settings = ConversionsSettings.from_env()
    handler = OrderConfirmedHandler(settings, ConversionsAPIClient(settings))
    outcome = await handler.handle(payload)
    return JSONResponse(outcome.body, status_code=outcome.status)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from capi_bridge.client import ConversionsAPIClient
from capi_bridge.config import ConversionsSettings
from capi_bridge.events import HASHED_USER_FIELDS
from capi_bridge.mapper import MissingOrder, map_to_purchase_event, validate
from capi_bridge.parser import OrderPayloadParser

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "event handled"

PII_FIELDS = frozenset(HASHED_USER_FIELDS) | {"client_ip_address", "access_token"}


@dataclass(frozen=True)
class ResponseOutcome:
    status: int
    body: Dict[str, Any] = field(default_factory=dict)


def to_response_outcome(result: Any) -> ResponseOutcome:
    """Translate a delivery result into an HTTP status and body.

    ``result`` is either the client's acknowledgment or the exception that
    ended the invocation (MissingOrder, TransmissionError, ...).
    """
    if isinstance(result, BaseException):
        return ResponseOutcome(500, {"message": str(result)})
    return ResponseOutcome(200, {"message": SUCCESS_MESSAGE})


def redact(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            k: "[REDACTED]" if k in PII_FIELDS else redact(v) for k, v in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


class OrderConfirmedHandler:
    """Parses, maps and forwards one ORDER_CONFIRMED delivery."""

    def __init__(
        self,
        settings: ConversionsSettings,
        client: ConversionsAPIClient,
        *,
        clock: Optional[Callable[[], float]] = None,
        parser: type = OrderPayloadParser,
    ) -> None:
        self.settings = settings
        self.client = client
        self.clock = clock or time.time
        self.parser = parser

    async def handle(self, payload: Any) -> ResponseOutcome:
        """Process one delivery.  Never raises."""
        logger.info("Order confirmed webhook received")
        try:
            result = await self._forward(payload)
        except MissingOrder as exc:
            logger.warning("Order confirmed webhook without an order")
            result = exc
        except Exception as exc:
            logger.exception("Conversions API delivery failed")
            result = exc

        outcome = to_response_outcome(result)
        logger.info("Order confirmed webhook handled with status %d", outcome.status)
        return outcome

    async def _forward(self, payload: Any) -> Dict[str, Any]:
        order = validate(self.parser.parse(payload))
        event = map_to_purchase_event(
            order,
            int(self.clock()),
            currency=self.settings.currency,
            stable_event_id=self.settings.stable_event_id,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Sending purchase event: %s",
                json.dumps(redact(self.client.build_body([event]))),
            )
        ack = await self.client.send([event])
        logger.info(
            "Purchase event %s accepted (events_received=%s, fbtrace_id=%s)",
            event.event_id,
            ack.get("events_received"),
            ack.get("fbtrace_id"),
        )
        return ack
