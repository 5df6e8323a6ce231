"""capi-bridge: forward confirmed commerce orders to the Meta Conversions API.

Receives Saleor ORDER_CONFIRMED webhooks, maps each order onto a
server-side ``Purchase`` event, and reports it to a pixel.

Integration points:
    1. FastAPI app  ``capi_bridge.app.create_app()``
    2. Handler      ``OrderConfirmedHandler.handle(payload)``
    3. Pure mapping ``map_to_purchase_event(order, now, currency=...)``
"""

from capi_bridge.client import ConversionsAPIClient, TransmissionError
from capi_bridge.config import ConversionsSettings
from capi_bridge.events import (
    Content,
    CustomData,
    LineItem,
    OrderConfirmation,
    PurchaseEvent,
    UserIdentity,
)
from capi_bridge.handler import (
    OrderConfirmedHandler,
    ResponseOutcome,
    to_response_outcome,
)
from capi_bridge.mapper import (
    MissingOrder,
    build_event_id,
    map_to_purchase_event,
    validate,
)
from capi_bridge.parser import OrderPayloadParser


def __getattr__(name: str):
    if name == "create_app":
        from capi_bridge.app import create_app

        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ConversionsAPIClient",
    "ConversionsSettings",
    "Content",
    "CustomData",
    "LineItem",
    "MissingOrder",
    "OrderConfirmation",
    "OrderConfirmedHandler",
    "OrderPayloadParser",
    "PurchaseEvent",
    "ResponseOutcome",
    "TransmissionError",
    "UserIdentity",
    "build_event_id",
    "create_app",
    "map_to_purchase_event",
    "to_response_outcome",
    "validate",
]

__version__ = "0.1.0"
