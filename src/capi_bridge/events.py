"""Order and purchase event data model.

``OrderConfirmation`` is what the commerce platform tells us about a
confirmed order.  ``PurchaseEvent`` is what we report to the Conversions
API.  Both are immutable; optional fields stay ``None`` and are dropped
when the event is serialized for the wire.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EVENT_NAME = "Purchase"
ACTION_SOURCE = "website"
CONTENT_TYPE = "product"

# user_data keys the Conversions API expects as SHA-256 hex digests
HASHED_USER_FIELDS = ("em", "ph", "external_id")


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Inbound: order confirmation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineItem:
    """One order line.  ``unit_price`` is None when pricing is unavailable."""

    product_key: str
    quantity: int = 0
    unit_price: Optional[float] = None


@dataclass(frozen=True)
class OrderConfirmation:
    """A confirmed order as delivered by the platform webhook."""

    order_id: str

    # --- identity (order metadata) ---
    customer_ip: Optional[str] = None
    user_agent: Optional[str] = None
    browser_id: Optional[str] = None  # fbp
    click_id: Optional[str] = None  # fbc
    external_id: Optional[str] = None

    # --- contact ---
    customer_email: Optional[str] = None
    shipping_phone: Optional[str] = None

    event_source_url: Optional[str] = None

    # --- financial ---
    total_amount: float = 0.0
    currency: Optional[str] = None

    line_items: Tuple[LineItem, ...] = ()


# ---------------------------------------------------------------------------
# Outbound: purchase event
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserIdentity:
    client_ip_address: Optional[str] = None
    client_user_agent: Optional[str] = None
    fbp: Optional[str] = None
    fbc: Optional[str] = None
    external_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def to_capi_dict(self) -> Dict[str, Any]:
        """Serialize to Conversions API ``user_data`` (hash PII, drop None)."""
        row: Dict[str, Any] = {
            "client_ip_address": self.client_ip_address,
            "client_user_agent": self.client_user_agent,
            "fbp": self.fbp,
            "fbc": self.fbc,
        }
        if self.email is not None:
            row["em"] = [sha256_hex(self.email)]
        if self.phone is not None:
            row["ph"] = [sha256_hex(self.phone)]
        if self.external_id is not None:
            row["external_id"] = [sha256_hex(self.external_id)]
        return {k: v for k, v in row.items() if v is not None}


@dataclass(frozen=True)
class Content:
    id: str
    quantity: int
    item_price: float

    def to_capi_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "quantity": self.quantity, "item_price": self.item_price}


@dataclass(frozen=True)
class CustomData:
    currency: str
    value: float
    contents: Tuple[Content, ...] = ()
    content_ids: Tuple[str, ...] = ()
    content_type: str = CONTENT_TYPE

    def to_capi_dict(self) -> Dict[str, Any]:
        return {
            "contents": [c.to_capi_dict() for c in self.contents],
            "currency": self.currency,
            "value": self.value,
            "content_type": self.content_type,
            "content_ids": list(self.content_ids),
        }


@dataclass(frozen=True)
class PurchaseEvent:
    """A single server-side purchase event for the Conversions API."""

    event_id: str
    event_time: int
    user_data: UserIdentity
    custom_data: CustomData
    event_name: str = EVENT_NAME
    event_source_url: Optional[str] = None
    action_source: str = ACTION_SOURCE

    def to_capi_dict(self) -> Dict[str, Any]:
        """Serialize to one entry of the Conversions API ``data`` array."""
        row = {
            "event_id": self.event_id,
            "event_name": self.event_name,
            "event_time": self.event_time,
            "user_data": self.user_data.to_capi_dict(),
            "custom_data": self.custom_data.to_capi_dict(),
            "event_source_url": self.event_source_url,
            "action_source": self.action_source,
        }
        return {k: v for k, v in row.items() if v is not None}
