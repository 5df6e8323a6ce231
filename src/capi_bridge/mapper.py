"""Map a confirmed order onto a Conversions API purchase event.

Everything here is pure: the caller supplies the capture time and the
reporting currency, so the same inputs always give the same event.
"""

from __future__ import annotations

import logging
from typing import Optional

from capi_bridge.events import (
    EVENT_NAME,
    Content,
    CustomData,
    OrderConfirmation,
    PurchaseEvent,
    UserIdentity,
)

logger = logging.getLogger(__name__)


class MissingOrder(Exception):
    """The webhook delivered no order payload."""

    def __init__(self, message: str = "Missing order") -> None:
        super().__init__(message)


def validate(order: Optional[OrderConfirmation]) -> OrderConfirmation:
    """Return ``order`` unchanged, or raise MissingOrder if it is absent.

    Missing identity or address fields are not errors; the event is sent
    without them.
    """
    if order is None:
        raise MissingOrder()
    return order


def build_event_id(
    order_id: str, event_time: int, *, stable: bool = False
) -> str:
    """``<order>_Purchase_<unix seconds>``, or ``<order>_Purchase`` if stable."""
    if stable:
        return f"{order_id}_{EVENT_NAME}"
    return f"{order_id}_{EVENT_NAME}_{event_time}"


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def map_to_purchase_event(
    order: OrderConfirmation,
    current_unix_time: int,
    *,
    currency: str,
    stable_event_id: bool = False,
) -> PurchaseEvent:
    """Build the purchase event for ``order`` captured at ``current_unix_time``.

    ``currency`` is the deployment's reporting currency and always wins
    over the order's own currency.
    """
    if order.currency and order.currency.upper() != currency.upper():
        logger.warning(
            "Order %s is in %s but events are reported in %s",
            order.order_id,
            order.currency,
            currency,
        )

    user_data = UserIdentity(
        client_ip_address=order.customer_ip,
        client_user_agent=order.user_agent,
        fbp=order.browser_id,
        fbc=order.click_id,
        external_id=order.external_id,
        email=normalize_email(order.customer_email),
        phone=order.shipping_phone or None,
    )

    contents = tuple(
        Content(
            id=line.product_key,
            quantity=line.quantity,
            item_price=line.unit_price if line.unit_price is not None else 0.0,
        )
        for line in order.line_items
    )

    custom_data = CustomData(
        currency=currency,
        value=order.total_amount,
        contents=contents,
        content_ids=tuple(line.product_key for line in order.line_items),
    )

    return PurchaseEvent(
        event_id=build_event_id(
            order.order_id, current_unix_time, stable=stable_event_id
        ),
        event_time=current_unix_time,
        user_data=user_data,
        custom_data=custom_data,
        event_source_url=order.event_source_url,
    )
