"""Parse Saleor ORDER_CONFIRMED webhook payloads into OrderConfirmation.

The payload is the result of the ``OrderConfirmed`` subscription query.
Storefront tracking values (fbp, fbc, ip, ...) live in order metadata and
are selected with aliased ``metafields(keys: ...)`` lookups, so each one
arrives as a small dict like ``{"_fbp": "fb.1.1700000000.123"}`` or null::

    {
      "order": {
        "id": "T3JkZXI6MQ==",
        "userEmail": "jane@example.com",
        "fbp": {"_fbp": "..."}, "fbc": {"_fbc": "..."},
        "ip": {"ip": "..."}, "userAgent": {"userAgent": "..."},
        "f_external_id": {"f_external_id": "..."},
        "eventURL": {"eventURL": "..."},
        "shippingAddress": {"phone": "+525512345678", ...},
        "total": {"gross": {"amount": 120.0}, "currency": "MXN"},
        "lines": [{"quantity": 1, "variant": {...}}]
      }
    }
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from capi_bridge.events import LineItem, OrderConfirmation

logger = logging.getLogger(__name__)


class OrderPayloadParser:
    """Extract an OrderConfirmation from a webhook payload."""

    # OrderConfirmation field -> (metafields alias, metadata key)
    _METAFIELDS: Dict[str, tuple] = {
        "browser_id": ("fbp", "_fbp"),
        "click_id": ("fbc", "_fbc"),
        "customer_ip": ("ip", "ip"),
        "external_id": ("f_external_id", "f_external_id"),
        "user_agent": ("userAgent", "userAgent"),
        "event_source_url": ("eventURL", "eventURL"),
    }

    @classmethod
    def parse(cls, payload: Any) -> Optional[OrderConfirmation]:
        """Return the order in ``payload``, or None when there is none."""
        if isinstance(payload, list) and len(payload) == 1:
            payload = payload[0]
        if not isinstance(payload, dict):
            return None

        order = payload.get("order")
        if not isinstance(order, dict):
            return None

        order_id = order.get("id")
        if not order_id:
            logger.warning("Order payload without id; treating as missing")
            return None

        fields: Dict[str, Any] = {}
        for name, (alias, key) in cls._METAFIELDS.items():
            fields[name] = cls._metafield(order, alias, key)

        total = order.get("total")
        if not isinstance(total, dict):
            total = {}
        shipping = order.get("shippingAddress")
        if not isinstance(shipping, dict):
            shipping = {}

        return OrderConfirmation(
            order_id=str(order_id),
            customer_email=cls._text(order.get("userEmail")),
            shipping_phone=cls._phone(shipping.get("phone")),
            total_amount=cls._amount(cls._gross(total)) or 0.0,
            currency=cls._text(total.get("currency")),
            line_items=tuple(cls._lines(order.get("lines"))),
            **fields,
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @classmethod
    def _metafield(cls, order: dict, alias: str, key: str) -> Optional[str]:
        holder = order.get(alias)
        if not isinstance(holder, dict):
            return None
        return cls._text(holder.get(key))

    @classmethod
    def _lines(cls, lines: Any) -> List[LineItem]:
        if not isinstance(lines, list):
            return []
        items = []
        for line in lines:
            if not isinstance(line, dict):
                continue
            variant = line.get("variant")
            if not isinstance(variant, dict):
                variant = {}
            pricing = variant.get("pricing")
            if not isinstance(pricing, dict):
                pricing = {}
            items.append(
                LineItem(
                    product_key=cls._product_key(variant),
                    quantity=cls._quantity(line.get("quantity")),
                    unit_price=cls._amount(cls._gross(pricing.get("price"))),
                )
            )
        return items

    @classmethod
    def _product_key(cls, variant: dict) -> str:
        """Product slug, else product id, else variant id."""
        product = variant.get("product")
        if not isinstance(product, dict):
            product = {}
        for candidate in (product.get("slug"), product.get("id"), variant.get("id")):
            text = cls._text(candidate)
            if text:
                return text
        return ""

    @staticmethod
    def _gross(money: Any) -> Any:
        """``{"gross": {"amount": x}}`` -> x."""
        if not isinstance(money, dict):
            return None
        gross = money.get("gross")
        if not isinstance(gross, dict):
            return None
        return gross.get("amount")

    @staticmethod
    def _amount(value: Any) -> Optional[float]:
        if isinstance(value, bool) or value is None:
            return None
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(amount) or amount < 0:
            return None
        return amount

    @staticmethod
    def _quantity(value: Any) -> int:
        if isinstance(value, bool):
            return 0
        try:
            return max(int(value), 0)
        except (TypeError, ValueError, OverflowError):
            return 0

    @staticmethod
    def _phone(value: Any) -> Optional[str]:
        """Any non-empty phone, unchanged."""
        if value is None:
            return None
        text = str(value)
        return text or None

    @staticmethod
    def _text(value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None
