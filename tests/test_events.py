"""Tests for the purchase event data model."""

import hashlib

import pytest

from capi_bridge.events import (
    ACTION_SOURCE,
    EVENT_NAME,
    Content,
    CustomData,
    LineItem,
    OrderConfirmation,
    PurchaseEvent,
    UserIdentity,
)


def _sha(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()


class TestUserIdentity:
    def test_drops_absent_fields(self):
        row = UserIdentity(client_ip_address="203.0.113.7").to_capi_dict()

        assert row == {"client_ip_address": "203.0.113.7"}

    def test_hashes_pii(self):
        row = UserIdentity(
            email="jane@example.com", phone="+525512345678", external_id="cust-42"
        ).to_capi_dict()

        assert row["em"] == [_sha("jane@example.com")]
        assert row["ph"] == [_sha("+525512345678")]
        assert row["external_id"] == [_sha("cust-42")]

    def test_tracking_ids_sent_in_clear(self):
        row = UserIdentity(fbp="fb.1.1.2", fbc="fb.1.1.c", client_user_agent="UA").to_capi_dict()

        assert row["fbp"] == "fb.1.1.2"
        assert row["fbc"] == "fb.1.1.c"
        assert row["client_user_agent"] == "UA"


class TestPurchaseEvent:
    def _event(self, **kwargs):
        defaults = dict(
            event_id="abc123_Purchase_1700000000",
            event_time=1700000000,
            user_data=UserIdentity(),
            custom_data=CustomData(
                currency="MXN",
                value=100.0,
                contents=(Content(id="blue-mug", quantity=1, item_price=100.0),),
                content_ids=("blue-mug",),
            ),
        )
        defaults.update(kwargs)
        return PurchaseEvent(**defaults)

    def test_defaults(self):
        event = self._event()
        assert event.event_name == EVENT_NAME == "Purchase"
        assert event.action_source == ACTION_SOURCE == "website"
        assert event.custom_data.content_type == "product"

    def test_to_capi_dict_shape(self):
        row = self._event(event_source_url="https://shop.example.com").to_capi_dict()

        assert row["event_id"] == "abc123_Purchase_1700000000"
        assert row["event_name"] == "Purchase"
        assert row["event_time"] == 1700000000
        assert row["action_source"] == "website"
        assert row["event_source_url"] == "https://shop.example.com"
        assert row["custom_data"] == {
            "contents": [{"id": "blue-mug", "quantity": 1, "item_price": 100.0}],
            "currency": "MXN",
            "value": 100.0,
            "content_type": "product",
            "content_ids": ["blue-mug"],
        }

    def test_to_capi_dict_drops_missing_source_url(self):
        row = self._event().to_capi_dict()
        assert "event_source_url" not in row

    def test_frozen(self):
        event = self._event()
        with pytest.raises(AttributeError):
            event.event_id = "other"


class TestOrderConfirmation:
    def test_defaults(self):
        order = OrderConfirmation(order_id="abc123")
        assert order.line_items == ()
        assert order.total_amount == 0.0
        assert order.customer_email is None

    def test_line_item_price_optional(self):
        assert LineItem(product_key="mug").unit_price is None
