"""Shared fixtures: settings and a realistic ORDER_CONFIRMED payload."""

import copy
from unittest.mock import AsyncMock, MagicMock

import pytest

from capi_bridge.config import ConversionsSettings

ORDER_PAYLOAD = {
    "order": {
        "id": "T3JkZXI6YWJjMTIz",
        "userEmail": " Jane.Doe@Example.com ",
        "fbp": {"_fbp": "fb.1.1700000000000.1234567890"},
        "fbc": {"_fbc": "fb.1.1700000000000.AbCdEf"},
        "ip": {"ip": "203.0.113.7"},
        "f_external_id": {"f_external_id": "cust-42"},
        "userAgent": {"userAgent": "Mozilla/5.0 (X11; Linux x86_64)"},
        "eventURL": {"eventURL": "https://shop.example.com/checkout/success"},
        "shippingAddress": {
            "firstName": "Jane",
            "lastName": "Doe",
            "countryArea": "CDMX",
            "streetAddress1": "Av. Reforma 1",
            "phone": "+525512345678",
        },
        "total": {"gross": {"amount": 350.0}, "currency": "MXN"},
        "lines": [
            {
                "quantity": 2,
                "totalPrice": {"gross": {"amount": 200.0}},
                "variant": {
                    "id": "UHJvZHVjdFZhcmlhbnQ6MQ==",
                    "pricing": {"price": {"gross": {"amount": 100.0}}},
                    "product": {"id": "UHJvZHVjdDox", "slug": "blue-mug", "name": "Blue Mug"},
                },
            },
            {
                "quantity": 1,
                "totalPrice": {"gross": {"amount": 150.0}},
                "variant": {
                    "id": "UHJvZHVjdFZhcmlhbnQ6Mg==",
                    "pricing": {"price": {"gross": {"amount": 150.0}}},
                    "product": {"id": "UHJvZHVjdDoy", "slug": "tea-set", "name": "Tea Set"},
                },
            },
        ],
    }
}


@pytest.fixture
def payload():
    return copy.deepcopy(ORDER_PAYLOAD)


@pytest.fixture
def settings():
    return ConversionsSettings(
        access_token="test-token",
        pixel_id="1234567890",
        currency="MXN",
    )


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.send = AsyncMock(
        return_value={"events_received": 1, "messages": [], "fbtrace_id": "AbC"}
    )
    client.build_body = MagicMock(return_value={"data": []})
    return client
