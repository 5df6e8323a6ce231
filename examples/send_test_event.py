#!/usr/bin/env python3
"""
Send a sample ORDER_CONFIRMED delivery through the bridge
==========================================================

Builds the app in-process and posts a realistic Saleor payload to the
webhook endpoint.  Set CAPI_TEST_EVENT_CODE so the event lands in the
Events Manager "Test events" tab instead of live reporting.

Run:
    FACEBOOK_ACCESS_TOKEN=... FACEBOOK_PIXEL_ID=... CAPI_TEST_EVENT_CODE=TEST123 \
        python examples/send_test_event.py
"""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from capi_bridge import ConversionsSettings, create_app
from capi_bridge.app import WEBHOOK_PATH

SAMPLE_PAYLOAD = {
    "order": {
        "id": f"demo-{int(time.time())}",
        "userEmail": "Demo.Buyer@Example.com",
        "fbp": {"_fbp": "fb.1.1700000000000.1234567890"},
        "fbc": None,
        "ip": {"ip": "203.0.113.7"},
        "f_external_id": {"f_external_id": "demo-customer"},
        "userAgent": {"userAgent": "Mozilla/5.0 (demo)"},
        "eventURL": {"eventURL": "https://shop.example.com/checkout/success"},
        "shippingAddress": {"phone": "+525512345678"},
        "total": {"gross": {"amount": 199.0}, "currency": "MXN"},
        "lines": [
            {
                "quantity": 1,
                "variant": {
                    "id": "UHJvZHVjdFZhcmlhbnQ6MQ==",
                    "pricing": {"price": {"gross": {"amount": 199.0}}},
                    "product": {"id": "UHJvZHVjdDox", "slug": "demo-mug", "name": "Demo Mug"},
                },
            }
        ],
    }
}


async def main() -> None:
    settings = ConversionsSettings.from_env()
    logging.basicConfig(level=settings.log_level)
    if not settings.test_event_code:
        print("WARNING: CAPI_TEST_EVENT_CODE is not set; this event is reported live.")

    app = create_app(settings)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://bridge") as client:
        resp = await client.post(WEBHOOK_PATH, json=SAMPLE_PAYLOAD)

    print(f"\n   {resp.status_code} {resp.json()}")


if __name__ == "__main__":
    asyncio.run(main())
