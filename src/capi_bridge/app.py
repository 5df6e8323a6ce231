"""FastAPI application exposing the ORDER_CONFIRMED webhook endpoint.

Usage::

    from capi_bridge.app import create_app

    app = create_app()  # settings from the environment

or run directly::

    FACEBOOK_ACCESS_TOKEN=... FACEBOOK_PIXEL_ID=... python -m capi_bridge
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import os
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from capi_bridge.client import ConversionsAPIClient
from capi_bridge.config import ConversionsSettings
from capi_bridge.handler import OrderConfirmedHandler

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/webhooks/order-confirmed"
SIGNATURE_HEADER = "saleor-signature"


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """Check a hex HMAC-SHA256 of the raw body against ``signature``."""
    if not signature:
        return False
    computed = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(computed, signature.strip())


def create_app(
    settings: Optional[ConversionsSettings] = None,
    *,
    client: Optional[ConversionsAPIClient] = None,
    clock: Optional[Callable[[], float]] = None,
) -> FastAPI:
    settings = settings or ConversionsSettings.from_env()
    handler = OrderConfirmedHandler(
        settings, client or ConversionsAPIClient(settings), clock=clock
    )

    app = FastAPI(title="Order Confirmed -> Conversions API")
    app.state.handler = handler

    @app.post(WEBHOOK_PATH)
    async def order_confirmed(request: Request):
        raw = await request.body()

        if settings.webhook_secret and not verify_signature(
            raw, request.headers.get(SIGNATURE_HEADER), settings.webhook_secret
        ):
            logger.warning("Rejected webhook with invalid %s", SIGNATURE_HEADER)
            return JSONResponse({"message": "Invalid signature"}, status_code=401)

        payload = None
        if raw:
            try:
                payload = json.loads(raw)
            except ValueError:
                logger.warning("Webhook body is not valid JSON")

        outcome = await handler.handle(payload)
        return JSONResponse(outcome.body, status_code=outcome.status)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def main() -> None:
    import uvicorn

    settings = ConversionsSettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run(
        create_app(settings),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
        log_level=settings.log_level.lower(),
    )
