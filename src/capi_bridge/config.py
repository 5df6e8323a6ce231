"""Runtime settings for the Conversions API bridge.

Credentials are read once (usually from the environment) into an
immutable ``ConversionsSettings`` that is handed to the client and the
handler at construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

GRAPH_API_VERSION = "v19.0"
GRAPH_API_BASE_URL = "https://graph.facebook.com"
DEFAULT_CURRENCY = "MXN"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ConversionsSettings:
    """Settings for one pixel / dataset.

    Attributes:
        access_token: Conversions API system-user access token
        pixel_id: Pixel (dataset) the events are reported to
        currency: Reporting currency for every purchase event
        graph_api_version: Graph API version segment, e.g. ``v19.0``
        graph_api_base_url: Graph API host
        test_event_code: Routes events to the Events Manager test tab
        request_timeout_seconds: Timeout for the outbound call
        stable_event_id: Derive event ids from the order id alone
        webhook_secret: Shared secret for ``saleor-signature`` checks
        log_level: Root log level used by ``main()``
    """

    access_token: str
    pixel_id: str
    currency: str = DEFAULT_CURRENCY
    graph_api_version: str = GRAPH_API_VERSION
    graph_api_base_url: str = GRAPH_API_BASE_URL
    test_event_code: Optional[str] = None
    request_timeout_seconds: float = 10.0
    stable_event_id: bool = False
    webhook_secret: Optional[str] = None
    log_level: str = "INFO"

    @property
    def events_endpoint(self) -> str:
        base = self.graph_api_base_url.rstrip("/")
        return f"{base}/{self.graph_api_version}/{self.pixel_id}/events"

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> ConversionsSettings:
        """Load settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ValueError: if the access token or pixel id is missing.
        """
        env = os.environ if environ is None else environ

        access_token = env.get("FACEBOOK_ACCESS_TOKEN", "")
        pixel_id = env.get("FACEBOOK_PIXEL_ID", "")
        missing = [
            name
            for name, value in (
                ("FACEBOOK_ACCESS_TOKEN", access_token),
                ("FACEBOOK_PIXEL_ID", pixel_id),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"{' and '.join(missing)} must be provided.")

        return cls(
            access_token=access_token,
            pixel_id=pixel_id,
            currency=env.get("CAPI_CURRENCY", DEFAULT_CURRENCY).upper(),
            graph_api_version=env.get("CAPI_GRAPH_API_VERSION", GRAPH_API_VERSION),
            graph_api_base_url=env.get("CAPI_GRAPH_API_BASE_URL", GRAPH_API_BASE_URL),
            test_event_code=env.get("CAPI_TEST_EVENT_CODE") or None,
            request_timeout_seconds=float(env.get("CAPI_TIMEOUT_SECONDS", "10")),
            stable_event_id=env.get("CAPI_STABLE_EVENT_ID", "").lower() in _TRUTHY,
            webhook_secret=env.get("SALEOR_WEBHOOK_SECRET") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
