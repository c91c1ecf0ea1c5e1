"""Meta (Facebook) Conversions API client for storefront funnel events."""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)

GRAPH_API_URL = "https://graph.facebook.com/v19.0"

# Default timeout for API requests
DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)

CURRENCY = "DZD"

EVENT_VIEW_CONTENT = "ViewContent"
EVENT_INITIATE_CHECKOUT = "InitiateCheckout"
EVENT_ADD_PAYMENT_INFO = "AddPaymentInfo"
EVENT_PURCHASE = "Purchase"


def _sha256(value: str) -> str:
    return hashlib.sha256(value.strip().lower().encode()).hexdigest()


def international_phone(local_phone: str) -> str:
    """0555123456 -> 213555123456 (format expected by the API before hashing)."""
    digits = "".join(ch for ch in local_phone if ch.isdigit())
    if digits.startswith("0"):
        return "213" + digits[1:]
    return digits


class PixelClientProtocol(Protocol):
    async def track(
        self,
        event_name: str,
        user_id: int,
        custom_data: dict[str, Any] | None = None,
        phone: str | None = None,
    ) -> bool: ...


class PixelClient:
    """Async client sending server-side events to one pixel."""

    def __init__(self, pixel_id: str, access_token: str, test_event_code: str | None = None):
        self.pixel_id = pixel_id
        self.access_token = access_token
        self.test_event_code = test_event_code
        self._url = f"{GRAPH_API_URL}/{pixel_id}/events"

    def build_event(
        self,
        event_name: str,
        user_id: int,
        custom_data: dict[str, Any] | None = None,
        phone: str | None = None,
    ) -> dict[str, Any]:
        user_data: dict[str, Any] = {"external_id": [_sha256(str(user_id))]}
        if phone:
            user_data["ph"] = [_sha256(international_phone(phone))]
        data = {"currency": CURRENCY, **(custom_data or {})}
        return {
            "event_name": event_name,
            "event_time": int(time.time()),
            "action_source": "chat",
            "user_data": user_data,
            "custom_data": data,
        }

    async def track(
        self,
        event_name: str,
        user_id: int,
        custom_data: dict[str, Any] | None = None,
        phone: str | None = None,
    ) -> bool:
        """Send one event. Returns False on any failure; tracking never raises."""
        body: dict[str, Any] = {"data": [self.build_event(event_name, user_id, custom_data, phone)]}
        if self.test_event_code:
            body["test_event_code"] = self.test_event_code

        try:
            async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
                response = await client.post(
                    self._url,
                    params={"access_token": self.access_token},
                    json=body,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Pixel API error sending %s: %s", event_name, e)
            return False
        except httpx.HTTPError as e:
            logger.error("Failed to send pixel event %s: %s", event_name, e)
            return False

        logger.debug("Pixel event %s sent for user %s", event_name, user_id)
        return True


class NoopPixelClient:
    """Used when the pixel is not configured."""

    async def track(
        self,
        event_name: str,
        user_id: int,
        custom_data: dict[str, Any] | None = None,
        phone: str | None = None,
    ) -> bool:
        logger.debug("Pixel disabled, skipping %s for user %s", event_name, user_id)
        return False


# Singleton instance (initialized on first use)
_pixel_client: PixelClientProtocol | None = None


def get_pixel_client() -> PixelClientProtocol:
    """
    Get or create the pixel client singleton.

    A real client when FB_PIXEL_ID and FB_ACCESS_TOKEN are configured,
    otherwise a no-op client.
    """
    global _pixel_client

    if _pixel_client is not None:
        return _pixel_client

    from .config import get_settings

    cfg = get_settings()
    if cfg.pixel_enabled():
        _pixel_client = PixelClient(
            pixel_id=cfg.fb_pixel_id,  # type: ignore[arg-type]
            access_token=cfg.fb_access_token,  # type: ignore[arg-type]
            test_event_code=cfg.fb_test_event_code,
        )
        logger.info("Pixel client initialized (pixel_id=%s)", cfg.fb_pixel_id)
    else:
        _pixel_client = NoopPixelClient()
        logger.info("Pixel tracking disabled (credentials not configured)")
    return _pixel_client


def set_pixel_client(client: PixelClientProtocol | None) -> None:
    """Replace the singleton (startup wiring and tests)."""
    global _pixel_client
    _pixel_client = client
