"""Order submission for checkout drafts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .. import storage
from ..checkout import CheckoutDraft
from ..models import Order, OrderCreate, Product
from ..pixel import (
    EVENT_ADD_PAYMENT_INFO,
    EVENT_INITIATE_CHECKOUT,
    EVENT_PURCHASE,
    EVENT_VIEW_CONTENT,
    PixelClientProtocol,
    get_pixel_client,
)
from ..pricing import unit_price

logger = logging.getLogger(__name__)

OrderSink = Callable[[OrderCreate], Awaitable[Order]]

# Submit outcome reasons
REASON_INVALID = "invalid"
REASON_IN_FLIGHT = "in_flight"
REASON_CONSUMED = "consumed"
REASON_FAILED = "failed"


@dataclass
class SubmitOutcome:
    """Result of one submission attempt."""

    ok: bool
    order: Order | None = None
    reason: str = ""


class CheckoutService:
    """Sends drafts to the order store, one in-flight submission per session."""

    def __init__(
        self,
        order_sink: OrderSink | None = None,
        pixel: PixelClientProtocol | None = None,
        confirmation_hold_seconds: float = 5.0,
    ):
        self._order_sink = order_sink or storage.create_order
        self._pixel = pixel
        self.confirmation_hold_seconds = confirmation_hold_seconds
        self._in_flight: set[str] = set()

    @property
    def pixel(self) -> PixelClientProtocol:
        if self._pixel is None:
            self._pixel = get_pixel_client()
        return self._pixel

    def is_submitting(self, session_key: str) -> bool:
        return session_key in self._in_flight

    async def submit(self, session_key: str, draft: CheckoutDraft, user_id: int = 0) -> SubmitOutcome:
        """
        Submit a draft once.

        Invalid, already consumed, or concurrently submitted drafts are refused
        without calling the store. A store failure is logged and leaves the
        draft untouched so the customer can retry.
        """
        if draft.consumed:
            return SubmitOutcome(ok=False, reason=REASON_CONSUMED)
        if not draft.can_order:
            logger.debug("Refusing submit for %s, missing: %s", session_key, draft.errors)
            return SubmitOutcome(ok=False, reason=REASON_INVALID)
        if session_key in self._in_flight:
            logger.warning("Submit already in progress for %s", session_key)
            return SubmitOutcome(ok=False, reason=REASON_IN_FLIGHT)

        # The key stays in flight until tracking is done too
        self._in_flight.add(session_key)
        try:
            try:
                payload = draft.to_order_create()
                order = await self._order_sink(payload)
            except Exception:
                logger.exception("Order creation failed for %s", session_key)
                return SubmitOutcome(ok=False, reason=REASON_FAILED)

            draft.mark_consumed()
            await self._track(
                EVENT_PURCHASE,
                user_id,
                draft.product,
                value=order.total_price,
                phone=order.phone_number,
                num_items=order.quantity,
            )
            return SubmitOutcome(ok=True, order=order)
        finally:
            self._in_flight.discard(session_key)

    async def confirmation_hold(self) -> None:
        """Fixed pause before the confirmation view; purely cosmetic."""
        if self.confirmation_hold_seconds > 0:
            await asyncio.sleep(self.confirmation_hold_seconds)

    # -------------------------------------------------------------------------
    # Funnel tracking
    # -------------------------------------------------------------------------
    async def track_view(self, user_id: int, product: Product) -> None:
        await self._track(EVENT_VIEW_CONTENT, user_id, product, value=unit_price(product))

    async def track_initiate_checkout(self, user_id: int, product: Product) -> None:
        await self._track(EVENT_INITIATE_CHECKOUT, user_id, product, value=unit_price(product))

    async def track_payment_info(self, user_id: int, draft: CheckoutDraft) -> None:
        await self._track(
            EVENT_ADD_PAYMENT_INFO,
            user_id,
            draft.product,
            value=draft.total_price,
            phone=draft.phone_number,
        )

    async def _track(
        self,
        event_name: str,
        user_id: int,
        product: Product,
        *,
        value: int,
        phone: str | None = None,
        num_items: int | None = None,
    ) -> None:
        custom_data = {
            "value": value,
            "content_name": product.name,
            "content_ids": [product.product_id],
            "content_type": "product",
        }
        if num_items is not None:
            custom_data["num_items"] = num_items
        try:
            await self.pixel.track(event_name, user_id, custom_data, phone=phone)
        except Exception as e:
            logger.warning("Pixel tracking %s failed: %s", event_name, e)
