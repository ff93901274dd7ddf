"""Application service: Create Order use case.

Turns the payload assembled at checkout into a persisted Order.  The
payload's totals are re-derived by the aggregate and must agree with
what the customer was shown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from storefront.application.dto import OrderDTO, OrderPayload
from storefront.application.order_mapper import to_order_dto, to_shipping_address
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import Order, OrderItem, PaymentMethod
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.order_numbering import daily_prefix, next_order_number

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._clock = clock

    def handle(self, payload: OrderPayload) -> OrderDTO:
        """Create a new order.

        Steps:
        1. Snapshot each payload line into an OrderItem.
        2. Let the Order aggregate validate items and compute the total.
        3. Reject the payload if its total disagrees with the computed one.
        4. Assign the daily order number, persist and return a DTO.
        """
        now = self._clock()

        try:
            method = PaymentMethod(payload.payment_method)
        except ValueError:
            raise ValidationError(
                f"Unsupported payment method '{payload.payment_method}'",
                field="payment_method",
            ) from None

        items = [
            OrderItem(
                product_ref=line.product_ref,
                name=line.name,
                sku=line.sku,
                size=line.size,
                color=line.color,
                unit_price=Money.of(line.unit_price),
                quantity=Quantity(line.quantity),
                image=line.image,
            )
            for line in payload.items
        ]

        order = Order.create(
            items=items,
            shipping_address=to_shipping_address(payload.shipping_address),
            payment_method=method,
            shipping_fee=Money.of(payload.shipping_fee),
            tax=Money.of(payload.tax),
            discount=Money.of(payload.discount),
            customer_notes=payload.order_notes,
            subtotal=Money.of(payload.subtotal),
            now=now,
        )

        if order.total != Money.of(payload.total):
            raise ValidationError(
                f"Order total {Money.of(payload.total)} does not match "
                f"subtotal + shipping + tax - discount ({order.total})"
            )

        latest = self._order_repo.latest_order_number(daily_prefix(now))
        order.order_number = next_order_number(now, latest)
        self._order_repo.save(order)

        logger.info(
            "Order %s created: %d item(s), total %s, payment %s",
            order.order_number,
            order.item_count,
            order.total,
            method.value,
        )
        return to_order_dto(order)
