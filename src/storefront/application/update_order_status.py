"""Application service: Update Order Status use case (admin).

The admin picks any status; whether that move is allowed is decided by
the injected TransitionPolicy, which is permissive unless configured
otherwise.
"""

from __future__ import annotations

import logging
from datetime import date

from storefront.application.dto import OrderDTO, StatusUpdate
from storefront.application.order_mapper import to_order_dto
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.transition_policy import TransitionPolicy

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        policy: TransitionPolicy | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._policy = policy or TransitionPolicy.permissive()

    def handle(
        self,
        order_id: int,
        update: StatusUpdate,
        admin: str | None = None,
    ) -> OrderDTO:
        try:
            status = OrderStatus(update.status)
        except ValueError:
            raise ValidationError(
                f"Unknown order status '{update.status}'", field="status"
            ) from None

        estimated_delivery = _parse_delivery_date(update.estimated_delivery)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        previous = order.order_status
        order.apply_status_update(
            status,
            policy=self._policy,
            tracking_number=update.tracking_number,
            carrier=update.carrier,
            note=update.note,
            updated_by=admin,
            expected_version=update.expected_version,
            estimated_delivery=estimated_delivery,
        )
        self._order_repo.save(order)

        logger.info(
            "Order %s moved %s -> %s (policy=%s)",
            order.order_number,
            previous.value,
            status.value,
            self._policy.name,
        )
        return to_order_dto(order)


def _parse_delivery_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(
            f"Estimated delivery must be a YYYY-MM-DD date, got '{value}'",
            field="estimated_delivery",
        ) from None
