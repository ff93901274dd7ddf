"""Application service: Return Order use case (customer)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from storefront.application.dto import OrderDTO
from storefront.application.order_mapper import to_order_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReturnOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._clock = clock

    def handle(
        self,
        order_id: int,
        reason: str,
        customer: str | None = None,
        expected_version: int | None = None,
    ) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.request_return(
            reason,
            updated_by=customer,
            expected_version=expected_version,
            now=self._clock(),
        )
        self._order_repo.save(order)
        logger.info("Return requested for order %s", order.order_number)
        return to_order_dto(order)
