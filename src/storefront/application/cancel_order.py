"""Application service: Cancel Order use case (customer).

Only orders that have not shipped can be cancelled.  Stock and refunds
are not touched here; the returned DTO is re-read from the repository
so the caller always sees the stored state.
"""

from __future__ import annotations

import logging

from storefront.application.dto import OrderDTO
from storefront.application.order_mapper import to_order_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        order_id: int,
        customer: str | None = None,
        expected_version: int | None = None,
    ) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.cancel(updated_by=customer, expected_version=expected_version)
        self._order_repo.save(order)
        logger.info("Order %s cancelled by customer", order.order_number)

        refreshed = self._order_repo.get_by_id(order_id)
        if refreshed is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return to_order_dto(refreshed)
