"""Application service: List Orders use case (query).

Serves both the customer's order history and the admin order table.
Filtering and paging happen in memory; the repository only lists.
"""

from __future__ import annotations

import math

from storefront.application.dto import OrderFilters, OrderPageDTO, PaginationDTO
from storefront.application.order_mapper import to_order_dto
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import Order, OrderStatus
from storefront.domain.repository.order_repository import OrderRepository

MAX_PAGE_SIZE = 100

_SORT_KEYS = {
    "created_at": lambda order: (order.created_at, order.id or 0),
    "total": lambda order: (order.total.amount, order.id or 0),
}


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, filters: OrderFilters | None = None) -> OrderPageDTO:
        filters = filters or OrderFilters()
        if filters.page < 1:
            raise ValidationError("Page must be 1 or greater", field="page")
        if not 1 <= filters.limit <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"Limit must be between 1 and {MAX_PAGE_SIZE}", field="limit"
            )

        orders = [
            order
            for order in self._order_repo.list_all()
            if self._matches(order, filters)
        ]
        orders.sort(key=self._sort_key(filters.sort), reverse=filters.sort.startswith("-"))

        total = len(orders)
        start = (filters.page - 1) * filters.limit
        page = orders[start:start + filters.limit]

        return OrderPageDTO(
            orders=[to_order_dto(order) for order in page],
            pagination=PaginationDTO(
                page=filters.page,
                limit=filters.limit,
                total=total,
                pages=math.ceil(total / filters.limit),
            ),
        )

    @staticmethod
    def _matches(order: Order, filters: OrderFilters) -> bool:
        if filters.status:
            try:
                wanted = OrderStatus(filters.status)
            except ValueError:
                raise ValidationError(
                    f"Unknown order status '{filters.status}'", field="status"
                ) from None
            if order.order_status != wanted:
                return False

        if filters.search:
            needle = filters.search.lower()
            haystack = (
                order.order_number or "",
                order.shipping_address.email,
                order.shipping_address.phone,
            )
            if not any(needle in value.lower() for value in haystack):
                return False

        return True

    @staticmethod
    def _sort_key(sort: str):
        try:
            return _SORT_KEYS[sort.lstrip("-")]
        except KeyError:
            raise ValidationError(
                f"Cannot sort by '{sort}'. Expected one of: "
                f"{', '.join(sorted(_SORT_KEYS))} (prefix '-' for descending)",
                field="sort",
            ) from None
