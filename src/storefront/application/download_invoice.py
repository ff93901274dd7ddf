"""Application service: Download Invoice use case.

Rendering the document is somebody else's job; this handler only looks
the order up and hands it to an InvoiceRenderer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.application.dto import InvoiceDTO, OrderDTO
from storefront.application.order_mapper import to_order_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.order_repository import OrderRepository


class InvoiceRenderer(ABC):

    @abstractmethod
    def render(self, order: OrderDTO) -> str:
        """Return the invoice for *order* as an HTML document."""


class DownloadInvoiceHandler:

    def __init__(self, order_repo: OrderRepository, renderer: InvoiceRenderer) -> None:
        self._order_repo = order_repo
        self._renderer = renderer

    def handle(self, order_id: int) -> InvoiceDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        dto = to_order_dto(order)
        return InvoiceDTO(html=self._renderer.render(dto), order_number=dto.order_number)
