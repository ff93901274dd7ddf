"""In-process OrderService: the order collaborator backed by local handlers."""

from __future__ import annotations

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.checkout.ports import OrderService
from storefront.application.create_order import CreateOrderHandler
from storefront.application.download_invoice import DownloadInvoiceHandler, InvoiceRenderer
from storefront.application.dto import (
    InvoiceDTO,
    OrderDTO,
    OrderFilters,
    OrderPageDTO,
    OrderPayload,
    StatusUpdate,
)
from storefront.application.list_orders import ListOrdersHandler
from storefront.application.return_order import ReturnOrderHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.transition_policy import TransitionPolicy


class LocalOrderService(OrderService):

    def __init__(
        self,
        order_repo: OrderRepository,
        invoice_renderer: InvoiceRenderer,
        policy: TransitionPolicy | None = None,
    ) -> None:
        self._create = CreateOrderHandler(order_repo)
        self._show = ShowOrderHandler(order_repo)
        self._list = ListOrdersHandler(order_repo)
        self._cancel = CancelOrderHandler(order_repo)
        self._update = UpdateOrderStatusHandler(order_repo, policy)
        self._return = ReturnOrderHandler(order_repo)
        self._invoice = DownloadInvoiceHandler(order_repo, invoice_renderer)

    def create_order(self, payload: OrderPayload) -> OrderDTO:
        return self._create.handle(payload)

    def get_order_by_id(self, order_id: int) -> OrderDTO:
        return self._show.handle(order_id)

    def get_orders(self, filters: OrderFilters) -> OrderPageDTO:
        return self._list.handle(filters)

    def cancel_order(self, order_id: int) -> OrderDTO:
        return self._cancel.handle(order_id)

    def update_order_status(self, order_id: int, update: StatusUpdate) -> OrderDTO:
        return self._update.handle(order_id, update, admin="admin")

    def return_order(self, order_id: int, reason: str) -> OrderDTO:
        return self._return.handle(order_id, reason)

    def download_invoice(self, order_id: int) -> InvoiceDTO:
        return self._invoice.handle(order_id)
