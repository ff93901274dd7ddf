"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON stores and the
terminal adapters but keep everything in memory. No file I/O, no
prompts, no side effects.
"""

from __future__ import annotations

from collections import deque
from decimal import Decimal

from storefront.application.checkout.ports import (
    CartGateway,
    ConfirmationResult,
    Navigator,
    OrderService,
    PaymentConfirmationPort,
)
from storefront.application.create_order import CreateOrderHandler
from storefront.application.dto import (
    CartSnapshot,
    InvoiceDTO,
    OrderDTO,
    OrderFilters,
    OrderItemPayload,
    OrderPageDTO,
    OrderPayload,
    StatusUpdate,
)
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.model.order import Order
from storefront.domain.repository.order_repository import OrderRepository


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1

    def next_id(self) -> int:
        return self._next_id

    def get_by_id(self, order_id: int) -> Order | None:
        return self._store.get(order_id)

    def list_all(self) -> list[Order]:
        return list(self._store.values())

    def latest_order_number(self, prefix: str) -> str | None:
        numbers = [
            o.order_number
            for o in self._store.values()
            if o.order_number and o.order_number.startswith(prefix)
        ]
        return max(numbers, default=None)

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self._next_id
            self._next_id += 1
        self._store[order.id] = order


class FakeCart(CartGateway):
    """Cart with fixed totals: 18% tax, free shipping from 1000.

    Set ``fail_with`` to make ``clear_cart`` raise instead.
    """

    def __init__(self, items: list[OrderItemPayload] | None = None, discount: str = "0") -> None:
        self.items = list(items or [])
        self.discount = discount
        self.clear_calls = 0
        self.fail_with: Exception | None = None

    def snapshot(self) -> CartSnapshot:
        subtotal = sum(
            (Decimal(item.unit_price) * item.quantity for item in self.items), Decimal("0")
        )
        shipping = Decimal("0") if not self.items or subtotal >= 1000 else Decimal("100")
        tax = (subtotal * Decimal("0.18")).quantize(Decimal("0.01"))
        return CartSnapshot(
            items=list(self.items),
            subtotal=str(subtotal),
            shipping_fee=str(shipping),
            tax=str(tax),
            discount=self.discount,
        )

    def clear_cart(self) -> None:
        self.clear_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.items = []


class ScriptedConfirmationPort(PaymentConfirmationPort):
    """Answers prompts from a script and records what was asked.

    ``answers`` feeds ``confirm`` and ``await_return`` in call order;
    ``popup_allowed`` decides what ``open_external`` returns.
    """

    def __init__(
        self,
        answers: list[ConfirmationResult | bool] | None = None,
        popup_allowed: bool = True,
    ) -> None:
        self._answers = deque(answers or [])
        self.popup_allowed = popup_allowed
        self.prompts: list[str] = []
        self.opened: list[str] = []
        self.timeouts: list[float | None] = []
        self.on_confirm = None

    def _next(self) -> ConfirmationResult:
        if not self._answers:
            raise AssertionError("Unexpected prompt: the script has no answers left")
        answer = self._answers.popleft()
        if isinstance(answer, bool):
            return ConfirmationResult.ACCEPTED if answer else ConfirmationResult.REJECTED
        return answer

    def confirm(self, prompt: str, timeout: float | None = None) -> ConfirmationResult:
        self.prompts.append(prompt)
        self.timeouts.append(timeout)
        if self.on_confirm is not None:
            self.on_confirm()
        return self._next()

    def open_external(self, url: str) -> bool:
        self.opened.append(url)
        return self.popup_allowed

    def await_return(self, url: str, timeout: float | None = None) -> ConfirmationResult:
        self.prompts.append(f"await_return:{url}")
        self.timeouts.append(timeout)
        return self._next()


class RecordingNavigator(Navigator):

    def __init__(self) -> None:
        self.redirects: list[tuple[int, float]] = []
        self.fail_with: Exception | None = None

    def schedule_redirect(self, order_id: int, delay: float) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.redirects.append((order_id, delay))


class FakeOrderService(OrderService):
    """Creates orders in a FakeOrderRepository and counts the calls.

    Set ``fail_with`` to make ``create_order`` raise instead.
    """

    def __init__(self, order_repo: FakeOrderRepository | None = None) -> None:
        self.order_repo = order_repo or FakeOrderRepository()
        self.create_calls: list[OrderPayload] = []
        self.fail_with: Exception | None = None

    def create_order(self, payload: OrderPayload) -> OrderDTO:
        self.create_calls.append(payload)
        if self.fail_with is not None:
            raise self.fail_with
        return CreateOrderHandler(self.order_repo).handle(payload)

    def get_order_by_id(self, order_id: int) -> OrderDTO:
        return ShowOrderHandler(self.order_repo).handle(order_id)

    def get_orders(self, filters: OrderFilters) -> OrderPageDTO:
        raise NotImplementedError

    def cancel_order(self, order_id: int) -> OrderDTO:
        raise NotImplementedError

    def update_order_status(self, order_id: int, update: StatusUpdate) -> OrderDTO:
        raise NotImplementedError

    def return_order(self, order_id: int, reason: str) -> OrderDTO:
        raise NotImplementedError

    def download_invoice(self, order_id: int) -> InvoiceDTO:
        raise NotImplementedError
