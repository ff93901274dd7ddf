"""Checkout orchestrator — the Shipping → Payment → Review wizard.

Holds the only reference to the current CheckoutSession and moves it
forward through the pure reducers in ``storefront.domain.model.checkout``.
On submission it hands control to the payment strategy for the chosen
method and turns every failure into a SubmissionResult the UI can show.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from storefront.application.checkout.payment_strategies import PaymentStrategy
from storefront.application.checkout.ports import CartGateway, Navigator, OrderService
from storefront.application.dto import CartSnapshot, OrderDTO, OrderPayload
from storefront.application.order_mapper import to_shipping_address_dto
from storefront.domain.exceptions import (
    DomainException,
    OrderCreationFailed,
    PaymentError,
    ValidationError,
)
from storefront.domain.model import checkout
from storefront.domain.model.checkout import CheckoutSession
from storefront.domain.model.order import PaymentMethod
from storefront.domain.model.value_objects import Money

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_DELAY = 3.0


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    message: str
    order: OrderDTO | None = None
    field: str | None = None
    warnings: tuple[str, ...] = ()


class CheckoutOrchestrator:

    def __init__(
        self,
        cart: CartGateway,
        order_service: OrderService,
        navigator: Navigator,
        strategies: Mapping[PaymentMethod, PaymentStrategy],
        redirect_delay: float = DEFAULT_REDIRECT_DELAY,
        session: CheckoutSession | None = None,
    ) -> None:
        self._cart = cart
        self._order_service = order_service
        self._navigator = navigator
        self._strategies = dict(strategies)
        self._redirect_delay = redirect_delay
        self._session = session or CheckoutSession()

    @property
    def session(self) -> CheckoutSession:
        return self._session

    # --- Form editing ---------------------------------------------------------

    def edit_shipping(self, name: str, value: str) -> None:
        self._session = checkout.edit_shipping(self._session, name, value)

    def select_payment_method(self, method: PaymentMethod | None) -> None:
        self._session = checkout.select_payment_method(self._session, method)

    def edit_payment_details(self, name: str, value: str) -> None:
        self._session = checkout.edit_payment_details(self._session, name, value)

    def set_order_notes(self, notes: str) -> None:
        self._session = checkout.set_order_notes(self._session, notes)

    # --- Navigation -----------------------------------------------------------

    def advance(self) -> bool:
        """Try to move to the next step; False if the current one has errors."""
        self._session = checkout.advance(self._session)
        return not self._session.has_errors

    def retreat(self) -> None:
        self._session = checkout.retreat(self._session)

    # --- Submission -----------------------------------------------------------

    def submit(self) -> SubmissionResult:
        """Place the order through the selected payment strategy.

        At most one ``create_order`` call is issued per invocation, and
        none while another submission is still in flight.
        """
        if self._session.submitting:
            return SubmissionResult(False, "Your order is already being placed")
        if self._session.order_placed:
            return SubmissionResult(False, "This order has already been placed")

        error = checkout.submission_error(self._session)
        if error is not None:
            self._session = checkout.record_error(self._session, error)
            return SubmissionResult(False, str(error), field=error.field)

        method = self._session.payment_method
        strategy = self._strategies.get(method)  # type: ignore[arg-type]
        if strategy is None:
            return SubmissionResult(
                False, f"{method.value} payments are not available", field="payment_method"  # type: ignore[union-attr]
            )

        cart = self._cart.snapshot()
        if cart.is_empty:
            return SubmissionResult(False, "Your cart is empty")
        try:
            payload = self._build_payload(cart)
        except ValidationError as exc:
            return SubmissionResult(False, str(exc))

        self._session = checkout.begin_submission(self._session)
        # Filled by _place_order as soon as the order exists, so a later
        # failure cannot leave the session open for a second order.
        created: list[OrderDTO] = []
        try:
            order = strategy.process(
                self._session.payment_details, lambda: self._place_order(payload, created)
            )
        except ValidationError as exc:
            self._session = checkout.record_error(self._session, exc)
            return SubmissionResult(False, str(exc), field=exc.field)
        except (PaymentError, OrderCreationFailed) as exc:
            return SubmissionResult(False, str(exc))
        finally:
            self._session = checkout.finish_submission(self._session, placed=bool(created))

        warnings = self._after_order_placed(order)
        return SubmissionResult(True, "Order placed successfully!", order=order, warnings=warnings)

    # --- Internal helpers -----------------------------------------------------

    def _place_order(self, payload: OrderPayload, created: list[OrderDTO]) -> OrderDTO:
        try:
            order = self._order_service.create_order(payload)
        except (DomainException, OSError) as exc:
            logger.warning("Order creation rejected: %s", exc)
            raise OrderCreationFailed(f"Could not place your order: {exc}") from exc

        created.append(order)
        return order

    def _after_order_placed(self, order: OrderDTO) -> tuple[str, ...]:
        """Clear the cart and schedule the redirect.

        The order is already stored, so failures here are reported as
        warnings on a successful result rather than raised.
        """
        warnings = []
        try:
            self._cart.clear_cart()
        except Exception:
            logger.exception("Could not clear the cart after order %s", order.order_number)
            warnings.append("Your order was placed but the cart could not be cleared")
        try:
            self._navigator.schedule_redirect(order.id, self._redirect_delay)
        except Exception:
            logger.exception("Could not open order %s", order.order_number)
            warnings.append(f"Your order was placed; see order #{order.id} for details")
        return tuple(warnings)

    def _build_payload(self, cart: CartSnapshot) -> OrderPayload:
        total = (
            Money.of(cart.subtotal) + Money.of(cart.shipping_fee) + Money.of(cart.tax)
        ) - Money.of(cart.discount)
        return OrderPayload(
            items=list(cart.items),
            shipping_address=to_shipping_address_dto(self._session.shipping_address.to_address()),
            payment_method=self._session.payment_method.value,  # type: ignore[union-attr]
            subtotal=cart.subtotal,
            shipping_fee=cart.shipping_fee,
            tax=cart.tax,
            discount=cart.discount,
            total=str(total.amount),
            order_notes=self._session.order_notes,
        )
