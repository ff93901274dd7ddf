"""Collaborator interfaces the checkout depends on.

The orchestrator and the payment strategies only ever talk to these
abstractions; the composition root decides whether they are backed by a
terminal, JSON files or test doubles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from storefront.application.dto import (
    CartSnapshot,
    InvoiceDTO,
    OrderDTO,
    OrderFilters,
    OrderPageDTO,
    OrderPayload,
    StatusUpdate,
)


class ConfirmationResult(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"

    @property
    def accepted(self) -> bool:
        return self is ConfirmationResult.ACCEPTED


class PaymentConfirmationPort(ABC):
    """User interaction standing in for a real payment gateway."""

    @abstractmethod
    def confirm(self, prompt: str, timeout: float | None = None) -> ConfirmationResult:
        """Ask a yes/no question and block until answered or timed out."""

    @abstractmethod
    def open_external(self, url: str) -> bool:
        """Open *url* in a new browser context; False if it was blocked."""

    @abstractmethod
    def await_return(self, url: str, timeout: float | None = None) -> ConfirmationResult:
        """Wait for the user to come back from the page opened at *url*."""


class Navigator(ABC):

    @abstractmethod
    def schedule_redirect(self, order_id: int, delay: float) -> None:
        """Show the order-detail view for *order_id* after *delay* seconds."""


class CartGateway(ABC):

    @abstractmethod
    def snapshot(self) -> CartSnapshot:
        """Current cart lines and totals."""

    @abstractmethod
    def clear_cart(self) -> None:
        """Empty the cart.  Calling it on an empty cart is a no-op."""


class OrderService(ABC):
    """The order collaborator as seen by the storefront."""

    @abstractmethod
    def create_order(self, payload: OrderPayload) -> OrderDTO:
        """Persist a new order and return it with its order number."""

    @abstractmethod
    def get_order_by_id(self, order_id: int) -> OrderDTO:
        """Raise EntityNotFoundError if no such order exists."""

    @abstractmethod
    def get_orders(self, filters: OrderFilters) -> OrderPageDTO:
        """One page of orders."""

    @abstractmethod
    def cancel_order(self, order_id: int) -> OrderDTO:
        """Raise InvalidTransition if the order can no longer be cancelled."""

    @abstractmethod
    def update_order_status(self, order_id: int, update: StatusUpdate) -> OrderDTO:
        """Admin-only status change."""

    @abstractmethod
    def return_order(self, order_id: int, reason: str) -> OrderDTO:
        """Request a return of a delivered order."""

    @abstractmethod
    def download_invoice(self, order_id: int) -> InvoiceDTO:
        """Rendered invoice plus the order number used to name the file."""
