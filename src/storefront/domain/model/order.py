"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items, its financial
snapshot and its status history.  Every status change goes through one
of the transition methods below so the history ledger can never drift
from ``order_status``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING

from storefront.domain.exceptions import (
    ConcurrencyConflict,
    InvalidTransition,
    ValidationError,
)
from storefront.domain.model.value_objects import Money, Quantity

if TYPE_CHECKING:
    from storefront.domain.service.transition_policy import TransitionPolicy


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    COD = "cod"


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
TERMINAL_STATUSES = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.RETURNED}
)
NON_CANCELLABLE_STATUSES = frozenset(
    {
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.RETURNED,
    }
)
# Tracking metadata is only meaningful once the parcel has left the warehouse.
TRACKABLE_STATUSES = frozenset(
    {
        OrderStatus.SHIPPED,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
        OrderStatus.RETURNED,
    }
)
MAX_NOTES_LENGTH = 500
RETURN_WINDOW = timedelta(days=30)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ShippingAddress:
    full_name: str
    address_line1: str
    city: str
    state: str
    pin_code: str
    phone: str
    email: str
    address_line2: str = ""
    country: str = "India"


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a cart line at order-creation time.

    Frozen: name, price and variant never change after the order exists,
    even if the catalog entry does.
    """

    product_ref: str
    name: str
    sku: str
    size: str
    color: str
    unit_price: Money
    quantity: Quantity
    image: str = ""

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: OrderStatus
    timestamp: datetime
    note: str = ""
    updated_by: str | None = None


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules and writes the first history entry.  The ``__init__``
    is intentionally simple so the repository can reconstitute persisted
    orders without re-validating.
    """

    id: int | None
    order_number: str | None
    items: tuple[OrderItem, ...]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    subtotal: Money
    shipping_fee: Money
    tax: Money
    discount: Money
    total: Money
    payment_status: PaymentStatus = PaymentStatus.PENDING
    order_status: OrderStatus = OrderStatus.PENDING
    status_history: list[StatusHistoryEntry] = field(default_factory=list)
    customer_notes: str = ""
    tracking_number: str | None = None
    carrier: str | None = None
    estimated_delivery: date | None = None
    actual_delivery: datetime | None = None
    return_reason: str | None = None
    return_date: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        items: list[OrderItem],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        shipping_fee: Money,
        tax: Money,
        discount: Money | None = None,
        customer_notes: str = "",
        subtotal: Money | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants.

        ``subtotal`` is optional: when the caller supplies one it must
        match the sum of the line totals.
        """
        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(customer_notes) > MAX_NOTES_LENGTH:
            raise ValidationError(
                f"Customer notes cannot exceed {MAX_NOTES_LENGTH} characters",
                field="order_notes",
            )

        computed_subtotal = Money.zero()
        for item in items:
            computed_subtotal = computed_subtotal + item.line_total

        if subtotal is not None and subtotal != computed_subtotal:
            raise ValidationError(
                f"Subtotal {subtotal} does not match line items ({computed_subtotal})"
            )

        discount = discount or Money.zero()
        gross = computed_subtotal + shipping_fee + tax
        if discount > gross:
            raise ValidationError(f"Discount {discount} exceeds order value {gross}")

        created_at = now or _utc_now()
        order = Order(
            id=None,
            order_number=None,
            items=tuple(items),
            shipping_address=shipping_address,
            payment_method=payment_method,
            subtotal=computed_subtotal,
            shipping_fee=shipping_fee,
            tax=tax,
            discount=discount,
            total=gross - discount,
            customer_notes=customer_notes,
            created_at=created_at,
        )
        order.status_history.append(
            StatusHistoryEntry(OrderStatus.PENDING, created_at, "Order placed")
        )
        return order

    # --- State transitions ----------------------------------------------------

    @property
    def is_cancellable(self) -> bool:
        return self.order_status not in NON_CANCELLABLE_STATUSES

    def cancel(
        self,
        note: str = "Cancelled by customer",
        updated_by: str | None = None,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> None:
        """Customer-initiated transition to CANCELLED.

        No inventory or refund compensation happens here; that belongs
        to whoever owns stock and payments.
        """
        self._check_version(expected_version)
        if not self.is_cancellable:
            raise InvalidTransition(
                f"Order cannot be cancelled — current status is {self.order_status.value}"
            )
        self._record(OrderStatus.CANCELLED, note, updated_by, now)

    def apply_status_update(
        self,
        status: OrderStatus,
        policy: TransitionPolicy,
        tracking_number: str | None = None,
        carrier: str | None = None,
        note: str = "",
        updated_by: str | None = None,
        expected_version: int | None = None,
        now: datetime | None = None,
        estimated_delivery: date | None = None,
    ) -> None:
        """Admin-initiated status change, gated only by *policy*.

        ``estimated_delivery`` may be set with any status but cannot
        precede the day the order was placed.
        """
        self._check_version(expected_version)
        policy.check(self.order_status, status)

        if (tracking_number or carrier) and status not in TRACKABLE_STATUSES:
            raise ValidationError(
                f"Tracking details can only be set when the order is shipped or later, "
                f"not {status.value}",
                field="tracking_number",
            )
        if estimated_delivery is not None and estimated_delivery < self.created_at.date():
            raise ValidationError(
                "Estimated delivery cannot be before the order date",
                field="estimated_delivery",
            )

        now = now or _utc_now()
        if tracking_number:
            self.tracking_number = tracking_number.strip()
        if carrier:
            self.carrier = carrier.strip()
        if estimated_delivery is not None:
            self.estimated_delivery = estimated_delivery
        if status == OrderStatus.DELIVERED:
            self.actual_delivery = now

        self._record(status, note, updated_by, now)

    def request_return(
        self,
        reason: str,
        updated_by: str | None = None,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> None:
        """Transition DELIVERED -> RETURNED within the return window."""
        self._check_version(expected_version)
        if not reason or not reason.strip():
            raise ValidationError("Return reason is required", field="reason")
        if self.order_status != OrderStatus.DELIVERED:
            raise InvalidTransition("Only delivered orders can be returned")

        now = now or _utc_now()
        delivered_at = self.actual_delivery or self._last_entered(OrderStatus.DELIVERED)
        if delivered_at is None or now > delivered_at + RETURN_WINDOW:
            raise InvalidTransition("Return period has expired")

        self.return_reason = reason.strip()
        self.return_date = now
        self._record(
            OrderStatus.RETURNED,
            f"Return requested: {self.return_reason}",
            updated_by,
            now,
        )

    # --- Queries --------------------------------------------------------------

    def history_for_display(self) -> list[StatusHistoryEntry]:
        """Chronological history; synthesized from the current status if empty."""
        if not self.status_history:
            return [StatusHistoryEntry(self.order_status, self.created_at)]
        return sorted(self.status_history, key=lambda entry: entry.timestamp)

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    # --- Internal helpers -----------------------------------------------------

    def _record(
        self,
        status: OrderStatus,
        note: str,
        updated_by: str | None,
        now: datetime | None,
    ) -> None:
        self.order_status = status
        self.status_history.append(
            StatusHistoryEntry(status, now or _utc_now(), note or "", updated_by)
        )
        self.version += 1

    def _check_version(self, expected_version: int | None) -> None:
        if expected_version is not None and expected_version != self.version:
            raise ConcurrencyConflict(
                f"Order {self.order_number or self.id} was modified "
                f"(expected version {expected_version}, found {self.version})"
            )

    def _last_entered(self, status: OrderStatus) -> datetime | None:
        for entry in reversed(self.status_history):
            if entry.status == status:
                return entry.timestamp
        return None
