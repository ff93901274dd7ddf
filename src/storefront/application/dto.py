"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI, the checkout orchestrator and the
application handlers without exposing domain internals.  Amounts travel
as strings so no float ever touches money.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --- Input --------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemPayload:
    """One cart line as handed to order creation."""

    product_ref: str
    name: str
    sku: str
    size: str
    color: str
    unit_price: str
    quantity: int
    image: str = ""


@dataclass(frozen=True)
class ShippingAddressDTO:
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
class OrderPayload:
    """Everything ``create_order`` needs, assembled at checkout."""

    items: list[OrderItemPayload]
    shipping_address: ShippingAddressDTO
    payment_method: str
    subtotal: str
    shipping_fee: str
    tax: str
    total: str
    discount: str = "0"
    order_notes: str = ""


@dataclass(frozen=True)
class CartSnapshot:
    """What the cart collaborator currently holds, with its own totals."""

    items: list[OrderItemPayload]
    subtotal: str
    shipping_fee: str
    tax: str
    discount: str = "0"

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class StatusUpdate:
    """Admin request to set an order's status."""

    status: str
    tracking_number: str | None = None
    carrier: str | None = None
    note: str = ""
    expected_version: int | None = None
    estimated_delivery: str | None = None  # YYYY-MM-DD


@dataclass(frozen=True)
class OrderFilters:
    page: int = 1
    limit: int = 10
    sort: str = "-created_at"
    status: str | None = None
    search: str | None = None


# --- Output -------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemDTO:
    name: str
    sku: str
    size: str
    color: str
    quantity: int
    unit_price: str  # formatted, e.g. "₹1,499.00"
    line_total: str


@dataclass(frozen=True)
class StatusHistoryDTO:
    status: str
    timestamp: str
    note: str = ""


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the customer or admin."""

    id: int
    order_number: str
    order_status: str
    payment_method: str
    payment_status: str
    items: list[OrderItemDTO]
    shipping_address: ShippingAddressDTO
    subtotal: str
    shipping_fee: str
    tax: str
    discount: str
    total: str
    created_at: str
    status_history: list[StatusHistoryDTO] = field(default_factory=list)
    customer_notes: str = ""
    tracking_number: str | None = None
    carrier: str | None = None
    estimated_delivery: str | None = None
    can_cancel: bool = False
    version: int = 0


@dataclass(frozen=True)
class PaginationDTO:
    page: int
    limit: int
    total: int
    pages: int


@dataclass(frozen=True)
class OrderPageDTO:
    orders: list[OrderDTO]
    pagination: PaginationDTO


@dataclass(frozen=True)
class InvoiceDTO:
    html: str
    order_number: str
