"""Unit tests for the Order aggregate and its creation rules."""

from dataclasses import FrozenInstanceError

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import (
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from storefront.domain.model.value_objects import Money
from tests.factories import CREATED_AT, make_address, make_item, make_order


class TestOrderCreation:

    def test_happy_path(self):
        order = make_order(items=[make_item(qty=2, price="799.00")])
        assert order.order_status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.subtotal == Money.of("1598.00")
        assert len(order.items) == 1

    def test_id_and_number_are_none_for_new_orders(self):
        order = make_order()
        assert order.id is None  # assigned by repository
        assert order.order_number is None

    def test_total_is_subtotal_plus_fees_minus_discount(self):
        order = make_order(
            items=[make_item(qty=1, price="1000.00"), make_item(qty=2, price="250.00")],
            shipping_fee="0",
            tax="270.00",
            discount="150.00",
        )
        assert order.subtotal == Money.of("1500.00")
        assert order.total == Money.of("1620.00")

    def test_first_history_entry_written_at_creation(self):
        order = make_order()
        assert len(order.status_history) == 1
        entry = order.status_history[0]
        assert entry.status == OrderStatus.PENDING
        assert entry.timestamp == CREATED_AT
        assert order.created_at == CREATED_AT


class TestOrderValidation:

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create(
                items=[],
                shipping_address=make_address(),
                payment_method=PaymentMethod.COD,
                shipping_fee=Money.of("0"),
                tax=Money.of("0"),
            )

    def test_mismatched_subtotal_rejected(self):
        with pytest.raises(ValidationError, match="does not match line items"):
            Order.create(
                items=[make_item(price="799.00")],
                shipping_address=make_address(),
                payment_method=PaymentMethod.CARD,
                shipping_fee=Money.of("0"),
                tax=Money.of("0"),
                subtotal=Money.of("500.00"),
            )

    def test_discount_larger_than_order_rejected(self):
        with pytest.raises(ValidationError, match="exceeds order value"):
            make_order(shipping_fee="0", tax="0", discount="5000")

    def test_long_customer_notes_rejected(self):
        with pytest.raises(ValidationError, match="500 characters") as exc_info:
            Order.create(
                items=[make_item()],
                shipping_address=make_address(),
                payment_method=PaymentMethod.COD,
                shipping_fee=Money.of("0"),
                tax=Money.of("0"),
                customer_notes="x" * 501,
            )
        assert exc_info.value.field == "order_notes"

    def test_customer_notes_stored_verbatim(self):
        order = Order.create(
            items=[make_item()],
            shipping_address=make_address(),
            payment_method=PaymentMethod.COD,
            shipping_fee=Money.of("0"),
            tax=Money.of("0"),
            customer_notes="  leave at door  ",
        )
        assert order.customer_notes == "  leave at door  "


class TestOrderSnapshot:

    def test_items_are_immutable(self):
        order = make_order()
        assert isinstance(order.items, tuple)
        with pytest.raises(FrozenInstanceError):
            order.items[0].quantity = None  # type: ignore[misc]

    def test_line_total_calculation(self):
        assert make_item(qty=3, price="499.00").line_total == Money.of("1497.00")

    def test_item_count_sums_quantities(self):
        order = make_order(items=[make_item(qty=2), make_item(qty=3, sku="JER-002")])
        assert order.item_count == 5
