"""Integration tests for the cancel, status update and return use cases."""

from datetime import timedelta

import pytest

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.dto import StatusUpdate
from storefront.application.return_order import ReturnOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import (
    ConcurrencyConflict,
    EntityNotFoundError,
    InvalidTransition,
    ValidationError,
)
from storefront.domain.model.order import OrderStatus
from storefront.domain.service.transition_policy import TransitionPolicy
from tests.factories import CREATED_AT, make_order
from tests.fakes import FakeOrderRepository


def _repo_with_order() -> tuple[FakeOrderRepository, int]:
    order_repo = FakeOrderRepository()
    order = make_order()
    order.order_number = "CS2610180001"
    order_repo.save(order)
    return order_repo, order.id


class TestCancelOrder:

    def test_cancel_pending_order(self):
        order_repo, order_id = _repo_with_order()
        dto = CancelOrderHandler(order_repo).handle(order_id, customer="jane@example.com")

        assert dto.order_status == "cancelled"
        assert dto.can_cancel is False
        stored = order_repo.get_by_id(order_id)
        assert [entry.status for entry in stored.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
        ]
        assert stored.status_history[-1].updated_by == "jane@example.com"

    def test_cancel_shipped_order_rejected(self):
        order_repo, order_id = _repo_with_order()
        UpdateOrderStatusHandler(order_repo).handle(order_id, StatusUpdate("shipped"))

        with pytest.raises(InvalidTransition, match="current status is shipped"):
            CancelOrderHandler(order_repo).handle(order_id)
        assert order_repo.get_by_id(order_id).order_status == OrderStatus.SHIPPED

    def test_cancel_twice_rejected(self):
        order_repo, order_id = _repo_with_order()
        handler = CancelOrderHandler(order_repo)
        handler.handle(order_id)
        with pytest.raises(InvalidTransition):
            handler.handle(order_id)

    def test_stale_version_rejected(self):
        order_repo, order_id = _repo_with_order()
        UpdateOrderStatusHandler(order_repo).handle(order_id, StatusUpdate("confirmed"))
        with pytest.raises(ConcurrencyConflict):
            CancelOrderHandler(order_repo).handle(order_id, expected_version=0)

    def test_unknown_order(self):
        with pytest.raises(EntityNotFoundError, match="#99"):
            CancelOrderHandler(FakeOrderRepository()).handle(99)


class TestUpdateOrderStatus:

    def test_history_grows_by_one_per_update(self):
        order_repo, order_id = _repo_with_order()
        handler = UpdateOrderStatusHandler(order_repo)

        for expected_len, status in enumerate(["confirmed", "processing", "shipped"], start=2):
            dto = handler.handle(order_id, StatusUpdate(status), admin="admin")
            assert len(dto.status_history) == expected_len
            assert dto.status_history[-1].status == dto.order_status == status

        assert order_repo.get_by_id(order_id).status_history[-1].updated_by == "admin"

    def test_tracking_and_note_recorded(self):
        order_repo, order_id = _repo_with_order()
        dto = UpdateOrderStatusHandler(order_repo).handle(
            order_id,
            StatusUpdate("shipped", tracking_number="BD123", carrier="BlueDart", note="Left hub"),
        )
        assert dto.tracking_number == "BD123"
        assert dto.carrier == "BlueDart"
        assert dto.status_history[-1].note == "Left hub"

    def test_estimated_delivery_recorded(self):
        order_repo, order_id = _repo_with_order()
        dto = UpdateOrderStatusHandler(order_repo).handle(
            order_id, StatusUpdate("shipped", estimated_delivery="2026-10-25")
        )
        assert dto.estimated_delivery == "2026-10-25"

    def test_malformed_estimated_delivery_rejected(self):
        order_repo, order_id = _repo_with_order()
        with pytest.raises(ValidationError, match="YYYY-MM-DD") as exc_info:
            UpdateOrderStatusHandler(order_repo).handle(
                order_id, StatusUpdate("shipped", estimated_delivery="next week")
            )
        assert exc_info.value.field == "estimated_delivery"
        assert order_repo.get_by_id(order_id).order_status == OrderStatus.PENDING

    def test_default_policy_is_permissive(self):
        order_repo, order_id = _repo_with_order()
        handler = UpdateOrderStatusHandler(order_repo)
        handler.handle(order_id, StatusUpdate("delivered"))
        dto = handler.handle(order_id, StatusUpdate("pending"))
        assert dto.order_status == "pending"

    def test_forward_only_policy_enforced(self):
        order_repo, order_id = _repo_with_order()
        handler = UpdateOrderStatusHandler(order_repo, TransitionPolicy.forward_only())
        handler.handle(order_id, StatusUpdate("delivered"))
        with pytest.raises(InvalidTransition):
            handler.handle(order_id, StatusUpdate("pending"))

    def test_unknown_status_rejected(self):
        order_repo, order_id = _repo_with_order()
        with pytest.raises(ValidationError, match="Unknown order status 'lost'"):
            UpdateOrderStatusHandler(order_repo).handle(order_id, StatusUpdate("lost"))

    def test_expected_version(self):
        order_repo, order_id = _repo_with_order()
        handler = UpdateOrderStatusHandler(order_repo)
        dto = handler.handle(order_id, StatusUpdate("confirmed", expected_version=0))
        assert dto.version == 1
        with pytest.raises(ConcurrencyConflict):
            handler.handle(order_id, StatusUpdate("processing", expected_version=0))


class TestReturnOrder:

    def _delivered(self) -> tuple[FakeOrderRepository, int]:
        order_repo, order_id = _repo_with_order()
        order_repo.get_by_id(order_id).apply_status_update(
            OrderStatus.DELIVERED, TransitionPolicy.permissive(), now=CREATED_AT
        )
        return order_repo, order_id

    def test_return_delivered_order(self):
        order_repo, order_id = self._delivered()
        handler = ReturnOrderHandler(order_repo, clock=lambda: CREATED_AT + timedelta(days=5))

        dto = handler.handle(order_id, "Does not fit")

        assert dto.order_status == "returned"
        assert order_repo.get_by_id(order_id).return_reason == "Does not fit"

    def test_window_expired(self):
        order_repo, order_id = self._delivered()
        handler = ReturnOrderHandler(order_repo, clock=lambda: CREATED_AT + timedelta(days=45))
        with pytest.raises(InvalidTransition, match="Return period has expired"):
            handler.handle(order_id, "Does not fit")

    def test_pending_order_cannot_be_returned(self):
        order_repo, order_id = _repo_with_order()
        with pytest.raises(InvalidTransition, match="Only delivered orders"):
            ReturnOrderHandler(order_repo).handle(order_id, "Does not fit")
