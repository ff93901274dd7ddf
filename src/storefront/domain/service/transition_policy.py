"""Domain service: which admin status changes are allowed.

The admin back-office historically permits any-to-any status changes.
The table lives here, in one place, so a stricter graph can replace it
without touching the handlers that call ``check()``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from storefront.domain.exceptions import InvalidTransition, ValidationError
from storefront.domain.model.order import OrderStatus

_LIFECYCLE = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)


class TransitionPolicy:

    def __init__(self, name: str, table: Mapping[OrderStatus, Iterable[OrderStatus]]) -> None:
        self.name = name
        self._table = {source: frozenset(targets) for source, targets in table.items()}

    def allowed_targets(self, current: OrderStatus) -> frozenset[OrderStatus]:
        return self._table.get(current, frozenset())

    def allows(self, current: OrderStatus, target: OrderStatus) -> bool:
        return target in self.allowed_targets(current)

    def check(self, current: OrderStatus, target: OrderStatus) -> None:
        if not self.allows(current, target):
            raise InvalidTransition(
                f"Cannot move order from {current.value} to {target.value}"
            )

    # --- Built-in tables ------------------------------------------------------

    @classmethod
    def permissive(cls) -> TransitionPolicy:
        """Any status may be set from any status."""
        every = list(OrderStatus)
        return cls("permissive", {status: every for status in OrderStatus})

    @classmethod
    def forward_only(cls) -> TransitionPolicy:
        """Lifecycle steps forward, cancel before shipping, return after delivery."""
        table: dict[OrderStatus, set[OrderStatus]] = {}
        for index, status in enumerate(_LIFECYCLE):
            table[status] = set(_LIFECYCLE[index + 1:])
            if status in (
                OrderStatus.PENDING,
                OrderStatus.CONFIRMED,
                OrderStatus.PROCESSING,
            ):
                table[status].add(OrderStatus.CANCELLED)
        table[OrderStatus.DELIVERED] = {OrderStatus.RETURNED}
        table[OrderStatus.CANCELLED] = set()
        table[OrderStatus.RETURNED] = set()
        return cls("forward_only", table)

    @classmethod
    def named(cls, name: str) -> TransitionPolicy:
        factories = {"permissive": cls.permissive, "forward_only": cls.forward_only}
        try:
            return factories[name]()
        except KeyError:
            raise ValidationError(
                f"Unknown transition policy '{name}'. "
                f"Expected one of: {', '.join(sorted(factories))}"
            ) from None
