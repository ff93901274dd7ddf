"""JSON-file-backed cart, the CartGateway used by the command line.

Totals follow the storefront's cart rules: 18% GST on the subtotal and
a flat shipping fee below the free-shipping threshold.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from decimal import Decimal
from pathlib import Path

from storefront.application.checkout.ports import CartGateway
from storefront.application.dto import CartSnapshot, OrderItemPayload
from storefront.domain.model.value_objects import Money, Quantity

GST_RATE = Decimal("0.18")
FREE_SHIPPING_THRESHOLD = Money.of("1000.00")
FLAT_SHIPPING_FEE = Money.of("100.00")


class JsonCartStore(CartGateway):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    def add_item(self, item: OrderItemPayload) -> None:
        """Add a line, merging quantities with an identical sku/size/color line."""
        # Reject malformed lines before they reach the file.
        Money.of(item.unit_price)
        Quantity(item.quantity)

        lines = self._load_raw()
        for raw in lines:
            if (raw["sku"], raw["size"], raw["color"]) == (item.sku, item.size, item.color):
                raw["quantity"] += item.quantity
                break
        else:
            lines.append(asdict(item))
        self._persist_raw(lines)

    def items(self) -> list[OrderItemPayload]:
        return [OrderItemPayload(**raw) for raw in self._load_raw()]

    # --- CartGateway interface ------------------------------------------------

    def snapshot(self) -> CartSnapshot:
        items = self.items()
        subtotal = Money.zero()
        for item in items:
            subtotal = subtotal + Money.of(item.unit_price) * item.quantity

        if not items or subtotal >= FREE_SHIPPING_THRESHOLD:
            shipping = Money.zero()
        else:
            shipping = FLAT_SHIPPING_FEE

        return CartSnapshot(
            items=items,
            subtotal=str(subtotal.amount),
            shipping_fee=str(shipping.amount),
            tax=str(subtotal.scaled(GST_RATE).amount),
        )

    def clear_cart(self) -> None:
        self._persist_raw([])

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, lines: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(lines, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
