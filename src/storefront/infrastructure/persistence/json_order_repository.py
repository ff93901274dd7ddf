"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ShippingAddress,
    StatusHistoryEntry,
)
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        return max((raw["id"] for raw in self._load_raw()), default=0) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        raw = next((r for r in self._load_raw() if r["id"] == order_id), None)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def latest_order_number(self, prefix: str) -> str | None:
        numbers = [
            raw["order_number"]
            for raw in self._load_raw()
            if (raw.get("order_number") or "").startswith(prefix)
        ]
        return max(numbers, default=None)

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()

        # Keyed by id so an update replaces the stored record in place.
        by_id = {raw["id"]: raw for raw in self._load_raw()}
        by_id[order.id] = self._to_raw(order)
        self._persist_raw(list(by_id.values()))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _money(value: Money) -> dict:
        return {"amount": str(value.amount), "currency": value.currency}

    @staticmethod
    def _to_raw(order: Order) -> dict:
        money = JsonOrderRepository._money
        address = order.shipping_address
        return {
            "id": order.id,
            "order_number": order.order_number,
            "items": [
                {
                    "product_ref": item.product_ref,
                    "name": item.name,
                    "sku": item.sku,
                    "size": item.size,
                    "color": item.color,
                    "unit_price": money(item.unit_price),
                    "quantity": item.quantity.value,
                    "image": item.image,
                }
                for item in order.items
            ],
            "shipping_address": {
                "full_name": address.full_name,
                "address_line1": address.address_line1,
                "address_line2": address.address_line2,
                "city": address.city,
                "state": address.state,
                "pin_code": address.pin_code,
                "phone": address.phone,
                "email": address.email,
                "country": address.country,
            },
            "payment_method": order.payment_method.value,
            "payment_status": order.payment_status.value,
            "subtotal": money(order.subtotal),
            "shipping_fee": money(order.shipping_fee),
            "tax": money(order.tax),
            "discount": money(order.discount),
            "total": money(order.total),
            "order_status": order.order_status.value,
            "status_history": [
                {
                    "status": entry.status.value,
                    "timestamp": entry.timestamp.isoformat(),
                    "note": entry.note,
                    "updated_by": entry.updated_by,
                }
                for entry in order.status_history
            ],
            "customer_notes": order.customer_notes,
            "tracking_number": order.tracking_number,
            "carrier": order.carrier,
            "estimated_delivery": _isoformat(order.estimated_delivery),
            "actual_delivery": _isoformat(order.actual_delivery),
            "return_reason": order.return_reason,
            "return_date": _isoformat(order.return_date),
            "created_at": order.created_at.isoformat(),
            "version": order.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        def money(data: dict) -> Money:
            return Money(Decimal(data["amount"]), data.get("currency", "INR"))

        items = tuple(
            OrderItem(
                product_ref=i["product_ref"],
                name=i["name"],
                sku=i["sku"],
                size=i["size"],
                color=i["color"],
                unit_price=money(i["unit_price"]),
                quantity=Quantity(i["quantity"]),
                image=i.get("image", ""),
            )
            for i in raw["items"]
        )
        history = [
            StatusHistoryEntry(
                status=OrderStatus(h["status"]),
                timestamp=datetime.fromisoformat(h["timestamp"]),
                note=h.get("note") or "",
                updated_by=h.get("updated_by"),
            )
            for h in raw.get("status_history", [])
        ]
        return Order(
            id=raw["id"],
            order_number=raw.get("order_number"),
            items=items,
            shipping_address=ShippingAddress(**raw["shipping_address"]),
            payment_method=PaymentMethod(raw["payment_method"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            subtotal=money(raw["subtotal"]),
            shipping_fee=money(raw["shipping_fee"]),
            tax=money(raw["tax"]),
            discount=money(raw["discount"]),
            total=money(raw["total"]),
            order_status=OrderStatus(raw["order_status"]),
            status_history=history,
            customer_notes=raw.get("customer_notes") or "",
            tracking_number=raw.get("tracking_number"),
            carrier=raw.get("carrier"),
            estimated_delivery=_parse_date(raw.get("estimated_delivery")),
            actual_delivery=_parse_datetime(raw.get("actual_delivery")),
            return_reason=raw.get("return_reason"),
            return_date=_parse_datetime(raw.get("return_date")),
            created_at=datetime.fromisoformat(raw["created_at"]),
            version=raw.get("version", 0),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(orders, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def _isoformat(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None
