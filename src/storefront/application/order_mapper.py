"""Mapping between the Order aggregate and its DTOs."""

from __future__ import annotations

from storefront.application.dto import (
    OrderDTO,
    OrderItemDTO,
    ShippingAddressDTO,
    StatusHistoryDTO,
)
from storefront.domain.model.order import Order, ShippingAddress

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


def to_shipping_address(dto: ShippingAddressDTO) -> ShippingAddress:
    return ShippingAddress(
        full_name=dto.full_name,
        address_line1=dto.address_line1,
        address_line2=dto.address_line2,
        city=dto.city,
        state=dto.state,
        pin_code=dto.pin_code,
        phone=dto.phone,
        email=dto.email,
        country=dto.country,
    )


def to_shipping_address_dto(address: ShippingAddress) -> ShippingAddressDTO:
    return ShippingAddressDTO(
        full_name=address.full_name,
        address_line1=address.address_line1,
        address_line2=address.address_line2,
        city=address.city,
        state=address.state,
        pin_code=address.pin_code,
        phone=address.phone,
        email=address.email,
        country=address.country,
    )


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number or "N/A",
        order_status=order.order_status.value,
        payment_method=order.payment_method.value,
        payment_status=order.payment_status.value,
        items=[
            OrderItemDTO(
                name=item.name,
                sku=item.sku,
                size=item.size,
                color=item.color,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        shipping_address=to_shipping_address_dto(order.shipping_address),
        subtotal=str(order.subtotal),
        shipping_fee=str(order.shipping_fee),
        tax=str(order.tax),
        discount=str(order.discount),
        total=str(order.total),
        created_at=order.created_at.strftime(TIMESTAMP_FORMAT),
        status_history=[
            StatusHistoryDTO(
                status=entry.status.value,
                timestamp=entry.timestamp.strftime(TIMESTAMP_FORMAT),
                note=entry.note,
            )
            for entry in order.history_for_display()
        ],
        customer_notes=order.customer_notes,
        tracking_number=order.tracking_number,
        carrier=order.carrier,
        estimated_delivery=order.estimated_delivery.isoformat() if order.estimated_delivery else None,
        can_cancel=order.is_cancellable,
        version=order.version,
    )
