"""CLI commands for the customer's orders."""

from __future__ import annotations

from pathlib import Path

import click

from storefront.application.dto import OrderDTO, OrderFilters, OrderPageDTO
from storefront.domain.exceptions import DomainException, EntityNotFoundError
from storefront.domain.model.order import OrderStatus
from storefront.infrastructure.bootstrap import order_service

STATUS_CHOICES = [status.value for status in OrderStatus]


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number} (#{dto.id})  status={dto.order_status}")
    click.echo(f"Placed:   {dto.created_at}")
    click.echo(f"Payment:  {dto.payment_method} ({dto.payment_status})")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.carrier or '-'} {dto.tracking_number}")
    if dto.estimated_delivery:
        click.echo(f"Expected: {dto.estimated_delivery}")
    address = dto.shipping_address
    click.echo(f"Ship to:  {address.full_name}, {address.address_line1}, {address.city}, "
               f"{address.state} {address.pin_code}")
    click.echo()

    click.echo(f"  {'Item':<24} {'Size':>5} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*62}")
    for item in dto.items:
        click.echo(
            f"  {item.name:<24} {item.size:>5} {item.quantity:>5} "
            f"{item.unit_price:>12} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*62}")
    click.echo(f"  {'Subtotal':<36} {dto.subtotal:>25}")
    click.echo(f"  {'Shipping':<36} {dto.shipping_fee:>25}")
    click.echo(f"  {'Tax':<36} {dto.tax:>25}")
    if dto.discount != "₹0.00":
        click.echo(f"  {'Discount':<36} {'-' + dto.discount:>25}")
    click.echo(f"  {'Order Total':<36} {dto.total:>25}")
    click.echo()

    click.echo("History:")
    for entry in dto.status_history:
        note = f"  ({entry.note})" if entry.note else ""
        click.echo(f"  {entry.timestamp}  {entry.status}{note}")


def display_page(page: OrderPageDTO) -> None:
    if not page.orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<5} {'Order':<14} {'Status':<18} {'Payment':<12} {'Total':>14}  Placed")
    click.echo("-" * 86)
    for dto in page.orders:
        click.echo(
            f"{dto.id:<5} {dto.order_number:<14} {dto.order_status:<18} "
            f"{dto.payment_method:<12} {dto.total:>14}  {dto.created_at}"
        )
    p = page.pagination
    click.echo(f"Page {p.page} of {max(p.pages, 1)} ({p.total} orders)")


def show_order(order_id: int) -> None:
    try:
        dto = order_service().get_order_by_id(order_id)
    except EntityNotFoundError as exc:
        raise click.ClickException(f"{exc}. Run 'storefront order list' to see your orders.")
    display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    show_order(order_id)


@click.command("list")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
@click.option("--sort", default="-created_at", show_default=True,
              help="created_at or total; prefix '-' for descending.")
@click.option("--status", type=click.Choice(STATUS_CHOICES), default=None)
def order_list(page: int, limit: int, sort: str, status: str | None) -> None:
    """List orders, newest first."""
    filters = OrderFilters(page=page, limit=limit, sort=sort, status=status)
    try:
        result = order_service().get_orders(filters)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    display_page(result)


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.confirmation_option(prompt="Cancel this order? This cannot be undone.")
def order_cancel(order_id: int) -> None:
    """Cancel an order that has not shipped yet."""
    try:
        dto = order_service().cancel_order(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} cancelled.")


@click.command("return")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to return.")
@click.option("--reason", required=True, help="Why the order is being returned.")
def order_return(order_id: int, reason: str) -> None:
    """Request a return for a delivered order."""
    try:
        dto = order_service().return_order(order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Return requested for order {dto.order_number}.")


@click.command("invoice")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--output", "output_dir", type=click.Path(file_okay=False, path_type=Path),
              default=Path("."), show_default=True, help="Directory to write the invoice to.")
def order_invoice(order_id: int, output_dir: Path) -> None:
    """Write the order's invoice as an HTML file."""
    try:
        invoice = order_service().download_invoice(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / f"invoice-{invoice.order_number}.html"
    target.write_text(invoice.html, encoding="utf-8")
    click.echo(f"Invoice written to {target}")
