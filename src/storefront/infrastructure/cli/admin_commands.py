"""CLI commands for the admin back-office."""

from __future__ import annotations

import click

from storefront.application.dto import OrderFilters, StatusUpdate
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import order_service
from storefront.infrastructure.cli.order_commands import (
    STATUS_CHOICES,
    display_order,
    display_page,
)


@click.command("orders")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=20, show_default=True, type=int)
@click.option("--sort", default="-created_at", show_default=True)
@click.option("--status", type=click.Choice(STATUS_CHOICES), default=None)
@click.option("--search", default=None, help="Match order number, email or phone.")
def admin_orders(page: int, limit: int, sort: str, status: str | None, search: str | None) -> None:
    """List all orders."""
    filters = OrderFilters(page=page, limit=limit, sort=sort, status=status, search=search)
    try:
        result = order_service().get_orders(filters)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    display_page(result)


@click.command("update-status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--status", required=True, type=click.Choice(STATUS_CHOICES))
@click.option("--tracking-number", default=None)
@click.option("--carrier", default=None)
@click.option("--estimated-delivery", default=None, metavar="YYYY-MM-DD")
@click.option("--note", default="", help="Shown in the order's status history.")
@click.option("--expected-version", type=int, default=None,
              help="Refuse the update if the order changed since this version.")
def admin_update_status(
    order_id: int,
    status: str,
    tracking_number: str | None,
    carrier: str | None,
    estimated_delivery: str | None,
    note: str,
    expected_version: int | None,
) -> None:
    """Set an order's status."""
    update = StatusUpdate(
        status=status,
        tracking_number=tracking_number,
        carrier=carrier,
        estimated_delivery=estimated_delivery,
        note=note,
        expected_version=expected_version,
    )
    try:
        dto = order_service().update_order_status(order_id, update)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.order_status}.")
    click.echo()
    display_order(dto)
