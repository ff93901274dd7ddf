import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import settings
from storefront.infrastructure.cli.admin_commands import admin_orders, admin_update_status
from storefront.infrastructure.cli.cart_commands import cart_add, cart_clear, cart_show
from storefront.infrastructure.cli.checkout_commands import checkout
from storefront.infrastructure.cli.order_commands import (
    order_cancel,
    order_invoice,
    order_list,
    order_return,
    order_show,
)
from storefront.infrastructure.logging_config import configure_logging


@click.group()
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Overrides STOREFRONT_LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """Storefront — checkout and order tracking"""
    try:
        configure_logging(log_level or settings().log_level)
    except (DomainException, ValueError) as exc:
        raise click.UsageError(str(exc))


@cli.group()
def cart() -> None:
    """Manage the shopping cart."""


@cli.group()
def order() -> None:
    """Track and manage your orders."""


@cli.group()
def admin() -> None:
    """Back-office order management."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_show)
cli.add_command(checkout)
order.add_command(order_cancel)
order.add_command(order_invoice)
order.add_command(order_list)
order.add_command(order_return)
order.add_command(order_show)
admin.add_command(admin_orders)
admin.add_command(admin_update_status)
