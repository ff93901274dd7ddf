"""CLI commands for the shopping cart."""

from __future__ import annotations

import click

from storefront.application.dto import OrderItemPayload
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import cart_store


@click.command("add")
@click.option("--sku", required=True)
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 1499.00).")
@click.option("--quantity", default=1, show_default=True, type=int)
@click.option("--size", required=True)
@click.option("--color", required=True)
@click.option("--product-ref", default=None, help="Catalog reference (defaults to the SKU).")
@click.option("--image", default="")
def cart_add(
    sku: str,
    name: str,
    price: str,
    quantity: int,
    size: str,
    color: str,
    product_ref: str | None,
    image: str,
) -> None:
    """Add an item to the cart."""
    item = OrderItemPayload(
        product_ref=product_ref or sku,
        name=name,
        sku=sku,
        size=size,
        color=color,
        unit_price=price,
        quantity=quantity,
        image=image,
    )
    try:
        cart_store().add_item(item)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added {quantity} x {name} ({size}/{color}) to cart")


@click.command("show")
def cart_show() -> None:
    """Show the cart and its totals."""
    snapshot = cart_store().snapshot()
    if snapshot.is_empty:
        click.echo("Your cart is empty.")
        return

    click.echo(f"{'SKU':<12} {'Item':<24} {'Size':>5} {'Color':<8} {'Qty':>4} {'Price':>10}")
    click.echo("-" * 68)
    for item in snapshot.items:
        click.echo(
            f"{item.sku:<12} {item.name:<24} {item.size:>5} {item.color:<8} "
            f"{item.quantity:>4} {item.unit_price:>10}"
        )
    click.echo("-" * 68)
    click.echo(f"{'Subtotal':<56} {snapshot.subtotal:>11}")
    click.echo(f"{'Shipping':<56} {snapshot.shipping_fee:>11}")
    click.echo(f"{'Tax':<56} {snapshot.tax:>11}")


@click.command("clear")
def cart_clear() -> None:
    """Remove everything from the cart."""
    cart_store().clear_cart()
    click.echo("Cart cleared.")
