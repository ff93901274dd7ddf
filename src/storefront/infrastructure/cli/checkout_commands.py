"""Interactive checkout: Shipping → Payment → Review → place order."""

from __future__ import annotations

import click

from storefront.application.checkout.orchestrator import CheckoutOrchestrator
from storefront.application.checkout.payment_strategies import BANK_NAMES
from storefront.domain.exceptions import DomainException
from storefront.domain.model.checkout import REQUIRED_SHIPPING_FIELDS, CheckoutSession
from storefront.domain.model.order import PaymentMethod
from storefront.infrastructure.bootstrap import cart_store, checkout_orchestrator
from storefront.infrastructure.cli.order_commands import show_order
from storefront.infrastructure.cli.terminal import ClickConfirmationPort, TerminalNavigator

PAYMENT_CHOICES = [method.value for method in PaymentMethod]

_DETAIL_PROMPTS = {
    PaymentMethod.CARD: [
        ("card_number", "Card number", False),
        ("cardholder_name", "Name on card", False),
        ("expiry_date", "Expiry (MM/YY)", False),
        ("cvv", "CVV", True),
    ],
    PaymentMethod.UPI: [("upi_id", "UPI ID", False)],
    PaymentMethod.NETBANKING: [],
    PaymentMethod.COD: [],
}


def _abort_with_errors(errors: dict[str, str]) -> None:
    lines = [f"  {path}: {message}" for path, message in errors.items()]
    raise click.ClickException("Please fix the following:\n" + "\n".join(lines))


def _collect_payment_details(method: PaymentMethod, given: dict[str, str | None]) -> dict[str, str]:
    details: dict[str, str] = {}
    for name, label, secret in _DETAIL_PROMPTS[method]:
        value = given.get(name)
        details[name] = value if value is not None else click.prompt(label, hide_input=secret)
    if method is PaymentMethod.NETBANKING:
        bank = given.get("selected_bank")
        details["selected_bank"] = bank or click.prompt(
            "Bank", type=click.Choice(list(BANK_NAMES))
        )
    return details


def _display_review(session: CheckoutSession) -> None:
    snapshot = cart_store().snapshot()
    form = session.shipping_address
    click.echo()
    click.echo("Review your order")
    click.echo("-" * 40)
    click.echo(f"{form.full_name}")
    click.echo(f"{form.address_line1}")
    if form.address_line2:
        click.echo(f"{form.address_line2}")
    click.echo(f"{form.city}, {form.state} {form.pin_code}")
    click.echo(f"{form.phone}  {form.email}")
    click.echo()
    for item in snapshot.items:
        click.echo(f"  {item.quantity} x {item.name} ({item.size}/{item.color}) @ {item.unit_price}")
    click.echo(f"Subtotal {snapshot.subtotal}  Shipping {snapshot.shipping_fee}  Tax {snapshot.tax}")
    click.echo(f"Paying by {session.payment_method.value}")  # type: ignore[union-attr]


@click.command("checkout")
@click.option("--full-name", prompt="Full name")
@click.option("--email", prompt="Email")
@click.option("--phone", prompt="Phone")
@click.option("--address-line1", prompt="Address")
@click.option("--address-line2", prompt="Address line 2 (optional)", default="", show_default=False)
@click.option("--city", prompt="City")
@click.option("--state", prompt="State")
@click.option("--pin-code", prompt="Pin code")
@click.option("--payment-method", prompt="Payment method", type=click.Choice(PAYMENT_CHOICES),
              default="card", show_default=True)
@click.option("--card-number", default=None)
@click.option("--cardholder-name", default=None)
@click.option("--expiry-date", default=None, help="MM/YY")
@click.option("--cvv", default=None)
@click.option("--upi-id", default=None)
@click.option("--bank", "selected_bank", type=click.Choice(list(BANK_NAMES)), default=None)
@click.option("--notes", default="", help="Notes for the delivery.")
@click.option("--no-browser", is_flag=True, default=False,
              help="Print the bank URL instead of opening a browser.")
def checkout(
    payment_method: str,
    notes: str,
    no_browser: bool,
    **fields: str | None,
) -> None:
    """Check out the current cart."""
    try:
        orchestrator: CheckoutOrchestrator = checkout_orchestrator(
            ClickConfirmationPort(open_browser=not no_browser),
            TerminalNavigator(show_order),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    # Step 1: shipping
    for name in [*REQUIRED_SHIPPING_FIELDS, "address_line2"]:
        orchestrator.edit_shipping(name, fields[name] or "")
    if not orchestrator.advance():
        _abort_with_errors(orchestrator.session.validation_errors)

    # Step 2: payment
    method = PaymentMethod(payment_method)
    orchestrator.select_payment_method(method)
    for name, value in _collect_payment_details(method, fields).items():
        orchestrator.edit_payment_details(name, value)
    orchestrator.set_order_notes(notes)
    if not orchestrator.advance():
        _abort_with_errors(orchestrator.session.validation_errors)

    # Step 3: review and submit
    _display_review(orchestrator.session)
    if not click.confirm("Place order?", default=True):
        click.echo("Checkout abandoned. Nothing was ordered.")
        return

    result = orchestrator.submit()
    if not result.success:
        raise click.ClickException(result.message)
    click.echo(result.message)
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
