"""Terminal-backed implementations of the checkout's interactive ports."""

from __future__ import annotations

import time
from collections.abc import Callable

import click

from storefront.application.checkout.ports import (
    ConfirmationResult,
    Navigator,
    PaymentConfirmationPort,
)


class ClickConfirmationPort(PaymentConfirmationPort):
    """Asks the person at the terminal.

    Terminal prompts cannot be interrupted, so ``timeout`` is accepted
    but not enforced here.
    """

    def __init__(self, open_browser: bool = True) -> None:
        self._open_browser = open_browser

    def confirm(self, prompt: str, timeout: float | None = None) -> ConfirmationResult:
        click.echo()
        click.echo(prompt)
        if click.confirm("Continue?", default=False):
            return ConfirmationResult.ACCEPTED
        return ConfirmationResult.REJECTED

    def open_external(self, url: str) -> bool:
        click.echo(f"Opening {url}")
        if not self._open_browser:
            return True
        return click.launch(url) == 0

    def await_return(self, url: str, timeout: float | None = None) -> ConfirmationResult:
        click.prompt(
            "Press Enter once you are back from the bank website",
            default="",
            show_default=False,
        )
        return ConfirmationResult.ACCEPTED


class TerminalNavigator(Navigator):

    def __init__(
        self,
        show_order: Callable[[int], None],
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._show_order = show_order
        self._sleep = sleep

    def schedule_redirect(self, order_id: int, delay: float) -> None:
        click.echo(f"Taking you to order #{order_id} in {delay:g}s...")
        self._sleep(delay)
        self._show_order(order_id)
