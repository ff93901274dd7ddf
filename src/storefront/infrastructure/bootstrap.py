"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from storefront.application.checkout.orchestrator import CheckoutOrchestrator
from storefront.application.checkout.payment_strategies import default_strategies
from storefront.application.checkout.ports import Navigator, PaymentConfirmationPort
from storefront.domain.service.transition_policy import TransitionPolicy
from storefront.infrastructure.invoice_renderer import Jinja2InvoiceRenderer
from storefront.infrastructure.order_service import LocalOrderService
from storefront.infrastructure.persistence.json_cart_store import JsonCartStore
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from storefront.infrastructure.settings import Settings, load_settings


def settings() -> Settings:
    return load_settings()


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(settings().data_dir / "orders.json")


def cart_store() -> JsonCartStore:
    return JsonCartStore(settings().data_dir / "cart.json")


def transition_policy() -> TransitionPolicy:
    return TransitionPolicy.named(settings().transition_policy)


def order_service() -> LocalOrderService:
    return LocalOrderService(
        order_repo=order_repository(),
        invoice_renderer=Jinja2InvoiceRenderer(),
        policy=transition_policy(),
    )


def checkout_orchestrator(
    confirmation: PaymentConfirmationPort,
    navigator: Navigator,
) -> CheckoutOrchestrator:
    config = settings()
    return CheckoutOrchestrator(
        cart=cart_store(),
        order_service=order_service(),
        navigator=navigator,
        strategies=default_strategies(
            confirmation,
            confirm_timeout=config.confirm_timeout,
            external_timeout=config.external_payment_timeout,
        ),
        redirect_delay=config.redirect_delay,
    )
