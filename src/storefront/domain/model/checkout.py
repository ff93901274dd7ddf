"""Checkout session — the ephemeral state of the purchase wizard.

The session is an immutable value.  Every user action is a pure reducer
function ``(session, ...) -> session`` so the orchestrator owns the only
reference to the current state and nothing else can mutate it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import IntEnum
from typing import Union

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import PaymentMethod, ShippingAddress


class CheckoutStep(IntEnum):
    SHIPPING = 1
    PAYMENT = 2
    REVIEW = 3

    @property
    def label(self) -> str:
        return self.name.title()


# Mandatory shipping fields, in the order their errors are reported.
REQUIRED_SHIPPING_FIELDS: dict[str, str] = {
    "full_name": "Full name is required",
    "address_line1": "Address is required",
    "city": "City is required",
    "state": "State is required",
    "pin_code": "Pin code is required",
    "phone": "Phone number is required",
    "email": "Email is required",
}


@dataclass(frozen=True)
class ShippingForm:
    """Shipping fields exactly as typed; nothing is trimmed or checked here."""

    full_name: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    pin_code: str = ""
    phone: str = ""
    email: str = ""

    def to_address(self) -> ShippingAddress:
        return ShippingAddress(
            full_name=self.full_name,
            address_line1=self.address_line1,
            address_line2=self.address_line2,
            city=self.city,
            state=self.state,
            pin_code=self.pin_code,
            phone=self.phone,
            email=self.email,
        )


# --- Payment detail variants --------------------------------------------------


@dataclass(frozen=True)
class CardDetails:
    card_number: str = ""
    cardholder_name: str = ""
    expiry_date: str = ""
    cvv: str = ""


@dataclass(frozen=True)
class UpiDetails:
    upi_id: str = ""


@dataclass(frozen=True)
class NetBankingDetails:
    selected_bank: str = ""


@dataclass(frozen=True)
class CodDetails:
    pass


PaymentDetails = Union[CardDetails, UpiDetails, NetBankingDetails, CodDetails]

DETAILS_BY_METHOD: dict[PaymentMethod, type] = {
    PaymentMethod.CARD: CardDetails,
    PaymentMethod.UPI: UpiDetails,
    PaymentMethod.NETBANKING: NetBankingDetails,
    PaymentMethod.COD: CodDetails,
}


def details_match(method: PaymentMethod | None, details: PaymentDetails) -> bool:
    return method is not None and type(details) is DETAILS_BY_METHOD[method]


@dataclass(frozen=True)
class CheckoutSession:
    current_step: CheckoutStep = CheckoutStep.SHIPPING
    shipping_address: ShippingForm = field(default_factory=ShippingForm)
    payment_method: PaymentMethod | None = PaymentMethod.CARD
    payment_details: PaymentDetails = field(default_factory=CardDetails)
    order_notes: str = ""
    validation_errors: dict[str, str] = field(default_factory=dict)
    submitting: bool = False
    order_placed: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.validation_errors)


# --- Validation ---------------------------------------------------------------


def validate_step(session: CheckoutSession, step: CheckoutStep) -> dict[str, str]:
    """Return the field errors blocking *step* (empty when it passes).

    Only presence is checked.  Card, UPI and bank details are validated
    by the payment strategy at submission time.
    """
    errors: dict[str, str] = {}
    if step == CheckoutStep.SHIPPING:
        for name, message in REQUIRED_SHIPPING_FIELDS.items():
            if not getattr(session.shipping_address, name):
                errors[f"shipping_address.{name}"] = message
    elif step == CheckoutStep.PAYMENT:
        if session.payment_method is None:
            errors["payment_method"] = "Payment method is required"
    return errors


def submission_error(session: CheckoutSession) -> ValidationError | None:
    """First reason the session cannot be submitted, or None."""
    if session.current_step != CheckoutStep.REVIEW:
        return ValidationError(
            "Review your order before placing it", field="current_step"
        )
    for step in (CheckoutStep.SHIPPING, CheckoutStep.PAYMENT):
        errors = validate_step(session, step)
        if errors:
            path, message = next(iter(errors.items()))
            return ValidationError(message, field=path)
    if not details_match(session.payment_method, session.payment_details):
        return ValidationError(
            "Payment details do not match the selected payment method",
            field="payment_details",
        )
    return None


# --- Reducers -----------------------------------------------------------------


def _without(errors: dict[str, str], path: str) -> dict[str, str]:
    return {key: value for key, value in errors.items() if key != path}


def edit_shipping(session: CheckoutSession, name: str, value: str) -> CheckoutSession:
    if name not in {f.name for f in fields(ShippingForm)}:
        raise ValidationError(f"Unknown shipping field '{name}'", field=name)
    return replace(
        session,
        shipping_address=replace(session.shipping_address, **{name: value}),
        validation_errors=_without(session.validation_errors, f"shipping_address.{name}"),
    )


def select_payment_method(
    session: CheckoutSession, method: PaymentMethod | None
) -> CheckoutSession:
    """Choose a method; details reset to an empty variant if the kind changes."""
    details = session.payment_details
    if method is not None and not details_match(method, details):
        details = DETAILS_BY_METHOD[method]()
    return replace(
        session,
        payment_method=method,
        payment_details=details,
        validation_errors=_without(session.validation_errors, "payment_method"),
    )


def edit_payment_details(session: CheckoutSession, name: str, value: str) -> CheckoutSession:
    details = session.payment_details
    if name not in {f.name for f in fields(details)}:
        raise ValidationError(
            f"'{name}' is not a detail of {type(details).__name__}",
            field=f"payment_details.{name}",
        )
    return replace(
        session,
        payment_details=replace(details, **{name: value}),
        validation_errors=_without(session.validation_errors, f"payment_details.{name}"),
    )


def set_order_notes(session: CheckoutSession, notes: str) -> CheckoutSession:
    return replace(session, order_notes=notes)


def advance(session: CheckoutSession) -> CheckoutSession:
    """Move forward one step if every step up to the current one validates.

    Only the first failing step's errors are recorded.
    """
    for step in CheckoutStep:
        if step > session.current_step:
            break
        errors = validate_step(session, step)
        if errors:
            return replace(session, validation_errors=errors)
    next_step = CheckoutStep(min(session.current_step + 1, CheckoutStep.REVIEW))
    return replace(session, current_step=next_step, validation_errors={})


def retreat(session: CheckoutSession) -> CheckoutSession:
    previous = CheckoutStep(max(session.current_step - 1, CheckoutStep.SHIPPING))
    return replace(session, current_step=previous)


def record_error(session: CheckoutSession, error: ValidationError) -> CheckoutSession:
    path = error.field or "form"
    return replace(session, validation_errors={**session.validation_errors, path: str(error)})


def begin_submission(session: CheckoutSession) -> CheckoutSession:
    return replace(session, submitting=True)


def finish_submission(session: CheckoutSession, placed: bool) -> CheckoutSession:
    return replace(session, submitting=False, order_placed=session.order_placed or placed)
