"""Payment method strategies.

Each strategy validates the details for its channel, runs the simulated
gateway step through the PaymentConfirmationPort and only then calls
``place_order``.  A strategy either returns the one order it placed or
raises; it never calls ``place_order`` twice and never retries.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

from storefront.application.checkout.ports import (
    ConfirmationResult,
    PaymentConfirmationPort,
)
from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import (
    PaymentCancelled,
    PaymentDeclined,
    ValidationError,
)
from storefront.domain.model.checkout import (
    CardDetails,
    NetBankingDetails,
    PaymentDetails,
    UpiDetails,
)
from storefront.domain.model.order import PaymentMethod

logger = logging.getLogger(__name__)

DEFAULT_CONFIRM_TIMEOUT = 120.0
DEFAULT_EXTERNAL_PAYMENT_TIMEOUT = 600.0

MIN_CARD_DIGITS = 13
MIN_CVV_DIGITS = 3
ASCII_DIGITS = re.compile(r"[0-9]+")
EXPIRY_PATTERN = re.compile(r"(0[1-9]|1[0-2])/[0-9]{2}")
UPI_ID_PATTERN = re.compile(r"[A-Za-z0-9.\-_]{2,256}@[A-Za-z]{2,64}")

BANK_NAMES = {
    "sbi": "State Bank of India",
    "hdfc": "HDFC Bank",
    "icici": "ICICI Bank",
    "axis": "Axis Bank",
    "kotak": "Kotak Mahindra Bank",
    "pnb": "Punjab National Bank",
    "bob": "Bank of Baroda",
    "canara": "Canara Bank",
    "union": "Union Bank of India",
    "other": "Other Banks",
}
BANK_URLS = {
    "sbi": "https://retail.onlinesbi.sbi/retail/login.htm",
    "hdfc": "https://netbanking.hdfcbank.com/netbanking/",
    "icici": "https://infinity.icicibank.com/corp/Login.jsp",
    "axis": "https://www.axisbank.com/retail/online-services/axisbank-internet-banking",
    "kotak": "https://netbanking.kotak.com/knb2/",
    "pnb": "https://netpnb.com/",
    "bob": "https://www.bankofbaroda.in/personal-banking/digital-products/internet-banking",
    "canara": "https://netbanking.canarabank.com/entry/ENULogin.jsp",
    "union": "https://www.unionbankofindia.co.in/english/internet-banking.aspx",
}

_GATEWAY_PROMPT = (
    "{channel} Payment Gateway Integration Required\n\n"
    "This is a demo storefront. In production this step would hand over to a "
    "real payment gateway.\n\n"
    "Accept to simulate a successful payment, or decline to abort."
)


def is_valid_card_number(card_number: str) -> bool:
    digits = re.sub(r"\s", "", card_number)
    return ASCII_DIGITS.fullmatch(digits) is not None and len(digits) >= MIN_CARD_DIGITS


def is_valid_expiry(expiry_date: str) -> bool:
    return len(expiry_date) == 5 and EXPIRY_PATTERN.fullmatch(expiry_date) is not None


def is_valid_cvv(cvv: str) -> bool:
    return ASCII_DIGITS.fullmatch(cvv) is not None and len(cvv) >= MIN_CVV_DIGITS


def is_valid_upi_id(upi_id: str) -> bool:
    return UPI_ID_PATTERN.fullmatch(upi_id) is not None


class PaymentStrategy(ABC):

    method: PaymentMethod

    def process(
        self,
        details: PaymentDetails,
        place_order: Callable[[], OrderDTO],
    ) -> OrderDTO:
        """Validate, authorize, then place exactly one order."""
        self.validate(details)
        self.authorize(details)
        return place_order()

    @abstractmethod
    def validate(self, details: PaymentDetails) -> None:
        """Raise ValidationError if *details* are incomplete or malformed."""

    def authorize(self, details: PaymentDetails) -> None:
        """Run the external payment step; raise PaymentError on failure."""


class CashOnDeliveryStrategy(PaymentStrategy):

    method = PaymentMethod.COD

    def validate(self, details: PaymentDetails) -> None:
        pass


class _GatewayConfirmationStrategy(PaymentStrategy):
    """Shared blocking-confirmation step of the card and UPI channels."""

    channel = ""

    def __init__(
        self,
        confirmation: PaymentConfirmationPort,
        timeout: float | None = DEFAULT_CONFIRM_TIMEOUT,
    ) -> None:
        self._confirmation = confirmation
        self._timeout = timeout

    def authorize(self, details: PaymentDetails) -> None:
        result = self._confirmation.confirm(
            _GATEWAY_PROMPT.format(channel=self.channel), timeout=self._timeout
        )
        if not result.accepted:
            logger.warning("%s payment not confirmed (%s)", self.channel, result.value)
            raise PaymentCancelled(f"{self.channel} payment cancelled")


class CardPaymentStrategy(_GatewayConfirmationStrategy):

    method = PaymentMethod.CARD
    channel = "Card"

    def validate(self, details: PaymentDetails) -> None:
        if not isinstance(details, CardDetails):
            raise ValidationError("Card details are required", field="payment_details")

        for name in ("card_number", "cardholder_name", "expiry_date", "cvv"):
            if not getattr(details, name):
                raise ValidationError(
                    "Please fill in all card details", field=f"payment_details.{name}"
                )
        if not is_valid_card_number(details.card_number):
            raise ValidationError(
                "Please enter a valid card number", field="payment_details.card_number"
            )
        if not is_valid_expiry(details.expiry_date):
            raise ValidationError(
                "Please enter a valid expiry date (MM/YY)",
                field="payment_details.expiry_date",
            )
        if not is_valid_cvv(details.cvv):
            raise ValidationError("Please enter a valid CVV", field="payment_details.cvv")


class UpiPaymentStrategy(_GatewayConfirmationStrategy):

    method = PaymentMethod.UPI
    channel = "UPI"

    def validate(self, details: PaymentDetails) -> None:
        if not isinstance(details, UpiDetails) or not details.upi_id:
            raise ValidationError(
                "Please enter your UPI ID", field="payment_details.upi_id"
            )
        if not is_valid_upi_id(details.upi_id):
            raise ValidationError(
                "Please enter a valid UPI ID", field="payment_details.upi_id"
            )


# --- Net banking ----------------------------------------------------------------


class NetBankingState(Enum):
    AWAITING_REDIRECT_CONFIRMATION = "awaiting_redirect_confirmation"
    AWAITING_EXTERNAL_PAYMENT = "awaiting_external_payment"
    AWAITING_PAYMENT_CONFIRMATION = "awaiting_payment_confirmation"
    COMPLETED = "completed"
    ABORTED = "aborted"


class NetBankingFlow:
    """One short-lived bank redirect, driven state by state.

    Every waiting state has its own timeout.  A rejection or a timeout
    in any of them ends the flow in ABORTED.
    """

    def __init__(
        self,
        bank: str,
        confirmation: PaymentConfirmationPort,
        confirm_timeout: float | None = DEFAULT_CONFIRM_TIMEOUT,
        external_timeout: float | None = DEFAULT_EXTERNAL_PAYMENT_TIMEOUT,
    ) -> None:
        self.bank = bank
        self.url = BANK_URLS[bank]
        self.state = NetBankingState.AWAITING_REDIRECT_CONFIRMATION
        self.visited: list[NetBankingState] = [self.state]
        self._confirmation = confirmation
        self._confirm_timeout = confirm_timeout
        self._external_timeout = external_timeout

    def run(self) -> None:
        """Drive the flow to COMPLETED or raise a PaymentError."""
        while self.state is not NetBankingState.COMPLETED:
            self._step()

    def _step(self) -> None:
        if self.state is NetBankingState.AWAITING_REDIRECT_CONFIRMATION:
            result = self._confirmation.confirm(
                f"You will be redirected to {BANK_NAMES[self.bank]}'s secure login page.\n\n"
                "Please complete your payment there and return here.\n\n"
                "Proceed with redirection?",
                timeout=self._confirm_timeout,
            )
            if not result.accepted:
                self._abort(result, "Bank redirection cancelled")
            if not self._confirmation.open_external(self.url):
                self._move(NetBankingState.ABORTED)
                raise PaymentDeclined("Popup blocked. Please allow popups and try again.")
            self._move(NetBankingState.AWAITING_EXTERNAL_PAYMENT)

        elif self.state is NetBankingState.AWAITING_EXTERNAL_PAYMENT:
            result = self._confirmation.await_return(self.url, timeout=self._external_timeout)
            if not result.accepted:
                self._abort(result, "Payment was not completed. Please try again.")
            self._move(NetBankingState.AWAITING_PAYMENT_CONFIRMATION)

        elif self.state is NetBankingState.AWAITING_PAYMENT_CONFIRMATION:
            result = self._confirmation.confirm(
                "Have you completed the payment on the bank website?",
                timeout=self._confirm_timeout,
            )
            if not result.accepted:
                self._abort(result, "Payment was not completed. Please try again.")
            self._move(NetBankingState.COMPLETED)

        else:
            raise PaymentCancelled("Net banking payment was already aborted")

    def _move(self, state: NetBankingState) -> None:
        self.state = state
        self.visited.append(state)

    def _abort(self, result: ConfirmationResult, message: str) -> None:
        logger.warning(
            "Net banking via %s aborted in %s (%s)", self.bank, self.state.value, result.value
        )
        self._move(NetBankingState.ABORTED)
        raise PaymentCancelled(message)


class NetBankingPaymentStrategy(PaymentStrategy):

    method = PaymentMethod.NETBANKING

    def __init__(
        self,
        confirmation: PaymentConfirmationPort,
        confirm_timeout: float | None = DEFAULT_CONFIRM_TIMEOUT,
        external_timeout: float | None = DEFAULT_EXTERNAL_PAYMENT_TIMEOUT,
    ) -> None:
        self._confirmation = confirmation
        self._confirm_timeout = confirm_timeout
        self._external_timeout = external_timeout
        self.last_flow: NetBankingFlow | None = None

    def validate(self, details: PaymentDetails) -> None:
        if not isinstance(details, NetBankingDetails) or details.selected_bank not in BANK_NAMES:
            raise ValidationError(
                "Please select your bank", field="payment_details.selected_bank"
            )

    def authorize(self, details: PaymentDetails) -> None:
        bank = getattr(details, "selected_bank", "")
        if bank not in BANK_URLS:
            raise PaymentDeclined(
                "Bank redirection not available. Please select a different payment method."
            )
        self.last_flow = NetBankingFlow(
            bank,
            self._confirmation,
            confirm_timeout=self._confirm_timeout,
            external_timeout=self._external_timeout,
        )
        self.last_flow.run()


def default_strategies(
    confirmation: PaymentConfirmationPort,
    confirm_timeout: float | None = DEFAULT_CONFIRM_TIMEOUT,
    external_timeout: float | None = DEFAULT_EXTERNAL_PAYMENT_TIMEOUT,
) -> dict[PaymentMethod, PaymentStrategy]:
    strategies: list[PaymentStrategy] = [
        CashOnDeliveryStrategy(),
        CardPaymentStrategy(confirmation, timeout=confirm_timeout),
        UpiPaymentStrategy(confirmation, timeout=confirm_timeout),
        NetBankingPaymentStrategy(
            confirmation,
            confirm_timeout=confirm_timeout,
            external_timeout=external_timeout,
        ),
    ]
    return {strategy.method: strategy for strategy in strategies}
