"""Unit tests for the payment strategies and the net banking flow."""

from dataclasses import replace

import pytest

from storefront.application.checkout.payment_strategies import (
    BANK_URLS,
    CardPaymentStrategy,
    CashOnDeliveryStrategy,
    NetBankingPaymentStrategy,
    NetBankingState,
    UpiPaymentStrategy,
    default_strategies,
    is_valid_card_number,
    is_valid_cvv,
    is_valid_expiry,
    is_valid_upi_id,
)
from storefront.application.checkout.ports import ConfirmationResult
from storefront.domain.exceptions import (
    PaymentCancelled,
    PaymentDeclined,
    ValidationError,
)
from storefront.domain.model.checkout import (
    CardDetails,
    CodDetails,
    NetBankingDetails,
    UpiDetails,
)
from storefront.domain.model.order import PaymentMethod
from tests.fakes import ScriptedConfirmationPort

VALID_CARD = CardDetails(
    card_number="4111 1111 1111 1111",
    cardholder_name="Jane Doe",
    expiry_date="12/29",
    cvv="123",
)


class _PlaceOrderSpy:

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return f"order-{self.calls}"


class TestFormatChecks:

    @pytest.mark.parametrize(
        "number, valid",
        [
            ("4111 1111 1111 1111", True),
            ("4111111111111", True),
            ("4111 111", False),
            ("4111-1111-1111-1111", False),
            ("١١١١١١١١١١١١١", False),
            ("4111 1111 1111 111²", False),
            ("", False),
        ],
    )
    def test_card_number(self, number, valid):
        assert is_valid_card_number(number) is valid

    @pytest.mark.parametrize(
        "expiry, valid",
        [("01/27", True), ("12/30", True), ("13/27", False), ("1/27", False), ("0127", False), ("١٢/٢٧", False)],
    )
    def test_expiry(self, expiry, valid):
        assert is_valid_expiry(expiry) is valid

    @pytest.mark.parametrize(
        "cvv, valid",
        [("123", True), ("1234", True), ("12", False), ("12a", False), ("²²²", False), ("١٢٣", False)],
    )
    def test_cvv(self, cvv, valid):
        assert is_valid_cvv(cvv) is valid

    @pytest.mark.parametrize(
        "upi_id, valid",
        [
            ("jane.doe@upi", True),
            ("jane_doe-1@okaxis", True),
            ("jane doe@upi", False),
            ("jane@u", False),
            ("jane@upi1", False),
            ("j@upi", False),
        ],
    )
    def test_upi_id(self, upi_id, valid):
        assert is_valid_upi_id(upi_id) is valid


class TestCashOnDelivery:

    def test_places_order_without_prompting(self):
        spy = _PlaceOrderSpy()
        assert CashOnDeliveryStrategy().process(CodDetails(), spy) == "order-1"
        assert spy.calls == 1


class TestCardStrategy:

    def test_accepted_places_one_order(self):
        port = ScriptedConfirmationPort([ConfirmationResult.ACCEPTED])
        spy = _PlaceOrderSpy()

        result = CardPaymentStrategy(port, timeout=30).process(VALID_CARD, spy)

        assert result == "order-1"
        assert spy.calls == 1
        assert "Card Payment Gateway" in port.prompts[0]
        assert port.timeouts == [30]

    @pytest.mark.parametrize(
        "answer", [ConfirmationResult.REJECTED, ConfirmationResult.TIMED_OUT]
    )
    def test_not_accepted_places_nothing(self, answer):
        port = ScriptedConfirmationPort([answer])
        spy = _PlaceOrderSpy()
        with pytest.raises(PaymentCancelled, match="Card payment cancelled"):
            CardPaymentStrategy(port).process(VALID_CARD, spy)
        assert spy.calls == 0

    @pytest.mark.parametrize(
        "overrides, message, field",
        [
            ({"cvv": ""}, "Please fill in all card details", "payment_details.cvv"),
            ({"card_number": "4111 111"}, "valid card number", "payment_details.card_number"),
            ({"expiry_date": "13/29"}, "valid expiry date", "payment_details.expiry_date"),
            ({"cvv": "12"}, "valid CVV", "payment_details.cvv"),
        ],
    )
    def test_invalid_details_never_prompt(self, overrides, message, field):
        details = replace(VALID_CARD, **overrides)
        port = ScriptedConfirmationPort()
        spy = _PlaceOrderSpy()

        with pytest.raises(ValidationError, match=message) as exc_info:
            CardPaymentStrategy(port).process(details, spy)

        assert exc_info.value.field == field
        assert port.prompts == []
        assert spy.calls == 0


class TestUpiStrategy:

    def test_accepted(self):
        port = ScriptedConfirmationPort([True])
        spy = _PlaceOrderSpy()
        UpiPaymentStrategy(port).process(UpiDetails("jane.doe@upi"), spy)
        assert spy.calls == 1
        assert "UPI Payment Gateway" in port.prompts[0]

    def test_missing_id(self):
        with pytest.raises(ValidationError, match="Please enter your UPI ID"):
            UpiPaymentStrategy(ScriptedConfirmationPort()).process(UpiDetails(), _PlaceOrderSpy())

    def test_malformed_id(self):
        with pytest.raises(ValidationError, match="Please enter a valid UPI ID"):
            UpiPaymentStrategy(ScriptedConfirmationPort()).process(
                UpiDetails("jane doe@upi"), _PlaceOrderSpy()
            )

    def test_rejected(self):
        spy = _PlaceOrderSpy()
        with pytest.raises(PaymentCancelled, match="UPI payment cancelled"):
            UpiPaymentStrategy(ScriptedConfirmationPort([False])).process(
                UpiDetails("jane.doe@upi"), spy
            )
        assert spy.calls == 0


class TestNetBankingStrategy:

    def test_full_flow_visits_every_state(self):
        port = ScriptedConfirmationPort([True, True, True])
        strategy = NetBankingPaymentStrategy(port, confirm_timeout=60, external_timeout=300)
        spy = _PlaceOrderSpy()

        strategy.process(NetBankingDetails("hdfc"), spy)

        assert spy.calls == 1
        assert port.opened == [BANK_URLS["hdfc"]]
        assert port.timeouts == [60, 300, 60]
        assert "HDFC Bank" in port.prompts[0]
        assert strategy.last_flow.visited == [
            NetBankingState.AWAITING_REDIRECT_CONFIRMATION,
            NetBankingState.AWAITING_EXTERNAL_PAYMENT,
            NetBankingState.AWAITING_PAYMENT_CONFIRMATION,
            NetBankingState.COMPLETED,
        ]

    def test_redirect_declined(self):
        port = ScriptedConfirmationPort([False])
        strategy = NetBankingPaymentStrategy(port)
        spy = _PlaceOrderSpy()

        with pytest.raises(PaymentCancelled, match="Bank redirection cancelled"):
            strategy.process(NetBankingDetails("sbi"), spy)

        assert port.opened == []
        assert strategy.last_flow.state == NetBankingState.ABORTED
        assert spy.calls == 0

    def test_popup_blocked(self):
        port = ScriptedConfirmationPort([True], popup_allowed=False)
        strategy = NetBankingPaymentStrategy(port)
        spy = _PlaceOrderSpy()

        with pytest.raises(PaymentDeclined, match="Popup blocked"):
            strategy.process(NetBankingDetails("icici"), spy)

        assert strategy.last_flow.state == NetBankingState.ABORTED
        assert spy.calls == 0

    def test_external_payment_timed_out(self):
        port = ScriptedConfirmationPort([True, ConfirmationResult.TIMED_OUT])
        spy = _PlaceOrderSpy()
        with pytest.raises(PaymentCancelled, match="Payment was not completed"):
            NetBankingPaymentStrategy(port).process(NetBankingDetails("axis"), spy)
        assert spy.calls == 0

    def test_final_confirmation_declined(self):
        port = ScriptedConfirmationPort([True, True, False])
        strategy = NetBankingPaymentStrategy(port)
        spy = _PlaceOrderSpy()

        with pytest.raises(PaymentCancelled, match="Payment was not completed"):
            strategy.process(NetBankingDetails("kotak"), spy)

        assert strategy.last_flow.visited[-2:] == [
            NetBankingState.AWAITING_PAYMENT_CONFIRMATION,
            NetBankingState.ABORTED,
        ]
        assert spy.calls == 0

    def test_bank_without_redirect(self):
        port = ScriptedConfirmationPort()
        with pytest.raises(PaymentDeclined, match="Bank redirection not available"):
            NetBankingPaymentStrategy(port).process(NetBankingDetails("other"), _PlaceOrderSpy())
        assert port.prompts == []

    @pytest.mark.parametrize("bank", ["", "monzo"])
    def test_bank_must_be_selected(self, bank):
        with pytest.raises(ValidationError, match="Please select your bank"):
            NetBankingPaymentStrategy(ScriptedConfirmationPort()).process(
                NetBankingDetails(bank), _PlaceOrderSpy()
            )


def test_default_strategies_cover_every_method():
    strategies = default_strategies(ScriptedConfirmationPort())
    assert set(strategies) == set(PaymentMethod)
