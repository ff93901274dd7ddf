"""Value objects for prices and quantities.

Both are frozen and validate on construction, so an order can never
hold a negative price or an empty line.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from storefront.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "INR"
CURRENCY_SYMBOLS = {"INR": "₹"}
PAISE = Decimal("0.01")


@total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount in a single currency.

    Every price, fee and total in the storefront is INR; the currency
    field only guards against mixing amounts from another source.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    @classmethod
    def of(cls, amount: str | int | Decimal) -> Money:
        """Build from user or file input (``"1499.00"``, ``1499``...)."""
        try:
            return cls(Decimal(str(amount).strip()))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @classmethod
    def zero(cls) -> Money:
        return cls(Decimal("0.00"))

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._same_currency(other).amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        remainder = self.amount - self._same_currency(other).amount
        if remainder < 0:
            raise ValidationError(
                f"Cannot subtract {other} from {self}: the result would be negative"
            )
        return Money(remainder, self.currency)

    def __mul__(self, quantity: int) -> Money:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError(f"Money can only be multiplied by an int, got {quantity!r}")
        return Money(self.amount * quantity, self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._same_currency(other).amount

    def scaled(self, rate: Decimal) -> Money:
        """``self * rate`` rounded half-up to whole paise (e.g. GST)."""
        return Money((self.amount * rate).quantize(PAISE, rounding=ROUND_HALF_UP), self.currency)

    def __str__(self) -> str:
        symbol = CURRENCY_SYMBOLS.get(self.currency, f"{self.currency} ")
        return f"{symbol}{self.amount:,.2f}"

    def _same_currency(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return other


@dataclass(frozen=True)
class Quantity:
    """How many units of one variant a line holds; always at least one."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True would otherwise pass as 1
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value < 1:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
