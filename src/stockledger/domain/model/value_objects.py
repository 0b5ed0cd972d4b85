"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from stockledger.domain.exceptions import InvalidQuantityError, ValidationError

DEFAULT_CURRENCY = "INR"


@dataclass(frozen=True)
class Money:
    """A non-negative rate or valuation.

    Stored as Decimal; rates are entered as strings like ``"245.50"``
    and multiplied out by stock counts.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Invalid money amount: {self.amount}")
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    def __add__(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, units: int) -> Money:
        if isinstance(units, bool) or not isinstance(units, int):
            raise TypeError(f"Money can only be scaled by a unit count, got {units!r}")
        return Money(self.amount * units, self.currency)

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal(0), currency)

    @staticmethod
    def of(amount: str | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Parse a user-entered amount."""
        try:
            value = Decimal(str(amount).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
        return Money(value, currency)

    @staticmethod
    def total(values: list[Money], currency: str = DEFAULT_CURRENCY) -> Money:
        result = Money.zero(currency)
        for value in values:
            result = result + value
        return result


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Every reservation, consumption and purchase moves a strictly positive
    amount; the direction is carried by the operation, not the sign.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidQuantityError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise InvalidQuantityError(
                f"Quantity must be positive, got {self.value}"
            )

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class MaterialLine:
    """One ``{itemId, quantity}`` entry of a reserve or consume request."""

    item_id: str
    quantity: Quantity

    def __post_init__(self) -> None:
        if not self.item_id or not self.item_id.strip():
            raise ValidationError("Material line requires an item id")

    @staticmethod
    def of(item_id: str, quantity: int) -> MaterialLine:
        return MaterialLine(item_id=item_id, quantity=Quantity(quantity))
