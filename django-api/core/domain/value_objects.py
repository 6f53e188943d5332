"""Domain primitives shared across bounded contexts."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Self

_CENTS = Decimal("0.01")

DEFAULT_CURRENCY = "EUR"


def _to_decimal(value: int | float | str | Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("Money amount must be a number")
    try:
        # floats go through str() so 0.1 stays Decimal("0.1")
        result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Money amount is not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError("Money amount must be finite")
    return result


def _to_cents(value: Decimal) -> Decimal:
    try:
        return value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        # more digits than the decimal context can hold
        raise ValueError(f"Money amount is out of range: {value}") from exc


@dataclass(frozen=True)
class Money:
    """Monetary amount in a single currency.

    Amounts are kept at two decimal places. Arithmetic and comparisons are
    only defined between amounts of the same currency and always return new
    instances.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not self.amount.is_finite():
            raise ValueError("Money amount must be finite")
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")
        if len(self.currency) != 3 or not self.currency.isascii() or not self.currency.isalpha():
            raise ValueError(f"Invalid currency code: {self.currency!r}")

    @classmethod
    def create(cls, amount: int | float | str | Decimal, currency: str = DEFAULT_CURRENCY) -> Self:
        value = _to_cents(_to_decimal(amount))
        return cls(amount=value, currency=currency.strip().upper())

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Self:
        return cls.create(0, currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def add(self, other: "Money") -> "Money":
        self._ensure_same_currency(other, "add")
        return Money.create(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._ensure_same_currency(other, "subtract")
        result = self.amount - other.amount
        if result < 0:
            raise ValueError("Subtraction result cannot be negative")
        return Money.create(result, self.currency)

    def multiply(self, factor: int | float | str | Decimal) -> "Money":
        factor = _to_decimal(factor)
        if factor < 0:
            raise ValueError("Multiplication factor cannot be negative")
        return Money.create(self.amount * factor, self.currency)

    def greater_than(self, other: "Money") -> bool:
        self._ensure_same_currency(other, "compare")
        return self.amount > other.amount

    def less_than(self, other: "Money") -> bool:
        self._ensure_same_currency(other, "compare")
        return self.amount < other.amount

    def _ensure_same_currency(self, other: "Money", operation: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {operation} amounts in different currencies "
                f"({self.currency} and {other.currency})"
            )

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


class ParseableEnum(Enum):
    """Enum whose members are persisted and exchanged as their exact string value."""

    @classmethod
    def parse(cls, value: "Self | str") -> Self:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Invalid {cls.__name__} value: {value}. Valid values: {valid}") from None
