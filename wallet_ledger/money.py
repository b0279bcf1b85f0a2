"""
Money value type.

All balances and amounts are fixed-point decimals with two
fractional digits. Binary floats are never used for arithmetic;
a float input is converted through its string form first so
250.75 stays 250.75 instead of 250.7499999...
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from functools import total_ordering

CENT = Decimal("0.01")


class InvalidMoneyError(ValueError):
    """Raised when a raw value cannot be read as a money amount."""


class MoneyOutOfRangeError(InvalidMoneyError):
    """Raised when a value is too large to be held to the cent."""

    def __init__(self, value: Decimal):
        super().__init__(f"Money amount out of range: {value}")
        self.value = value


@total_ordering
@dataclass(frozen=True)
class Money:
    """
    Immutable amount rounded to cents (ROUND_HALF_UP).

    Money("123.456") == Money("123.46")
    """

    amount: Decimal

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        try:
            rounded = self.amount.quantize(CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            # More digits than the decimal context can carry
            raise MoneyOutOfRangeError(self.amount) from None
        object.__setattr__(self, "amount", rounded)

    @classmethod
    def parse(cls, raw) -> "Money":
        """
        Read a Money value from a Decimal, int, float or decimal string.

        Raises InvalidMoneyError for None, booleans, blank or
        non-numeric strings and non-finite numbers, and its subclass
        MoneyOutOfRangeError for values too large to round to cents.
        """
        if isinstance(raw, Money):
            return raw
        if raw is None or isinstance(raw, bool):
            raise InvalidMoneyError(f"Not a money amount: {raw!r}")

        if isinstance(raw, Decimal):
            value = raw
        elif isinstance(raw, (int, float, str)):
            text = str(raw).strip()
            if not text:
                raise InvalidMoneyError("Money amount is blank")
            try:
                value = Decimal(text)
            except InvalidOperation:
                raise InvalidMoneyError(f"Not a money amount: {raw!r}") from None
        else:
            raise InvalidMoneyError(f"Not a money amount: {raw!r}")

        if not value.is_finite():
            raise InvalidMoneyError(f"Money amount must be finite: {raw!r}")
        return cls(value)

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal("0"))

    def __add__(self, other: "Money") -> "Money":
        return Money(self.amount + Money.parse(other).amount)

    def __sub__(self, other: "Money") -> "Money":
        return Money(self.amount - Money.parse(other).amount)

    def __neg__(self) -> "Money":
        return Money(-self.amount)

    def __abs__(self) -> "Money":
        return Money(abs(self.amount))

    def __eq__(self, other) -> bool:
        if isinstance(other, Money):
            return self.amount == other.amount
        if isinstance(other, (Decimal, int)) and not isinstance(other, bool):
            return self.amount == other
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, Money):
            return self.amount < other.amount
        if isinstance(other, (Decimal, int)) and not isinstance(other, bool):
            return self.amount < other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.amount)

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.amount:.2f}"
