"""
Common Value Objects

- Money: exact decimal currency amounts
- TimeInterval: half-open wall-clock interval [start, end) on one date

The module level helpers ``overlaps``, ``duration`` and ``contains`` are
the interval model used by availability checks and booking overlap
detection. They are pure and never touch the database.
"""

from dataclasses import dataclass
from datetime import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from shared.domain.base import ValueObject

SECONDS_IN_DAY = 24 * 60 * 60
TWO_PLACES = Decimal('0.01')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are always fixed-point decimals with two places. Comparison
    is exact, there is no tolerance.
    """
    amount: Decimal
    currency: str = 'USD'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            raise TypeError("Money amount must be a Decimal")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")

    @classmethod
    def parse(cls, value: Any, currency: str = 'USD') -> 'Money':
        """
        Build Money from user input

        Floats go through ``str`` so 123.99 stays 123.99 instead of its
        binary approximation. Values with more than two decimal places
        are rejected rather than rounded.
        """
        if isinstance(value, bool) or value is None:
            raise ValueError("Amount is required")
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {value!r}")
        if not amount.is_finite():
            raise ValueError(f"Invalid amount: {value!r}")
        if amount != amount.quantize(TWO_PLACES):
            raise ValueError("Amount cannot have more than two decimal places")
        return cls(amount.quantize(TWO_PLACES), currency)

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money((self.amount * factor).quantize(TWO_PLACES, ROUND_HALF_UP), self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"


def _seconds(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


@dataclass(frozen=True)
class TimeInterval(ValueObject):
    """
    Half-open interval [start, end) of wall-clock times

    An interval whose end is not after its start crosses midnight:
    22:00-02:00 is four hours long and ends the next day.
    """
    start: time
    end: time

    @property
    def start_seconds(self) -> int:
        return _seconds(self.start)

    @property
    def end_seconds(self) -> int:
        end = _seconds(self.end)
        if end <= self.start_seconds:
            end += SECONDS_IN_DAY
        return end

    @property
    def crosses_midnight(self) -> bool:
        return _seconds(self.end) <= self.start_seconds

    def overlaps(self, other: 'TimeInterval') -> bool:
        return overlaps(self, other)

    def contains(self, other: 'TimeInterval') -> bool:
        return contains(self, other)

    @property
    def hours(self) -> Decimal:
        return duration(self.start, self.end)

    def __str__(self):
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """
    True iff the two half-open intervals share any instant

    Touching endpoints do not overlap: 09:00-12:00 and 12:00-13:00 are
    compatible.
    """
    return a.start_seconds < b.end_seconds and b.start_seconds < a.end_seconds


def duration(start: time, end: time) -> Decimal:
    """Length of [start, end) in hours, rounded to 2 places"""
    interval = TimeInterval(start, end)
    seconds = interval.end_seconds - interval.start_seconds
    return (Decimal(seconds) / Decimal(3600)).quantize(TWO_PLACES, ROUND_HALF_UP)


def contains(block: TimeInterval, interval: TimeInterval) -> bool:
    """True iff ``interval`` lies entirely inside ``block``"""
    return (block.start_seconds <= interval.start_seconds
            and interval.end_seconds <= block.end_seconds)
