"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
- TimeRange: Represents a half-open time-of-day range [start, end)
"""

from dataclasses import dataclass
from datetime import time
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.money import round_money, to_decimal
from shared.domain.timeutils import minutes_to_clock, minutes_to_time, parse_time_to_minutes


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a non-negative monetary amount with currency.
    """
    amount: Decimal
    currency: str = 'SAR'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', to_decimal(self.amount))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def rounded(self) -> 'Money':
        return Money(round_money(self.amount), self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time-of-day range value object

    Stores minutes since midnight; start is inclusive, end is exclusive.
    Used for availability windows, slots and booking intervals.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(
                f"Start ({minutes_to_time(self.start)}) must be before end ({minutes_to_time(self.end)})"
            )

    @classmethod
    def parse(cls, start, end) -> 'TimeRange | None':
        """Build a range from strings or ``time`` values, ``None`` if malformed or empty."""
        start_min = parse_time_to_minutes(start)
        end_min = parse_time_to_minutes(end)
        if start_min is None or end_min is None or end_min <= start_min:
            return None
        return cls(start_min, end_min)

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Adjacent ranges (10:00-11:00 and 11:00-12:00) don't overlap.
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        return self.start < other.end and self.end > other.start

    def contains(self, other: 'TimeRange') -> bool:
        """True when ``other`` lies fully inside this range."""
        return self.start <= other.start and other.end <= self.end

    def split(self, step_minutes: int):
        """Consecutive ranges of ``step_minutes``; a partial trailing range is dropped."""
        cursor = self.start
        while cursor + step_minutes <= self.end:
            yield TimeRange(cursor, cursor + step_minutes)
            cursor += step_minutes

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def start_clock(self) -> time:
        return minutes_to_clock(self.start)

    @property
    def end_clock(self) -> time:
        return minutes_to_clock(self.end)

    def __str__(self):
        return f"{minutes_to_time(self.start)}-{minutes_to_time(self.end)}"

    def __repr__(self):
        return f"TimeRange({minutes_to_time(self.start)}, {minutes_to_time(self.end)})"
