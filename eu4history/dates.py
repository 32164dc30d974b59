"""
EU4 calendar dates.

The game calendar has no leap years, so every year is exactly 365 days and
day arithmetic is done on a plain ordinal instead of datetime.date.
"""

from dataclasses import dataclass

DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
DAYS_IN_YEAR = 365

_DAYS_BEFORE_MONTH = [0]
for _days in DAYS_IN_MONTH[:-1]:
    _DAYS_BEFORE_MONTH.append(_DAYS_BEFORE_MONTH[-1] + _days)


@dataclass(frozen=True, order=True)
class Eu4Date:
    year: int
    month: int = 1
    day: int = 1

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"invalid month in date: {self.year}.{self.month}.{self.day}")
        if not 1 <= self.day <= DAYS_IN_MONTH[self.month - 1]:
            raise ValueError(f"invalid day in date: {self.year}.{self.month}.{self.day}")

    @classmethod
    def parse(cls, text: str) -> 'Eu4Date':
        """Parse a save date (YYYY.M.D format, optionally with a trailing hour)."""
        parts = str(text).strip().strip('"').split('.')
        if len(parts) not in (3, 4):
            raise ValueError(f"invalid date: {text!r}")
        try:
            year, month, day = (int(p) for p in parts[:3])
        except ValueError:
            raise ValueError(f"invalid date: {text!r}") from None
        return cls(year, month, day)

    @classmethod
    def try_parse(cls, text) -> 'Eu4Date | None':
        """Like parse, but returns None for keys that are not dates."""
        try:
            return cls.parse(text)
        except ValueError:
            return None

    def days(self) -> int:
        return self.year * DAYS_IN_YEAR + _DAYS_BEFORE_MONTH[self.month - 1] + self.day - 1

    def days_until(self, other: 'Eu4Date') -> int:
        return other.days() - self.days()

    def iso_8601(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return f"{self.year}.{self.month}.{self.day}"
