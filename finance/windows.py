# finance/windows.py
# ─────────────────────────────────────────────────────────────────────────────
# 🪟 Range filters: decide whether a (normalized) record date belongs to the
#    period a page or endpoint is looking at.
#      • DateWindow  → inclusive [start, end], either side may be open
#      • MonthWindow → one calendar month (months are 1-indexed: Jan = 1)
#    A missing/unparseable date (None) is never admitted.
# ─────────────────────────────────────────────────────────────────────────────

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time

from .dates import UTC, parse_bound


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date range; None on either side means unbounded."""
    start: datetime | None = None
    end: datetime | None = None

    @classmethod
    def parse(cls, from_raw=None, to_raw=None):
        """Build a window from query-string values ("YYYY-MM-DD" or full ISO)."""
        return cls(start=parse_bound(from_raw), end=parse_bound(to_raw, end_of_day=True))

    @classmethod
    def for_year(cls, year: int):
        return cls(
            start=datetime(year, 1, 1, tzinfo=UTC),
            end=datetime.combine(date(year, 12, 31), time.max, tzinfo=UTC),
        )

    def admits(self, when) -> bool:
        if when is None:
            return False
        if self.start is not None and when < self.start:
            return False
        if self.end is not None and when > self.end:
            return False
        return True


@dataclass(frozen=True)
class MonthWindow:
    """A single calendar month. `month` runs 1..12."""
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")

    @property
    def name(self) -> str:
        return calendar.month_name[self.month]        # "January"

    @property
    def short_name(self) -> str:
        return calendar.month_abbr[self.month]        # "Jan"

    def shift(self, months: int):
        """Window `months` away (negative = earlier), rolling over years."""
        index = self.year * 12 + (self.month - 1) + months
        return MonthWindow(year=index // 12, month=index % 12 + 1)

    def admits(self, when) -> bool:
        if when is None:
            return False
        return when.year == self.year and when.month == self.month


def admitted(entries, window):
    """Yield only the entries whose occurred_at the window admits."""
    for entry in entries:
        if window.admits(entry.occurred_at):
            yield entry
