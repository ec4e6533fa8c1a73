from datetime import datetime
from decimal import Decimal

import pytest

from finance.aggregation import (
    MONTH_LABELS, UNCATEGORIZED, aggregate, category_key, coerce_amount, kind_key, month_key, ranked,
)
from finance.dates import UTC
from finance.models import EXPENSE, INCOME
from finance.store import Entry
from finance.windows import DateWindow, MonthWindow, admitted
from tests.conftest import make_entry


# ---- Windows -----------------------------------------------------------------


def test_date_window_bounds_are_inclusive():
    window = DateWindow.parse("2024-01-01", "2024-01-31")
    assert window.admits(datetime(2024, 1, 1, tzinfo=UTC))
    assert window.admits(datetime(2024, 1, 31, 23, 59, tzinfo=UTC))
    assert not window.admits(datetime(2024, 2, 1, tzinfo=UTC))
    assert not window.admits(datetime(2023, 12, 31, 23, 59, tzinfo=UTC))


def test_windows_never_admit_missing_dates():
    assert not DateWindow().admits(None)
    assert not MonthWindow(2024, 1).admits(None)


def test_open_window_admits_everything_dated():
    assert DateWindow().admits(datetime(1999, 5, 5, tzinfo=UTC))


def test_month_window_is_one_indexed():
    jan = MonthWindow(2024, 1)
    assert jan.name == "January"
    assert jan.short_name == "Jan"
    assert jan.admits(datetime(2024, 1, 31, 23, 0, tzinfo=UTC))
    assert not jan.admits(datetime(2024, 2, 1, tzinfo=UTC))


@pytest.mark.parametrize("month", [0, 13])
def test_month_window_rejects_out_of_range_months(month):
    with pytest.raises(ValueError):
        MonthWindow(2024, month)


def test_month_window_shift_rolls_over_years():
    assert MonthWindow(2024, 1).shift(-1) == MonthWindow(2023, 12)
    assert MonthWindow(2024, 11).shift(3) == MonthWindow(2025, 2)
    assert MonthWindow(2024, 6).shift(-5) == MonthWindow(2024, 1)


def test_for_year_spans_the_calendar_year():
    window = DateWindow.for_year(2024)
    assert window.admits(datetime(2024, 12, 31, 23, 59, 59, tzinfo=UTC))
    assert not window.admits(datetime(2025, 1, 1, tzinfo=UTC))


def test_admitted_skips_entries_outside_window():
    entries = [
        make_entry(INCOME, 10, (2024, 1, 5)),
        make_entry(INCOME, 20, (2024, 2, 5)),
        Entry(id=3, kind=INCOME, amount=Decimal("5"), occurred_at=None, recorded_at=None, label="Gift"),
    ]
    kept = list(admitted(entries, MonthWindow(2024, 1)))
    assert [e.amount for e in kept] == [Decimal("10")]


# ---- Aggregation -------------------------------------------------------------


@pytest.mark.parametrize(
    "raw,expected",
    [
        (Decimal("1.50"), Decimal("1.50")),
        (3, Decimal("3")),
        (0.1, Decimal("0.1")),
        ("12.5", Decimal("12.5")),
        ("abc", Decimal("0")),
        (None, Decimal("0")),
        (True, Decimal("0")),
        ({"amount": 1}, Decimal("0")),
    ],
)
def test_coerce_amount(raw, expected):
    assert coerce_amount(raw) == expected


def test_month_domain_is_zero_filled_in_calendar_order():
    entries = [make_entry(EXPENSE, 40, (2024, 3, 10)), make_entry(EXPENSE, 2, (2024, 3, 11))]
    buckets = aggregate(entries, month_key, domain=MONTH_LABELS)
    assert list(buckets) == list(MONTH_LABELS)
    assert buckets["Mar"] == Decimal("42")
    assert buckets["Jan"] == Decimal("0")


def test_only_observed_categories_appear_without_domain():
    entries = [
        make_entry(EXPENSE, 10, (2024, 1, 1), label="Food"),
        make_entry(EXPENSE, 5, (2024, 1, 2), label=""),
    ]
    buckets = aggregate(entries, category_key)
    assert buckets == {"Food": Decimal("10"), UNCATEGORIZED: Decimal("5")}


def test_junk_amounts_count_as_zero_but_keep_the_bucket():
    junk = Entry(id=1, kind=INCOME, amount="n/a", occurred_at=datetime(2024, 1, 1, tzinfo=UTC),
                 recorded_at=None, label="Gift")
    buckets = aggregate([junk], kind_key, domain=(INCOME, EXPENSE))
    assert buckets == {INCOME: Decimal("0"), EXPENSE: Decimal("0")}


def test_ranked_orders_by_total_then_key():
    buckets = {"Rent": Decimal("100"), "Food": Decimal("30"), "Bills": Decimal("30")}
    assert [k for k, _ in ranked(buckets)] == ["Rent", "Bills", "Food"]
