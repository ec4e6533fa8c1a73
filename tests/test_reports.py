import csv
from datetime import datetime
from decimal import Decimal
from io import BytesIO, StringIO

from openpyxl import load_workbook

from finance.dates import UTC, normalize_datetime
from finance.exports import savings_csv, statement_csv, statistics_xlsx
from finance.models import EXPENSE, INCOME
from finance.reports import (
    STATEMENT_DISPLAY_LIMIT, as_chart_data, assemble, balance_trend, summary,
)
from finance.store import Entry
from finance.windows import DateWindow, MonthWindow
from tests.conftest import make_entry


def _year_2024():
    return DateWindow.for_year(2024)


def test_salary_and_food_scenario_for_the_full_year():
    entries = [
        make_entry(INCOME, 100, (2024, 1, 15), label="Salary"),
        make_entry(EXPENSE, 40, (2024, 1, 20), label="Food"),
    ]
    report = assemble(entries, _year_2024())

    jan = report.time_series[0]
    assert jan["period"] == "Jan"
    assert (jan["income"], jan["expense"]) == (Decimal("100"), Decimal("40"))
    assert len(report.time_series) == 12
    for row in report.time_series[1:]:
        assert (row["income"], row["expense"]) == (Decimal("0"), Decimal("0"))
    assert report.categories == [{"category": "Food", "total": Decimal("40")}]


def test_unparseable_date_is_excluded_everywhere():
    bad = Entry(id=9, kind=INCOME, amount=Decimal("50"), occurred_at=normalize_datetime("not-a-date"),
                recorded_at=None, label="Gift")
    good = make_entry(INCOME, 100, (2024, 1, 15), label="Salary", id=1)
    report = assemble([bad, good], DateWindow())
    assert report.totals["income"] == Decimal("100")
    assert [row.id for row in report.statement] == [1]


def test_statement_rows_are_signed_titled_and_newest_first():
    entries = [
        make_entry(INCOME, 100, (2024, 1, 15), label="Salary", id=1),
        make_entry(EXPENSE, 40, (2024, 1, 20), label="Food", title="Dinner", id=2),
    ]
    rows = assemble(entries, MonthWindow(2024, 1)).statement
    assert [r.id for r in rows] == [2, 1]
    assert rows[0].amount == Decimal("-40")
    assert rows[0].title == "Dinner"
    assert rows[1].title == "Salary"
    assert rows[1].type == INCOME


def test_display_is_capped_but_export_is_not():
    entries = [make_entry(EXPENSE, 1, datetime(2024, 1, 1, tzinfo=UTC), label="Food", id=i) for i in range(75)]
    report = assemble(entries, MonthWindow(2024, 1))
    assert len(report.latest()) == STATEMENT_DISPLAY_LIMIT
    lines = statement_csv(report.statement).splitlines()
    assert len(lines) == 1 + 75


def test_statement_csv_quotes_text_and_leaves_amount_bare():
    entries = [make_entry(EXPENSE, "12.5", (2024, 1, 20), label="Food", title='Lunch "deal", big')]
    out = statement_csv(assemble(entries, MonthWindow(2024, 1)).statement)
    header, line = out.splitlines()
    assert header == "Date,Title,Type,Amount"
    assert line == '"2024-01-20","Lunch ""deal"", big","Expense",-12.50'
    parsed = next(csv.reader(StringIO(line)))
    assert parsed[1] == 'Lunch "deal", big'


def test_savings_csv_has_twelve_months():
    entries = [make_entry(INCOME, 100, (2024, 2, 1), label="Salary")]
    out = savings_csv(assemble(entries, _year_2024()).time_series).splitlines()
    assert out[0] == "Month,Income,Expenses,Savings"
    assert len(out) == 13
    assert out[2] == "Feb,100.00,0.00,100.00"


def test_summary_and_xlsx_export():
    entries = [
        make_entry(INCOME, 500, (2024, 5, 1), label="Salary"),
        make_entry(EXPENSE, 120, (2024, 5, 3), label="Rent"),
        make_entry(EXPENSE, 30, (2024, 5, 4), label="Food"),
        make_entry(EXPENSE, 999, (2024, 6, 1), label="Travel"),
    ]
    stats = summary(entries, DateWindow.parse("2024-05-01", "2024-05-31"))
    assert stats["totalIncome"] == Decimal("500")
    assert stats["totalExpense"] == Decimal("150")
    assert stats["savings"] == Decimal("350")
    assert stats["categoryTotals"] == {"Rent": Decimal("120"), "Food": Decimal("30")}

    ws = load_workbook(BytesIO(statistics_xlsx(stats))).active
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0] == ("Label", "Amount")
    assert rows[1] == ("Total Income", 500.0)
    assert rows[3] == ("Savings", 350.0)
    assert rows[4:] == [("Rent", 120.0), ("Food", 30.0)]


def test_balance_trend_reports_six_months_and_change():
    entries = [
        make_entry(INCOME, 200, (2024, 2, 10), label="Salary"),
        make_entry(INCOME, 300, (2024, 3, 10), label="Salary"),
        make_entry(EXPENSE, 50, (2024, 3, 12), label="Food"),
    ]
    trend = balance_trend(entries, MonthWindow(2024, 3))
    assert [p["period"] for p in trend["points"]] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert trend["points"][0]["year"] == 2023
    assert trend["balance"] == Decimal("250")
    assert trend["change"] == Decimal("25.0")


def test_balance_trend_change_from_zero():
    entries = [make_entry(INCOME, 10, (2024, 3, 10), label="Gift")]
    assert balance_trend(entries, MonthWindow(2024, 3))["change"] == Decimal("100")
    assert balance_trend([], MonthWindow(2024, 3))["change"] == Decimal("0")


def test_chart_data_is_float():
    rows = as_chart_data([{"period": "Jan", "total": Decimal("1.25")}], "total")
    assert rows == [{"period": "Jan", "total": 1.25}]


def test_same_instant_rows_put_newest_id_first():
    when = (2024, 1, 10)
    entries = [make_entry(EXPENSE, 1, when, label="Food", id=i) for i in (3, 7, 5)]
    assert [r.id for r in assemble(entries, MonthWindow(2024, 1)).statement] == [7, 5, 3]


def test_month_buckets_sum_to_admitted_total():
    entries = [
        make_entry(INCOME, "10.10", (2024, 1, 1), label="Gift"),
        make_entry(INCOME, "5.05", (2024, 7, 31), label="Gift"),
        make_entry(INCOME, 99, (2025, 1, 1), label="Gift"),
    ]
    report = assemble(entries, _year_2024())
    assert sum(row["income"] for row in report.time_series) == Decimal("15.15")
    assert report.totals["income"] == Decimal("15.15")


def test_month_mode_is_idempotent():
    entries = [make_entry(EXPENSE, 3, (2024, 4, 4), label="Bills")]
    first = assemble(entries, MonthWindow(2024, 4))
    second = assemble(entries, MonthWindow(2024, 4))
    assert first == second
