# finance/reports.py
# ─────────────────────────────────────────────────────────────────────────────
# 📊 Report assembly: turns admitted entries into the shapes the pages,
#    charts and downloads consume.
#      • time series  → [{period, income, expense, savings}] in calendar order
#      • categories   → [{category, total}] biggest first (expenses only)
#      • statement    → one signed row per record, newest first
#      • balance trend / summary → small dashboard + statistics cards
#    All the summing goes through finance.aggregation.aggregate().
# ─────────────────────────────────────────────────────────────────────────────

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from .aggregation import (
    MONTH_LABELS, ZERO, aggregate, category_key, coerce_amount, kind_key, month_key, ranked,
)
from .models import EXPENSE, INCOME
from .windows import admitted

STATEMENT_DISPLAY_LIMIT = 50                             # 🧾 rows shown on screen (exports are unbounded)


@dataclass(frozen=True)
class StatementRow:
    id: object
    date: datetime
    title: str
    type: str                                            # "Income" | "Expense"
    amount: Decimal                                      # expenses negative, income positive


@dataclass
class Report:
    time_series: list = field(default_factory=list)
    categories: list = field(default_factory=list)
    statement: list = field(default_factory=list)
    totals: dict = field(default_factory=dict)

    def latest(self, limit=STATEMENT_DISPLAY_LIMIT):
        """Statement rows for on-screen display."""
        return self.statement[:limit]


# ── Building blocks ─────────────────────────────────────────────────────────

def _only(entries, kind):
    return [e for e in entries if e.kind == kind]


def _totals(entries):
    by_kind = aggregate(entries, kind_key, domain=(INCOME, EXPENSE))
    income, expense = by_kind[INCOME], by_kind[EXPENSE]
    return {"income": income, "expense": expense, "savings": income - expense}


def monthly_series(entries):
    """Twelve calendar-month rows for already-admitted entries (zero-filled)."""
    income = aggregate(_only(entries, INCOME), month_key, domain=MONTH_LABELS)
    expense = aggregate(_only(entries, EXPENSE), month_key, domain=MONTH_LABELS)
    return [
        {
            "period": label,
            "income": income[label],
            "expense": expense[label],
            "savings": income[label] - expense[label],
        }
        for label in MONTH_LABELS
    ]


def category_rows(entries):
    """Expense totals per observed category, biggest first."""
    buckets = aggregate(_only(entries, EXPENSE), category_key)
    return [{"category": name, "total": total} for name, total in ranked(buckets)]


def _statement_title(entry) -> str:
    return entry.title or entry.label or entry.kind


def statement_rows(entries):
    """One row per record (not per bucket), newest occurred_at first, then newest id."""
    rows = [
        StatementRow(
            id=e.id,
            date=e.occurred_at,
            title=_statement_title(e),
            type=e.kind,
            amount=-coerce_amount(e.amount) if e.kind == EXPENSE else coerce_amount(e.amount),
        )
        for e in entries
    ]
    rows.sort(key=lambda r: (r.date, r.id if isinstance(r.id, int) else -1), reverse=True)   # same instant: newest id first
    return rows


# ── Public assemblers ───────────────────────────────────────────────────────

def assemble(entries, window) -> Report:
    """Filter once with `window`, then build every display/export shape."""
    kept = list(admitted(entries, window))
    return Report(
        time_series=monthly_series(kept),
        categories=category_rows(kept),
        statement=statement_rows(kept),
        totals=_totals(kept),
    )


def summary(entries, window):
    """Statistics card / summary endpoint payload (same window semantics)."""
    kept = list(admitted(entries, window))
    totals = _totals(kept)
    return {
        "totalIncome": totals["income"],
        "totalExpense": totals["expense"],
        "savings": totals["savings"],
        "categoryTotals": {row["category"]: row["total"] for row in category_rows(kept)},
    }


def _percent_change(current: Decimal, previous: Decimal) -> Decimal:
    if previous == ZERO:
        return Decimal("100") if current != ZERO else ZERO
    change = (current - previous) / abs(previous) * 100
    return change.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def balance_trend(entries, month_window, span=6):
    """
    `span` monthly balances ending at `month_window` (oldest first), plus the
    selected month's income/expense/balance and its % change vs the month
    before.
    """
    points = []
    current = {"income": ZERO, "expense": ZERO, "savings": ZERO}
    for offset in range(span - 1, -1, -1):
        target = month_window.shift(-offset)
        totals = _totals(list(admitted(entries, target)))
        points.append({"period": target.short_name, "year": target.year, "balance": totals["savings"]})
        if offset == 0:
            current = totals

    previous = points[-2]["balance"] if len(points) > 1 else ZERO
    return {
        "points": points,
        "income": current["income"],
        "expense": current["expense"],
        "balance": current["savings"],
        "change": _percent_change(current["savings"], previous),
    }


def as_chart_data(rows, *keys):
    """Decimal → float copy of `rows` for json_script/Chart.js."""
    out = []
    for row in rows:
        item = dict(row)
        for k in keys:
            item[k] = float(item[k])
        out.append(item)
    return out
