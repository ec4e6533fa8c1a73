# finance/exports.py
# ─────────────────────────────────────────────────────────────────────────────
# 📥 Downloadable files built in memory from report rows.
#      • statement CSV   (Date,Title,Type,Amount)
#      • savings CSV     (Month,Income,Expenses,Savings)
#      • statistics XLSX (Label, Amount) via openpyxl
# ─────────────────────────────────────────────────────────────────────────────

import csv                                                 # 📄 CSV writing
from decimal import Decimal                                # 💰 exact 2dp formatting
from io import BytesIO, StringIO                           # 🧪 in-memory buffers

from openpyxl import Workbook                              # 📗 spreadsheet export
from openpyxl.styles import Font

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENT)


def statement_csv(rows) -> str:
    """
    One line per StatementRow. Text columns are always quoted (embedded quotes
    doubled); the amount is a bare number with two decimals.
    """
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    buffer.write("Date,Title,Type,Amount\n")               # 🧾 header (unquoted, fixed)
    for row in rows:
        writer.writerow([
            row.date.strftime("%Y-%m-%d"),                 # 📅 ISO date
            row.title,                                     # 📝 description / label
            row.type,                                      # 💳 Income / Expense
            _money(row.amount),                            # 💰 signed, 2dp (Decimal → unquoted)
        ])
    return buffer.getvalue()


def savings_csv(series) -> str:
    """Twelve-month income/expense/savings table."""
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Month", "Income", "Expenses", "Savings"])
    for point in series:
        writer.writerow([
            point["period"],
            f"{_money(point['income'])}",
            f"{_money(point['expense'])}",
            f"{_money(point['savings'])}",
        ])
    return buffer.getvalue()


def statistics_xlsx(summary) -> bytes:
    """Single-sheet workbook: totals first, then one line per expense category."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Statistics"

    ws.append(["Label", "Amount"])
    for cell in ws[1]:
        cell.font = Font(bold=True)

    ws.append(["Total Income", float(_money(summary["totalIncome"]))])
    ws.append(["Total Expense", float(_money(summary["totalExpense"]))])
    ws.append(["Savings", float(_money(summary["savings"]))])
    for category, total in summary["categoryTotals"].items():
        ws.append([category, float(_money(total))])

    for row in ws.iter_rows(min_row=2, min_col=2, max_col=2):
        row[0].number_format = "#,##0.00"

    ws.column_dimensions["A"].width = 24
    ws.column_dimensions["B"].width = 14

    out = BytesIO()
    wb.save(out)
    return out.getvalue()
