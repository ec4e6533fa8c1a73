# finance/views.py
# ─────────────────────────────────────────────────────────────────────────────
# ✅ All HTML pages + file downloads of the Finance app live here.
#    This file includes:
#      • Helpers (month/year selection, window parsing, safe record loading)
#      • Dashboard (balance trend, income vs expense, savings, categories,
#        latest transactions; the insight card loads from the JSON API)
#      • Income / Expense pages (add form + list + monthly chart)
#      • Statistics page (+ XLSX export)
#      • Statement upload page (extract → review → save all)
#      • CSV exports (month statement, yearly savings trend)
#    The JSON endpoints live in finance/api.py.
# ─────────────────────────────────────────────────────────────────────────────

# ===== Standard library imports =============================================
import base64                                              # 🧾 receipt bytes for the extractor
import calendar                                            # 🗓️ month names for selectors
import json                                                # 📦 review payload round-trip
import logging                                             # 📝 store failures get logged
from decimal import Decimal                                # 💰 prefilled amount to cents

# ===== Django imports ========================================================
from django.conf import settings                           # ⚙️ FINTRACK settings dict
from django.contrib import messages                        # 🔔 flash messages for user feedback
from django.contrib.auth.mixins import LoginRequiredMixin  # 🔒 require login on class-based views
from django.http import HttpResponse                       # 🌐 return CSV/XLSX downloads
from django.shortcuts import redirect, render              # 🔀 redirects after post actions
from django.urls import reverse                            # 🔗 build URLs safely
from django.utils import timezone                          # 🕒 "today" in the active timezone
from django.views import View                              # 🧱 base class for simple custom views
from django.views.generic import TemplateView              # 📦 page views

# ===== Local app imports =====================================================
from . import ai                                           # 🤖 receipt + statement extraction
from .categorize import receipt_labels
from .forms import CENT, ExpenseForm, IncomeForm, ReceiptUploadForm, StatementUploadForm
from .imports import clean_lines, save_lines, totals_by_kind
from .models import EXPENSE, INCOME
from .exports import savings_csv, statement_csv, statistics_xlsx
from .reports import (
    as_chart_data, assemble, balance_trend, monthly_series, summary,
)
from .store import StoreUnavailable, create_record, fetch_entries, recent_records
from .windows import DateWindow, MonthWindow, admitted

logger = logging.getLogger(__name__)

FIRST_SELECTABLE_YEAR = 2020


# ─────────────────────────────────────────────────────────────────────────────
# 🔎 Helper: read ?month=1..12&year=YYYY (defaults: current month)
# ─────────────────────────────────────────────────────────────────────────────
def _int_or(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def selected_month(params) -> MonthWindow:
    """Month window from the query string; bad/missing values → today’s month."""
    today = timezone.localdate()
    year = _int_or(params.get("year"), today.year)
    month = _int_or(params.get("month"), today.month)
    if not 1 <= month <= 12:
        month = today.month
    if not 1 <= year <= 9999:
        year = today.year
    return MonthWindow(year=year, month=month)


def selected_year(params) -> int:
    year = _int_or(params.get("year"), timezone.localdate().year)
    return year if 1 <= year <= 9999 else timezone.localdate().year


def current_month_bounds():
    """("YYYY-MM-01", "YYYY-MM-<last>") for the statistics page default."""
    today = timezone.localdate()
    last = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1).isoformat(), today.replace(day=last).isoformat()


def currency_symbol() -> str:
    return settings.FINTRACK["CURRENCY_SYMBOL"]


def _year_choices():
    this_year = timezone.localdate().year
    return list(range(FIRST_SELECTABLE_YEAR, this_year + 6))


def _month_choices():
    return [(i, calendar.month_name[i]) for i in range(1, 13)]


# ─────────────────────────────────────────────────────────────────────────────
# 🛡️ Helper: load entries; store failures become an empty page + a notice
# ─────────────────────────────────────────────────────────────────────────────
def load_entries(request, kinds=(INCOME, EXPENSE)):
    try:
        return fetch_entries(request.user.pk, kinds)       # 👤 owner passed explicitly
    except StoreUnavailable:
        logger.exception("load_entries failed owner=%s", request.user.pk)
        messages.error(request, "Failed to load your transactions. Please try again.")
        return []


# ─────────────────────────────────────────────────────────────────────────────
# 📊 DASHBOARD
# ─────────────────────────────────────────────────────────────────────────────
class DashboardView(LoginRequiredMixin, TemplateView):
    """Month/year selector + every dashboard widget, all fed by one record fetch."""
    template_name = "finance/dashboard.html"

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        month = selected_month(self.request.GET)            # 📅 selected month (1-indexed)
        entries = load_entries(self.request)                # 🔍 all records of this user

        year_report = assemble(entries, DateWindow.for_year(month.year))   # 📈 12-month bars/lines
        month_report = assemble(entries, month)                            # 🍩 categories + table
        balance = balance_trend(entries, month)

        ctx.update({
            "currency": currency_symbol(),
            "month": month,
            "months": _month_choices(),
            "years": _year_choices(),
            "balance": balance,                                             # 💳 total balance card
            "balance_chart": as_chart_data(balance["points"], "balance"),
            "year_series": year_report.time_series,
            "year_chart": as_chart_data(year_report.time_series, "income", "expense", "savings"),
            "categories": month_report.categories,
            "category_chart": as_chart_data(month_report.categories, "total"),
            "latest": month_report.latest(settings.FINTRACK["STATEMENT_DISPLAY_LIMIT"]),
            "statement_count": len(month_report.statement),
            "month_totals": month_report.totals,
            "insight_url": reverse("api:monthly_insight"),
        })
        return ctx


# ─────────────────────────────────────────────────────────────────────────────
# 💰 INCOME / 💸 EXPENSE pages (add form + list + monthly chart)
# ─────────────────────────────────────────────────────────────────────────────
class _RecordPageView(LoginRequiredMixin, View):
    """
    GET  → form + newest-first list + this year's monthly totals
    POST → validate; on success write ONE record and redirect (PRG pattern)
    """
    kind = None
    form_class = None
    template_name = None
    url_name = None
    saved_message = "Saved."

    def _render(self, request, form, status=200, receipt_form=None):
        year = selected_year(request.GET)
        try:
            records = recent_records(request.user.pk, self.kind)
        except StoreUnavailable:
            logger.exception("recent_records failed owner=%s kind=%s", request.user.pk, self.kind)
            messages.error(request, "Failed to load your records.")
            records = []
        entries = load_entries(request, kinds=(self.kind,))
        series = monthly_series(list(admitted(entries, DateWindow.for_year(year))))
        key = "income" if self.kind == INCOME else "expense"
        rows = [{"period": p["period"], "total": p[key]} for p in series]
        ctx = {
            "form": form,
            "receipt_form": receipt_form or ReceiptUploadForm(),
            "records": records,
            "year": year,
            "years": _year_choices(),
            "series": rows,
            "chart": as_chart_data(rows, "total"),
            "currency": currency_symbol(),
        }
        return render(request, self.template_name, ctx, status=status)

    def get(self, request, *args, **kwargs):
        return self._render(request, self.form_class())

    def _prefilled_form(self, amount, label):
        """Unbound add-form seeded from a receipt; unknown labels go to “Other…”."""
        initial = {"amount": "" if amount is None else str(Decimal(str(amount)).quantize(CENT))}
        if label in self.form_class.choices:
            initial["label"] = label
        elif label:
            initial["label"] = "Other"
            initial["custom_label"] = label
        return self.form_class(initial=initial)

    def _extract_receipt(self, request):
        receipt_form = ReceiptUploadForm(request.POST, request.FILES,
                                         max_bytes=settings.FINTRACK["MAX_UPLOAD_BYTES"])
        if not receipt_form.is_valid():
            return self._render(request, self.form_class(), status=400, receipt_form=receipt_form)

        upload = receipt_form.cleaned_data["receipt"]
        encoded = base64.b64encode(upload.read()).decode("ascii")
        try:
            result = ai.extract_amount(encoded, upload.content_type or "")
        except ai.UnsupportedUpload as exc:
            messages.error(request, str(exc))
            return self._render(request, self.form_class(), status=400)
        except ai.AIServiceError:
            logger.exception("receipt extraction failed owner=%s kind=%s", request.user.pk, self.kind)
            messages.error(request, "Failed to extract amount.")
            return self._render(request, self.form_class(), status=502)

        source, category = receipt_labels(result["source"], result["modelRaw"])
        label = source if self.kind == INCOME else category
        if result["amount"] is None:
            messages.warning(request, "No amount found on the receipt. Please enter it yourself.")
        else:
            messages.info(request, "Amount extracted. Check the details and save.")
        return self._render(request, self._prefilled_form(result["amount"], label))   # ✍️ nothing saved yet

    def post(self, request, *args, **kwargs):
        if request.POST.get("action") == "extract":
            return self._extract_receipt(request)

        form = self.form_class(request.POST)
        if not form.is_valid():
            messages.error(request, "Please fix the errors below.")   # ⛔ nothing written
            return self._render(request, form, status=400)
        try:
            create_record(request.user, self.kind, **form.record_values())
        except StoreUnavailable:
            logger.exception("create_record failed owner=%s kind=%s", request.user.pk, self.kind)
            messages.error(request, f"Failed to add {self.kind.lower()}.")
            return self._render(request, form, status=503)
        messages.success(request, self.saved_message)
        return redirect(self.url_name)


class IncomePageView(_RecordPageView):
    kind = INCOME
    form_class = IncomeForm
    template_name = "finance/income.html"
    url_name = "finance:income"
    saved_message = "Income saved"


class ExpensePageView(_RecordPageView):
    kind = EXPENSE
    form_class = ExpenseForm
    template_name = "finance/expense.html"
    url_name = "finance:expenses"
    saved_message = "Expense saved"


# ─────────────────────────────────────────────────────────────────────────────
# 📑 STATISTICS (+ XLSX)
# ─────────────────────────────────────────────────────────────────────────────
def _window_params(params):
    default_from, default_to = current_month_bounds()
    date_from = params.get("from") or default_from
    date_to = params.get("to") or default_to
    return date_from, date_to


class StatisticsView(LoginRequiredMixin, TemplateView):
    """Date-range totals + spending by category."""
    template_name = "finance/statistics.html"

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        date_from, date_to = _window_params(self.request.GET)
        window = DateWindow.parse(date_from, date_to)
        stats = summary(load_entries(self.request), window)
        ctx.update({
            "currency": currency_symbol(),
            "date_from": date_from,
            "date_to": date_to,
            "stats": stats,
            "has_data": bool(stats["totalIncome"] or stats["totalExpense"]),
        })
        return ctx


class StatisticsXlsxExportView(LoginRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        date_from, date_to = _window_params(request.GET)
        stats = summary(load_entries(request), DateWindow.parse(date_from, date_to))
        response = HttpResponse(
            statistics_xlsx(stats),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        response["Content-Disposition"] = 'attachment; filename="fintrack-statistics.xlsx"'
        return response


# ─────────────────────────────────────────────────────────────────────────────
# 📥 CSV EXPORTS
# ─────────────────────────────────────────────────────────────────────────────
class StatementCsvExportView(LoginRequiredMixin, View):
    """Full statement for the selected month (no 50-row cap)."""
    def get(self, request, *args, **kwargs):
        month = selected_month(request.GET)
        report = assemble(load_entries(request), month)
        filename = f"Statement_{month.name}_{month.year}.csv"
        response = HttpResponse(statement_csv(report.statement), content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response


class SavingsCsvExportView(LoginRequiredMixin, View):
    """Month,Income,Expenses,Savings for the selected year."""
    def get(self, request, *args, **kwargs):
        year = selected_year(request.GET)
        report = assemble(load_entries(request), DateWindow.for_year(year))
        response = HttpResponse(savings_csv(report.time_series), content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="Savings_Trend_{year}.csv"'
        return response


# ─────────────────────────────────────────────────────────────────────────────
# 📤 STATEMENT UPLOAD (extract → review → save all)
# ─────────────────────────────────────────────────────────────────────────────
class UploadTransactionsView(LoginRequiredMixin, View):
    template_name = "finance/upload.html"

    def _render(self, request, form, lines=(), status=200):
        payload = json.dumps([f.as_transaction() for f in lines])
        ctx = {
            "form": form,
            "transactions": [f.as_transaction() for f in lines],
            "totals": totals_by_kind(lines),
            "payload": payload,
            "currency": currency_symbol(),
        }
        return render(request, self.template_name, ctx, status=status)

    def get(self, request, *args, **kwargs):
        return self._render(request, StatementUploadForm())

    def post(self, request, *args, **kwargs):
        if request.POST.get("action") == "save":
            return self._save(request)

        form = StatementUploadForm(request.POST, request.FILES, max_bytes=settings.FINTRACK["MAX_UPLOAD_BYTES"])
        if not form.is_valid():
            return self._render(request, form, status=400)

        upload = form.cleaned_data["receipt"]
        try:
            items = ai.extract_statement(upload.name, upload.read(), upload.content_type or "")
        except (ai.AIServiceError, ai.UnsupportedUpload):
            logger.exception("statement extraction failed owner=%s", request.user.pk)
            messages.error(request, "Failed to extract transactions.")
            return self._render(request, StatementUploadForm(), status=502)

        lines, rejected = clean_lines(items)
        if rejected:
            messages.warning(request, f"{rejected} line(s) could not be read and were skipped.")
        if not lines:
            messages.info(request, "No transactions extracted yet. Upload a statement to begin.")
        return self._render(request, StatementUploadForm(), lines)

    def _save(self, request):
        try:
            items = json.loads(request.POST.get("payload") or "[]")
        except json.JSONDecodeError:
            items = []
        lines, _ = clean_lines(items if isinstance(items, list) else [])
        if not lines:
            messages.error(request, "Nothing to save.")
            return redirect("finance:upload")
        outcome = save_lines(request.user, lines)
        if outcome.failed:
            messages.error(request, f"Saved {outcome.saved}, failed {outcome.failed}.")
        else:
            messages.success(request, "Transactions saved successfully.")
        return redirect("finance:upload")


