# finance/urls.py
# ✅ URL routes for the Finance pages (HTML + downloads).
#    JSON endpoints are routed in finance/api_urls.py.

from django.urls import path                   # 🔗 path() maps URL patterns to views
from . import views                            # 📦 class-based views from finance/views.py

# 🏷️ Namespace for reverse() and {% url %} lookups: use 'finance:route_name'
app_name = "finance"

urlpatterns = [
    # ───────────── Dashboard ─────────────
    path(
        "dashboard/",                          # 🌐 /dashboard/?month=3&year=2024
        views.DashboardView.as_view(),
        name="dashboard",                      # 🔑 {% url 'finance:dashboard' %}
    ),
    path(
        "dashboard/statement.csv",             # 🌐 Statement_<Month>_<Year>.csv
        views.StatementCsvExportView.as_view(),
        name="statement_csv",
    ),
    path(
        "dashboard/savings.csv",               # 🌐 Savings_Trend_<Year>.csv
        views.SavingsCsvExportView.as_view(),
        name="savings_csv",
    ),

    # ───────────── Manual entry ─────────────
    path(
        "income/",                             # 🌐 /income/ (GET list+form, POST add)
        views.IncomePageView.as_view(),
        name="income",
    ),
    path(
        "expenses/",                           # 🌐 /expenses/
        views.ExpensePageView.as_view(),
        name="expenses",
    ),

    # ───────────── Statistics ─────────────
    path(
        "statistics/",                         # 🌐 /statistics/?from=YYYY-MM-DD&to=YYYY-MM-DD
        views.StatisticsView.as_view(),
        name="statistics",
    ),
    path(
        "statistics/export.xlsx",              # 📥 same window as the page
        views.StatisticsXlsxExportView.as_view(),
        name="statistics_xlsx",
    ),

    # ───────────── Statement upload ─────────────
    path(
        "upload-transactions/",                # 🌐 upload → review → save all
        views.UploadTransactionsView.as_view(),
        name="upload",
    ),
]
