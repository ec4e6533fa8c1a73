# finance/api_urls.py
# ✅ JSON endpoints, mounted under /api/ by fintrack/urls.py.

from django.urls import path
from . import api

# 🏷️ 'api:route_name'
app_name = "api"

urlpatterns = [
    path("amount-extract", api.amount_extract, name="amount_extract"),             # 🧾 receipt → amount
    path("file-transaction", api.file_transaction, name="file_transaction"),       # 📄 statement → lines
    path("transactions/import", api.import_transactions, name="import_transactions"),  # 💾 save reviewed lines
    path("insight", api.insight, name="insight"),                                  # 💬 free prompt → text
    path("insight/monthly", api.monthly_insight, name="monthly_insight"),          # 💡 dashboard card
    path("stats/summary", api.stats_summary, name="stats_summary"),                # 📊 totals for a window
]
