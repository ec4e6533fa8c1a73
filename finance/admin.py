# finance/admin.py
# ✅ Register the finance records (Income, Expense).
#    The admin is the only place records can be edited or deleted.

from django.contrib import admin                          # ← Django admin site
from .models import Expense, Income                       # ← finance models only


class _RecordAdmin(admin.ModelAdmin):
    date_hierarchy = "occurred_at"                        # drill down by attribution date
    readonly_fields = ("recorded_at",)                    # server-assigned, never edited
    list_select_related = ("owner",)


@admin.register(Income)
class IncomeAdmin(_RecordAdmin):
    list_display  = ("occurred_at", "source", "amount", "title", "owner", "recorded_at")
    list_filter   = ("source", "occurred_at")             # sidebar filter
    search_fields = ("source", "title", "owner__username")


@admin.register(Expense)
class ExpenseAdmin(_RecordAdmin):
    list_display  = ("occurred_at", "category", "amount", "title", "owner", "recorded_at")
    list_filter   = ("category", "occurred_at")
    search_fields = ("category", "title", "owner__username")
