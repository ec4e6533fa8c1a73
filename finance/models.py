# finance/models.py

# ✅ Import Django utilities for building models
from django.db import models                        # core Django ORM classes
from django.conf import settings                    # lets us reference the current User model safely
from django.core.validators import MinValueValidator # to make sure amounts are positive
from decimal import Decimal                         # accurate money math

# ✅ The two record kinds; also used as the "type" column in exports
INCOME = "Income"
EXPENSE = "Expense"
RECORD_KINDS = (
    (INCOME, "Income"),       # stored value, human-readable label
    (EXPENSE, "Expense"),
)

# ✅ Fixed pick-lists shown in the add forms ("Other"/"Misc" → free text)
INCOME_SOURCES = ("Salary", "Freelancing", "Investments Return", "Business", "Gift", "Other")
EXPENSE_CATEGORIES = (
    "Groceries", "Food", "Travel", "Rent", "Shopping",
    "Bills", "Medical", "Entertainment", "Misc", "Other",
)


class TransactionRecord(models.Model):
    """
    Shared columns of every money event (always a positive amount).
    - occurred_at is the user-chosen date the money is attributed to.
    - recorded_at is when the row was written; only used for "newest first" lists.
    No edit path exists in the app: rows are created once and only removed
    through the admin.
    """

    # ✅ Each record belongs to exactly one user (privacy boundary, never reassigned)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,                 # delete records if the user is removed
        related_name="%(class)s_records",         # user.income_records / user.expense_records
        help_text="Owner of this record",
    )

    # ✅ Always positive (validated by the forms before anything is written)
    amount = models.DecimalField(
        max_digits=12,                            # allows up to 9,999,999,999.99
        decimal_places=2,                         # 2 decimal places for currency
        validators=[MinValueValidator(Decimal("0.01"))],  # must be > 0
        help_text="Positive amount (e.g., 250.00)",
    )

    # ✅ When it happened. NULL = the source date could not be parsed (imports only);
    #    such rows are kept but never counted in any total.
    occurred_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When did this happen?",
    )

    # ✅ Server-assigned creation time (immutable)
    recorded_at = models.DateTimeField(auto_now_add=True)

    # ✅ Optional free text (statement description, receipt note…)
    title = models.CharField(
        max_length=200,
        blank=True,
        help_text="Short description, e.g., 'UPI/ZOMATO/1234'",
    )

    class Meta:
        abstract = True
        ordering = ["-recorded_at", "-id"]        # newest first in lists

    @property
    def label(self) -> str:
        raise NotImplementedError

    def __str__(self):
        # ✅ Show label + kind + amount in admin lists
        return f"{self.label} • {self.kind} • {self.amount}"


class Income(TransactionRecord):
    """Money in. `source` is one of INCOME_SOURCES or the user's own text for 'Other'."""

    kind = INCOME

    source = models.CharField(
        max_length=60,
        help_text="e.g., Salary, Freelancing, Gift",
    )

    class Meta(TransactionRecord.Meta):
        indexes = [models.Index(fields=["owner", "recorded_at"], name="income_owner_recorded_idx")]

    @property
    def label(self) -> str:
        return self.source


class Expense(TransactionRecord):
    """Money out. `category` is one of EXPENSE_CATEGORIES or free text for 'Other'/'Misc'."""

    kind = EXPENSE

    category = models.CharField(
        max_length=60,
        help_text="e.g., Groceries, Rent, Travel",
    )

    class Meta(TransactionRecord.Meta):
        indexes = [models.Index(fields=["owner", "recorded_at"], name="expense_owner_recorded_idx")]

    @property
    def label(self) -> str:
        return self.category


# ✅ Kind → model lookup used by the store and the import paths
MODELS_BY_KIND = {INCOME: Income, EXPENSE: Expense}
