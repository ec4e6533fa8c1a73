# finance/forms.py
# ─────────────────────────────────────────────────────────────────────────────
# All the forms for the Finance app live here.
# This file defines:
#   1) AmountField – text input that accepts "1,250.50" and insists on > 0
#   2) IncomeForm / ExpenseForm – manual entry with the "Other…" free-text path
#   3) StatementLineForm – one extracted bank-statement line (upload review / import)
#   4) AmountExtractForm – the JSON body of /api/amount-extract
#   5) ReceiptUploadForm – receipt file that pre-fills the income/expense form
# Nothing is written to the database from an invalid form.
# ─────────────────────────────────────────────────────────────────────────────

from datetime import datetime, time                      # ← combine picked date with midnight
from decimal import Decimal, InvalidOperation            # ← exact money parsing

from django import forms                                  # ← Django form building blocks
from django.core.exceptions import ValidationError        # ← To raise user-friendly errors
from django.utils import timezone                         # ← aware datetimes

from .categorize import guess_statement_category, normalize_amount
from .dates import normalize_datetime
from .models import EXPENSE, EXPENSE_CATEGORIES, INCOME, INCOME_SOURCES

MAX_AMOUNT = Decimal("9999999999.99")                     # ← fits DecimalField(12, 2)
CENT = Decimal("0.01")


# ─────────────────────────────────────────────────────────────────────────────
# Helper: normalize a free-text label (trim extra spaces)
# ─────────────────────────────────────────────────────────────────────────────
def _norm_name(name: str) -> str:
    """Return a neatly spaced version of the name (no double spaces)."""
    name = (name or "").strip()
    return " ".join(name.split())


def parse_positive_amount(raw) -> Decimal:
    """
    "12.50" → Decimal("12.50"). Raises ValidationError for blanks, junk,
    zero, negatives and sub-cent precision.
    """
    text = normalize_amount(raw)
    if not text:
        raise ValidationError("Amount is required.")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValidationError("Enter a valid amount > 0")
    if not value.is_finite() or value <= 0:
        raise ValidationError("Enter a valid amount > 0")
    if value > MAX_AMOUNT:
        raise ValidationError("Amount is too large.")
    if value != value.quantize(CENT):
        raise ValidationError("Use at most two decimal places.")
    return value.quantize(CENT)


# ─────────────────────────────────────────────────────────────────────────────
# 1) AmountField
# ─────────────────────────────────────────────────────────────────────────────
class AmountField(forms.CharField):
    """CharField on the wire (so "1,250" survives), Decimal once cleaned."""

    def __init__(self, **kwargs):
        kwargs.setdefault("widget", forms.TextInput(attrs={"inputmode": "decimal", "placeholder": "0.00"}))
        super().__init__(**kwargs)

    def to_python(self, value):
        value = super().to_python(value)
        if value in self.empty_values:
            return None                                     # ← let `required` produce the message
        return parse_positive_amount(value)


# ─────────────────────────────────────────────────────────────────────────────
# 2) Manual entry forms
# ─────────────────────────────────────────────────────────────────────────────
class _RecordForm(forms.Form):
    """
    Shared fields/validation for IncomeForm and ExpenseForm.
    Subclasses set:
      • kind          → INCOME / EXPENSE
      • choices       → fixed pick-list
      • custom_labels → choices that require the free-text box
    """

    kind = None
    choices = ()
    custom_labels = ("Other",)
    label_name = "label"

    amount = AmountField(error_messages={"required": "All fields are required."})
    label = forms.ChoiceField(choices=())                  # ← filled in __init__
    custom_label = forms.CharField(
        required=False,                                     # ← only required when “Other…” chosen
        max_length=60,
        widget=forms.TextInput(attrs={"placeholder": "Enter your own"}),
    )
    occurred_on = forms.DateField(
        label="Date",
        widget=forms.DateInput(attrs={"type": "date"}),     # browser date picker
        error_messages={"required": "All fields are required."},
    )
    title = forms.CharField(required=False, max_length=200)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["label"].choices = [("", "Select…")] + [(c, c) for c in self.choices]
        self.fields["label"].label = self.label_name.capitalize()
        self.fields["label"].error_messages["required"] = "All fields are required."
        self.fields["custom_label"].label = f"Custom {self.label_name}"
        if "occurred_on" not in self.initial:
            self.initial["occurred_on"] = timezone.localdate()   # default: today

    def clean(self):
        """If “Other…” (or Misc for expenses) is picked, the custom text becomes the label."""
        cleaned = super().clean()
        picked = cleaned.get("label")
        custom = _norm_name(cleaned.get("custom_label"))

        if picked in self.custom_labels:
            if not custom:
                self.add_error("custom_label", f"Please enter a custom {self.label_name}.")
            else:
                cleaned["final_label"] = custom
        elif picked:
            cleaned["final_label"] = picked
        return cleaned

    def record_values(self):
        """Keyword arguments for store.create_record() (valid forms only)."""
        day = self.cleaned_data["occurred_on"]
        return {
            "amount": self.cleaned_data["amount"],
            "occurred_at": timezone.make_aware(datetime.combine(day, time.min)),
            "label": self.cleaned_data["final_label"],
            "title": _norm_name(self.cleaned_data.get("title")),
        }


class IncomeForm(_RecordForm):
    kind = INCOME
    choices = INCOME_SOURCES
    custom_labels = ("Other",)
    label_name = "source"


class ExpenseForm(_RecordForm):
    kind = EXPENSE
    choices = EXPENSE_CATEGORIES
    custom_labels = ("Other", "Misc")
    label_name = "category"


# ─────────────────────────────────────────────────────────────────────────────
# 3) StatementLineForm
# ─────────────────────────────────────────────────────────────────────────────
class StatementLineForm(forms.Form):
    """
    One line as returned by the statement extractor:
      {date, description, amount, type: CR|DR, classifiedAs: Income|Expense}
    Amount sign is dropped (records are always positive).
    """

    date = forms.CharField(required=False)
    description = forms.CharField(required=False, max_length=200)
    amount = forms.CharField()
    type = forms.ChoiceField(choices=[("CR", "Credit"), ("DR", "Debit")])
    classifiedAs = forms.ChoiceField(choices=[(INCOME, INCOME), (EXPENSE, EXPENSE)])

    def clean_amount(self):
        raw = normalize_amount(self.cleaned_data.get("amount")).lstrip("+-")
        return parse_positive_amount(raw)

    def clean_description(self):
        return _norm_name(self.cleaned_data.get("description"))

    def as_transaction(self):
        """JSON-friendly dict for the upload review table."""
        data = self.cleaned_data
        return {
            "date": data["date"],
            "description": data["description"],
            "amount": float(data["amount"]),
            "type": data["type"],
            "classifiedAs": data["classifiedAs"],
        }

    def record_values(self):
        """
        Keyword arguments for store.create_record().
        Unparseable statement dates fall back to "now" (the upload moment).
        """
        data = self.cleaned_data
        kind = data["classifiedAs"]
        occurred_at = normalize_datetime(data["date"]) or timezone.now()
        label = "Salary" if kind == INCOME else guess_statement_category(data["description"])
        return {
            "kind": kind,
            "amount": data["amount"],
            "occurred_at": occurred_at,
            "label": label,
            "title": data["description"],
        }


# ─────────────────────────────────────────────────────────────────────────────
# 4) Upload forms
# ─────────────────────────────────────────────────────────────────────────────
class AmountExtractForm(forms.Form):
    """Body of POST /api/amount-extract: {base64, mimeType}."""

    base64 = forms.CharField()
    mimeType = forms.CharField(max_length=100)

    def clean_mimeType(self):
        mime = self.cleaned_data["mimeType"].strip().lower()
        if not (mime.startswith("image/") or mime == "application/pdf"):
            raise ValidationError("Only images and PDFs are supported.")
        return mime


class StatementUploadForm(forms.Form):
    """Multipart upload for POST /api/file-transaction (field name: receipt)."""

    ALLOWED_SUFFIXES = (".pdf", ".csv", ".xlsx", ".png", ".jpg", ".jpeg", ".webp")

    receipt = forms.FileField()

    def __init__(self, *args, max_bytes=None, **kwargs):
        self.max_bytes = max_bytes
        super().__init__(*args, **kwargs)

    def clean_receipt(self):
        upload = self.cleaned_data["receipt"]
        name = (upload.name or "").lower()
        if not name.endswith(self.ALLOWED_SUFFIXES):
            raise ValidationError("Upload a PDF, CSV, XLSX or image file.")
        if self.max_bytes and upload.size > self.max_bytes:
            raise ValidationError("File is too large.")
        return upload


class ReceiptUploadForm(forms.Form):
    """Receipt image/PDF on the income & expense pages (amount prefill)."""

    ALLOWED_SUFFIXES = (".pdf", ".png", ".jpg", ".jpeg", ".webp")

    receipt = forms.FileField(label="Receipt (image or PDF)")

    def __init__(self, *args, max_bytes=None, **kwargs):
        self.max_bytes = max_bytes
        super().__init__(*args, **kwargs)

    def clean_receipt(self):
        upload = self.cleaned_data["receipt"]
        if not (upload.name or "").lower().endswith(self.ALLOWED_SUFFIXES):
            raise ValidationError("Upload an image or a PDF.")
        if self.max_bytes and upload.size > self.max_bytes:
            raise ValidationError("File is too large.")
        return upload
