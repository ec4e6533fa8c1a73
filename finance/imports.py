# finance/imports.py
# ─────────────────────────────────────────────────────────────────────────────
# 📦 Bulk statement import helpers shared by the upload page and the JSON API.
#    Each line is validated with StatementLineForm and written on its own:
#    a failure half-way leaves the earlier lines committed.
# ─────────────────────────────────────────────────────────────────────────────

import logging
from dataclasses import dataclass, field

from .forms import StatementLineForm
from .store import StoreUnavailable, create_record

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    saved: int = 0
    failed: int = 0
    errors: list = field(default_factory=list)


def clean_lines(items):
    """Validate raw extractor dicts → (valid forms, number of rejected lines)."""
    valid, rejected = [], 0
    for item in items or []:
        form = StatementLineForm(data=item if isinstance(item, dict) else {})
        if form.is_valid():
            valid.append(form)
        else:
            rejected += 1
            logger.info("statement_line_rejected errors=%s", form.errors.as_json())
    return valid, rejected


def totals_by_kind(forms):
    """Income / Expense sums for the review table header."""
    out = {"Income": 0.0, "Expense": 0.0}
    for form in forms:
        out[form.cleaned_data["classifiedAs"]] += float(form.cleaned_data["amount"])
    return out


def save_lines(owner, forms) -> ImportOutcome:
    """Write every cleaned line as its own record; keep going past failures."""
    outcome = ImportOutcome()
    for index, form in enumerate(forms):
        values = form.record_values()
        try:
            create_record(owner, values.pop("kind"), **values)
        except StoreUnavailable as exc:
            logger.exception("statement_line_save_failed index=%d", index)
            outcome.failed += 1
            outcome.errors.append(f"line {index + 1}: {exc}")
        else:
            outcome.saved += 1
    logger.info("statement_import owner=%s saved=%d failed=%d", owner.pk, outcome.saved, outcome.failed)
    return outcome
