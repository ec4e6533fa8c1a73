# finance/store.py
# ─────────────────────────────────────────────────────────────────────────────
# 🚪 Store-access boundary.
#    Everything downstream (windows, aggregation, reports, insights) works on
#    plain `Entry` values whose dates were normalized exactly once, here.
#    The owner is always an explicit argument; nothing reads request.user.
# ─────────────────────────────────────────────────────────────────────────────

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.db import DatabaseError

from .dates import normalize_datetime
from .models import EXPENSE, INCOME, MODELS_BY_KIND

logger = logging.getLogger(__name__)

ALL_KINDS = (INCOME, EXPENSE)


class StoreUnavailable(Exception):
    """The record store could not be read or written (network, permissions, locks…)."""


@dataclass(frozen=True)
class Entry:
    """One income or expense, ready for the aggregation pipeline."""
    id: object
    kind: str                        # "Income" | "Expense"
    amount: object                   # usually Decimal; raw value for imported documents
    occurred_at: datetime | None     # None → unparseable, excluded from every total
    recorded_at: datetime | None
    label: str                       # income source / expense category
    title: str = ""


def entry_from_record(record) -> Entry:
    """ORM row → Entry."""
    return Entry(
        id=record.pk,
        kind=record.kind,
        amount=record.amount,
        occurred_at=normalize_datetime(record.occurred_at),
        recorded_at=normalize_datetime(record.recorded_at),
        label=record.label,
        title=record.title or "",
    )


def entry_from_document(kind: str, doc, doc_id=None) -> Entry:
    """
    Raw document (e.g. a row of a JSON export) → Entry.

    Income documents carry `source`, expense documents `category`; either may
    also have `title`. Dates may be ISO text, {"seconds": …} wrappers or
    native values.
    """
    label_field = "source" if kind == INCOME else "category"
    label = doc.get(label_field)
    return Entry(
        id=doc_id if doc_id is not None else doc.get("id"),
        kind=kind,
        amount=doc.get("amount"),
        occurred_at=normalize_datetime(doc.get("date")),
        recorded_at=normalize_datetime(doc.get("createdAt")),
        label=label if isinstance(label, str) else "",
        title=doc.get("title") if isinstance(doc.get("title"), str) else "",
    )


def fetch_entries(owner_id, kinds=ALL_KINDS):
    """
    Read every record of `owner_id` for the given kinds (no paging, no date
    filter: windows are applied in Python afterwards).
    """
    entries = []
    try:
        for kind in kinds:
            model = MODELS_BY_KIND[kind]
            entries.extend(entry_from_record(r) for r in model.objects.filter(owner_id=owner_id))
    except DatabaseError as exc:
        raise StoreUnavailable(f"could not read records for owner {owner_id}") from exc
    logger.debug("fetch_entries owner=%s kinds=%s count=%d", owner_id, ",".join(kinds), len(entries))
    return entries


def recent_records(owner_id, kind, limit=None):
    """ORM rows of one kind, newest recorded first (for the list widgets)."""
    model = MODELS_BY_KIND[kind]
    qs = model.objects.filter(owner_id=owner_id).order_by("-recorded_at", "-id")
    try:
        return list(qs[:limit] if limit else qs)
    except DatabaseError as exc:
        raise StoreUnavailable(f"could not list {kind} records for owner {owner_id}") from exc


def create_record(owner, kind, *, amount: Decimal, occurred_at, label: str, title: str = ""):
    """Single independent create; no multi-record atomicity."""
    model = MODELS_BY_KIND[kind]
    label_field = "source" if kind == INCOME else "category"
    try:
        record = model.objects.create(
            owner=owner,
            amount=amount,
            occurred_at=occurred_at,
            title=title,
            **{label_field: label},
        )
    except DatabaseError as exc:
        raise StoreUnavailable(f"could not save {kind} for owner {owner.pk}") from exc
    logger.info("record_created kind=%s owner=%s id=%s amount=%s", kind, owner.pk, record.pk, amount)
    return record
