# finance/aggregation.py
# ─────────────────────────────────────────────────────────────────────────────
# 🧮 The one grouping/summing routine every dashboard widget uses.
#    aggregate(entries, key, domain) → {bucket_key: Decimal total}
#      • keys listed in `domain` are always present (zero-filled, domain order)
#      • other keys only appear once something was observed for them
#      • amounts are summed as Decimal; junk amounts count as 0
# ─────────────────────────────────────────────────────────────────────────────

from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")

# 📅 Fixed bucket domain for calendar-month series
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

UNCATEGORIZED = "Uncategorized"


def coerce_amount(value) -> Decimal:
    """Turn a stored amount into a Decimal; missing/non-numeric → 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1 and not 0.1000000000000000055…
        value = str(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
        return parsed if parsed.is_finite() else ZERO
    return ZERO


# ── Bucketing keys ──────────────────────────────────────────────────────────

def month_key(entry) -> str:
    return MONTH_LABELS[entry.occurred_at.month - 1]


def category_key(entry) -> str:
    return entry.label or UNCATEGORIZED


def kind_key(entry) -> str:
    return entry.kind


# ── Aggregation ─────────────────────────────────────────────────────────────

def aggregate(entries, key, domain=()):
    """
    Sum `entry.amount` per `key(entry)`.

    `entries` must already be admitted by a window (every occurred_at set).
    """
    buckets = {k: ZERO for k in domain}
    for entry in entries:
        bucket = key(entry)
        buckets[bucket] = buckets.get(bucket, ZERO) + coerce_amount(entry.amount)
    return buckets


def ranked(buckets):
    """(key, total) pairs, biggest total first; equal totals by key."""
    return sorted(buckets.items(), key=lambda item: (-item[1], item[0]))
