# finance/dates.py
# ─────────────────────────────────────────────────────────────────────────────
# 🗓️ Date normalization for ledger records.
#    Stored dates arrive in three shapes:
#      • ISO-8601 text ("2024-01-15", "2024-01-15T10:30:00Z")
#      • timestamp wrappers (objects with to_datetime()/ToDatetime(), or an
#        epoch "seconds" field, e.g. {"seconds": 1705312800, "nanoseconds": 0})
#      • native datetime / date values
#    Everything is turned into ONE aware UTC datetime here, or None when the
#    value can't be understood. Nothing in this module raises.
# ─────────────────────────────────────────────────────────────────────────────

import enum
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, timezone as dt_timezone

from django.utils.dateparse import parse_date, parse_datetime   # 🧩 Django's ISO parsers

UTC = dt_timezone.utc

# 🔌 method names we accept as "convert me to a native datetime"
_CONVERSION_METHODS = ("to_datetime", "ToDatetime")
# 🔢 field names that carry raw epoch seconds
_SECONDS_FIELDS = ("seconds", "_seconds")
_NANOS_FIELDS = ("nanoseconds", "_nanoseconds", "nanos")


class DateShape(enum.Enum):
    """Tagged variant of the stored date encodings."""
    ISO_TEXT = "iso_text"
    EPOCH_SECONDS = "epoch_seconds"
    NATIVE = "native"
    UNKNOWN = "unknown"


def _field(raw, name):
    """Read `name` from a mapping key or an attribute (None when missing)."""
    if isinstance(raw, Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def _is_number(value) -> bool:
    # bool is an int subclass but never a timestamp
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _conversion_method(raw):
    if isinstance(raw, (str, date, Mapping)):
        return None
    for name in _CONVERSION_METHODS:
        method = getattr(raw, name, None)
        if callable(method):
            return method
    return None


def _epoch_seconds(raw):
    if isinstance(raw, (str, date)):
        return None
    for name in _SECONDS_FIELDS:
        value = _field(raw, name)
        if _is_number(value):
            return value
    return None


def classify(raw) -> DateShape:
    """Tell which encoding a stored date value uses (without parsing it)."""
    if _conversion_method(raw) is not None or _epoch_seconds(raw) is not None:
        return DateShape.EPOCH_SECONDS
    if isinstance(raw, str):
        return DateShape.ISO_TEXT
    if isinstance(raw, date):
        return DateShape.NATIVE
    return DateShape.UNKNOWN


def _as_utc(value):
    """datetime → aware UTC; date → midnight UTC; anything else → None."""
    if isinstance(value, datetime):
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            return value.replace(tzinfo=UTC)           # 🌐 naive values are taken as UTC
        return value.astimezone(UTC)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    return None


def _from_epoch(seconds, raw):
    nanos = 0
    for name in _NANOS_FIELDS:
        value = _field(raw, name)
        if _is_number(value):
            nanos = value
            break
    try:
        return datetime.fromtimestamp(seconds, tz=UTC) + timedelta(microseconds=nanos / 1000)
    except (OverflowError, OSError, ValueError):
        return None


def _from_text(text: str):
    text = text.strip()
    if not text:
        return None
    try:
        parsed = parse_datetime(text)                  # "2024-01-15T10:30:00Z", "2024-01-15 10:30"
        if parsed is None:
            parsed = parse_date(text)                  # "2024-01-15"
    except ValueError:                                 # well-formed but impossible, e.g. "2024-02-31"
        return None
    return _as_utc(parsed)


def normalize_datetime(raw):
    """
    Return an aware UTC datetime for `raw`, or None if it can't be parsed.

    Precedence: conversion method > epoch-seconds field > string parse >
    native datetime/date passthrough. Absent or malformed input never becomes
    the Unix epoch.
    """
    if raw is None:
        return None

    method = _conversion_method(raw)
    if method is not None:
        try:
            return _as_utc(method())
        except Exception:                              # 🛡️ foreign wrapper; any failure means "unparseable"
            return None

    seconds = _epoch_seconds(raw)
    if seconds is not None:
        return _from_epoch(seconds, raw)

    if isinstance(raw, str):
        return _from_text(raw)

    return _as_utc(raw)


def parse_bound(raw, *, end_of_day=False):
    """
    Parse a window bound coming from a query string or form.

    A date-only upper bound ("2024-12-31") covers that whole day when
    `end_of_day` is set. Empty/invalid input → None (unbounded).
    """
    if isinstance(raw, str) and end_of_day:
        text = raw.strip()
        try:
            day = parse_date(text)
        except ValueError:
            return None
        if day is not None:
            return datetime.combine(day, time.max, tzinfo=UTC)
    if isinstance(raw, date) and not isinstance(raw, datetime) and end_of_day:
        return datetime.combine(raw, time.max, tzinfo=UTC)
    return normalize_datetime(raw)
