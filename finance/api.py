# finance/api.py
# ─────────────────────────────────────────────────────────────────────────────
# 🔌 JSON endpoints under /api/.
#    • Anonymous callers get 401 JSON (not a login redirect)
#    • Bad request bodies → 400, foreign uid → 403
#    • Store down → 503 {error}, AI service down → 502 {error}
#    Money goes out as JSON numbers (Decimal → float at this edge only).
# ─────────────────────────────────────────────────────────────────────────────

import json
import logging
from functools import wraps

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from . import ai
from .categorize import receipt_labels
from .forms import AmountExtractForm, StatementUploadForm
from .imports import clean_lines, save_lines
from .insights import monthly_insight as build_monthly_insight
from .reports import summary
from .store import StoreUnavailable, fetch_entries
from .views import selected_month
from .windows import DateWindow

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────
def api_login_required(view):
    """Like @login_required, but answers 401 JSON instead of redirecting."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Authentication required."}, status=401)
        return view(request, *args, **kwargs)
    return wrapper


def _error(message, status):
    return JsonResponse({"error": message}, status=status)


def _json_body(request):
    """Decoded JSON object body, or None when it isn't one."""
    try:
        body = json.loads(request.body or b"")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _money(buckets):
    return {key: float(value) for key, value in buckets.items()}


# ─────────────────────────────────────────────────────────────────────────────
# 🧾 Receipt → amount
# ─────────────────────────────────────────────────────────────────────────────
@require_POST
@api_login_required
def amount_extract(request):
    body = _json_body(request)
    form = AmountExtractForm(body or {})
    if body is None or not form.is_valid():
        return _error("Send JSON {base64, mimeType} with an image or PDF.", 400)
    try:
        result = ai.extract_amount(form.cleaned_data["base64"], form.cleaned_data["mimeType"])
    except ai.UnsupportedUpload as exc:
        return _error(str(exc), 400)
    except ai.AIServiceError:
        logger.exception("amount_extract failed owner=%s", request.user.pk)
        return _error("Failed to extract amount.", 502)
    result["source"], result["category"] = receipt_labels(result["source"], result["modelRaw"])   # 💰💸 form prefill
    return JsonResponse(result)


# ─────────────────────────────────────────────────────────────────────────────
# 📄 Statement → transaction lines (nothing saved yet)
# ─────────────────────────────────────────────────────────────────────────────
@require_POST
@api_login_required
def file_transaction(request):
    form = StatementUploadForm(request.POST, request.FILES, max_bytes=settings.FINTRACK["MAX_UPLOAD_BYTES"])
    if not form.is_valid():
        first = next(iter(form.errors.values()))[0]
        return _error(first, 400)

    upload = form.cleaned_data["receipt"]
    try:
        items = ai.extract_statement(upload.name, upload.read(), upload.content_type or "")
    except ai.UnsupportedUpload as exc:
        return _error(str(exc), 400)
    except ai.AIServiceError:
        logger.exception("file_transaction failed owner=%s", request.user.pk)
        return _error("Failed to extract transactions.", 502)

    lines, rejected = clean_lines(items)
    return JsonResponse({"transactions": [f.as_transaction() for f in lines], "skipped": rejected})


# ─────────────────────────────────────────────────────────────────────────────
# 💾 Save reviewed lines (one write per line, no rollback)
# ─────────────────────────────────────────────────────────────────────────────
@require_POST
@api_login_required
def import_transactions(request):
    body = _json_body(request)
    items = (body or {}).get("transactions")
    if not isinstance(items, list):
        return _error("Send JSON {transactions: [...]}.", 400)

    lines, rejected = clean_lines(items)
    outcome = save_lines(request.user, lines)
    return JsonResponse({"saved": outcome.saved, "failed": outcome.failed + rejected})


# ─────────────────────────────────────────────────────────────────────────────
# 💬 Free-form text generation
# ─────────────────────────────────────────────────────────────────────────────
@require_POST
@api_login_required
def insight(request):
    body = _json_body(request)
    text = (body or {}).get("text")
    if not isinstance(text, str) or not text.strip():
        return _error("Send JSON {text}.", 400)
    try:
        content = ai.generate_text(text)
    except ai.AIServiceError:
        logger.exception("insight failed owner=%s", request.user.pk)
        return _error("Failed to generate insight.", 502)
    return JsonResponse({"content": content})


# ─────────────────────────────────────────────────────────────────────────────
# 💡 Dashboard insight card
# ─────────────────────────────────────────────────────────────────────────────
@require_GET
@api_login_required
def monthly_insight(request):
    month = selected_month(request.GET)
    key = {"owner": request.user.pk, "year": month.year, "month": month.month}   # 🔑 echoed back
    try:
        entries = fetch_entries(request.user.pk)
    except StoreUnavailable:
        logger.exception("monthly_insight store failure owner=%s", request.user.pk)
        return JsonResponse({"key": key, "error": "Failed to load your transactions."}, status=503)

    result = build_monthly_insight(entries, month, ai.generate_text, settings.FINTRACK["CURRENCY_SYMBOL"])
    return JsonResponse({"key": key, **result.as_dict()})


# ─────────────────────────────────────────────────────────────────────────────
# 📊 Summary for a date window
# ─────────────────────────────────────────────────────────────────────────────
@require_GET
@api_login_required
def stats_summary(request):
    uid = request.GET.get("uid")
    if not uid:
        return _error("Missing uid.", 400)
    if uid != str(request.user.pk):
        return _error("Forbidden.", 403)

    window = DateWindow.parse(request.GET.get("from"), request.GET.get("to"))   # 🪟 unset side = unbounded
    try:
        entries = fetch_entries(request.user.pk)
    except StoreUnavailable:
        logger.exception("stats_summary store failure owner=%s", request.user.pk)
        return _error("Failed to load your transactions.", 503)

    stats = summary(entries, window)
    return JsonResponse({
        "totalIncome": float(stats["totalIncome"]),
        "totalExpense": float(stats["totalExpense"]),
        "savings": float(stats["savings"]),
        "categoryTotals": _money(stats["categoryTotals"]),
    })
