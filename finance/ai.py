# finance/ai.py
# ─────────────────────────────────────────────────────────────────────────────
# 🤖 Thin wrapper around the OpenAI Responses API. Three calls:
#    • generate_text()      free-form text for the insight card and /api/insight
#    • extract_amount()     total (plus an income-source hint) from one receipt
#    • extract_statement()  every transaction line of a bank statement
#                           (PDF, image, CSV or XLSX)
#    Any failure (no API key, SDK/network error, empty or non-JSON output)
#    surfaces as AIServiceError. Nothing retries; callers decide what to show.
# ─────────────────────────────────────────────────────────────────────────────

import base64
import json
import logging
import time
from io import BytesIO

from django.conf import settings
from openai import OpenAI, OpenAIError                    # 🔌 module-level so tests can swap it
from openpyxl import load_workbook                        # 📊 XLSX statements → text

logger = logging.getLogger(__name__)

# 🧾 system instructions per call
_INSIGHT_INSTRUCTIONS = "You are a helpful AI financial assistant. Answer only with what the user asks for."

_AMOUNT_INSTRUCTIONS = (
    "You read receipts, invoices, payslips and payment screenshots. "
    "Return ONLY a JSON object with the keys: "
    '"amount" (number, the final total paid or received, null if not visible), '
    '"source" (string or null, what kind of income/expense this is, e.g. Salary, Groceries), '
    '"text" (string, a one-line summary of the document with merchant/employer names).'
)

_STATEMENT_INSTRUCTIONS = (
    "You extract transactions from bank statements. "
    'Return ONLY a JSON object {"transactions": [...]} where every item has: '
    '"date" (YYYY-MM-DD), "description" (string), "amount" (positive number), '
    '"type" ("CR" for money in, "DR" for money out) and '
    '"classifiedAs" ("Income" for CR, "Expense" for DR). '
    "Skip opening/closing balance lines."
)

_TEXT_MIME_TYPES = {"text/csv", "text/plain", "application/csv"}
_XLSX_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────
class AIServiceError(Exception):
    """The text-generation / extraction service could not produce a usable answer."""


class UnsupportedUpload(ValueError):
    """The uploaded file type can't be sent to the extraction model."""


# ─────────────────────────────────────────────────────────────────────────────
# Client + request helpers
# ─────────────────────────────────────────────────────────────────────────────
def _config(name):
    return settings.FINTRACK[name]


def create_client() -> OpenAI:
    api_key = _config("OPENAI_API_KEY")
    if not api_key:
        raise AIServiceError("OPENAI_API_KEY is not configured")
    return OpenAI(api_key=api_key)


def _response_text(resp):
    """output_text if set, else output[0].content[0].text."""
    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text
    try:
        text = resp.output[0].content[0].text
    except (AttributeError, IndexError, TypeError):
        text = None
    if isinstance(text, str) and text.strip():
        return text
    raise AIServiceError("model returned no text")


def _decode_json(text):
    """Parse a JSON object, tolerating a surrounding ```json fence."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AIServiceError("model output is not valid JSON") from e
    if not isinstance(decoded, dict):
        raise AIServiceError("model output is not a JSON object")
    return decoded


def _ask(op, instructions, content, client=None):
    client = client or create_client()
    t0 = time.perf_counter()
    try:
        resp = client.responses.create(
            model=_config("OPENAI_MODEL"),
            instructions=instructions,
            input=[{"role": "user", "content": content}],
        )
    except OpenAIError as e:
        logger.warning("ai:%s failed error=%s", op, e)
        raise AIServiceError(f"{op} request failed") from e
    text = _response_text(resp)
    logger.info("ai:%s done latency_ms=%.2f chars=%d", op, (time.perf_counter() - t0) * 1000.0, len(text))
    return text


def _data_url(mime_type: str, base64_data: str) -> str:
    return f"data:{mime_type};base64,{base64_data}"


def _binary_part(base64_data, mime_type, filename="upload"):
    mime_type = mime_type or ""
    if mime_type.startswith("image/"):
        return {"type": "input_image", "image_url": _data_url(mime_type, base64_data)}
    if mime_type == "application/pdf":
        return {"type": "input_file", "filename": filename, "file_data": _data_url(mime_type, base64_data)}
    raise UnsupportedUpload(f"unsupported file type: {mime_type or 'unknown'}")


# ─────────────────────────────────────────────────────────────────────────────
# Public calls
# ─────────────────────────────────────────────────────────────────────────────


def generate_text(prompt, *, client=None):
    """Send the prompt as-is and return the model's text."""
    return _ask("generate_text", _INSIGHT_INSTRUCTIONS, prompt, client)


def extract_amount(base64_data, mime_type, *, client=None):
    """-> {"amount": float | None, "source": str | None, "modelRaw": str}"""
    content = [
        {"type": "input_text", "text": "Extract the total amount from this document."},
        _binary_part(base64_data, mime_type),
    ]
    raw = _ask("extract_amount", _AMOUNT_INSTRUCTIONS, content, client)
    decoded = _decode_json(raw)

    amount = decoded.get("amount")
    if isinstance(amount, str):
        try:
            amount = float(amount.replace(",", ""))
        except ValueError:
            amount = None
    if not isinstance(amount, (int, float)) or isinstance(amount, bool):
        amount = None

    source = decoded.get("source")
    return {
        "amount": amount,
        "source": source if isinstance(source, str) and source.strip() else None,
        "modelRaw": str(decoded.get("text") or raw),
    }


# ─────────────────────────────────────────────────────────────────────────────
# 📄 Statements
# ─────────────────────────────────────────────────────────────────────────────
def _xlsx_as_text(data: bytes) -> str:
    try:
        wb = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except Exception as e:  # noqa: BLE001  openpyxl has no single error type
        raise UnsupportedUpload("could not read spreadsheet") from e
    lines = []
    for ws in wb.worksheets:
        for row in ws.iter_rows(values_only=True):
            cells = ["" if v is None else str(v) for v in row]
            if any(cells):
                lines.append("\t".join(cells))
    wb.close()
    return "\n".join(lines)


def statement_content(filename, data, mime_type):
    """Build the model input for a statement upload (text for CSV/XLSX, inline file otherwise)."""
    lower = (filename or "").lower()
    prompt = {"type": "input_text", "text": "Extract every transaction from this statement."}
    if mime_type in _TEXT_MIME_TYPES or lower.endswith(".csv"):
        body = data.decode("utf-8", errors="replace")
        return [prompt, {"type": "input_text", "text": body}]
    if mime_type in _XLSX_MIME_TYPES or lower.endswith(".xlsx"):
        return [prompt, {"type": "input_text", "text": _xlsx_as_text(data)}]
    encoded = base64.b64encode(data).decode("ascii")
    return [prompt, _binary_part(encoded, mime_type, filename or "statement")]


def extract_statement(filename, data, mime_type, *, client=None):
    """Return the raw transaction dicts the model found (validated by the caller)."""
    content = statement_content(filename, data, mime_type)
    decoded = _decode_json(_ask("extract_statement", _STATEMENT_INSTRUCTIONS, content, client))
    items = decoded.get("transactions")
    if not isinstance(items, list):
        raise AIServiceError("model output has no 'transactions' list")
    return [item for item in items if isinstance(item, dict)]
