# finance/categorize.py
# ─────────────────────────────────────────────────────────────────────────────
# 🏷️ Small text helpers used around extraction:
#    • normalize_amount()          "1,250.50" → "1250.50"
#    • detect_income_source()      raw receipt text → one of INCOME_SOURCES
#    • detect_expense_category()   raw receipt text → one of EXPENSE_CATEGORIES
#    • guess_statement_category()  bank statement description → expense label
#    • receipt_labels()            extracted receipt → (income source, expense category)
# ─────────────────────────────────────────────────────────────────────────────

import re

# 🔢 a comma sitting between two digits is a thousands separator
_THOUSANDS = re.compile(r"(?<=\d),(?=\d)")

# (pattern, label) pairs, first match wins
_INCOME_RULES = (
    (re.compile(r"salary|payslip|ctc|net pay"), "Salary"),
    (re.compile(r"freelance|contract|gig"), "Freelancing"),
    (re.compile(r"dividend|interest|roi|return|capital gain"), "Investments Return"),
    (re.compile(r"business|invoice|sales|revenue"), "Business"),
    (re.compile(r"gift|present|donation"), "Gift"),
)

_EXPENSE_RULES = (
    (re.compile(r"grocery|supermarket|mart"), "Groceries"),
    (re.compile(r"restaurant|food|cafe|dine"), "Food"),
    (re.compile(r"uber|ola|travel|taxi|flight|train|bus"), "Travel"),
    (re.compile(r"rent"), "Rent"),
    (re.compile(r"shopping|store|mall"), "Shopping"),
    (re.compile(r"medical|pharma|hospital|clinic"), "Medical"),
    (re.compile(r"bill|electricity|water|utility|internet"), "Bills"),
    (re.compile(r"movie|entertainment|netflix|spotify|show"), "Entertainment"),
)

_STATEMENT_RULES = (
    (("zomato", "swiggy"), "Food"),
    (("amazon", "flipkart"), "Shopping"),
    (("atm", "withdrawal"), "Cash"),
    (("rent",), "Housing"),
    (("electricity", "bill"), "Utilities"),
)


def normalize_amount(raw) -> str:
    """Strip whitespace and thousands separators from a typed/extracted amount."""
    return _THOUSANDS.sub("", str(raw if raw is not None else "")).strip()


def _first_match(text, rules, default):
    lower = (text or "").lower()
    for pattern, label in rules:
        if pattern.search(lower):
            return label
    return default


def detect_income_source(text: str) -> str:
    return _first_match(text, _INCOME_RULES, "Other")


def detect_expense_category(text: str) -> str:
    return _first_match(text, _EXPENSE_RULES, "Misc")


def guess_statement_category(description: str) -> str:
    lower = (description or "").lower()
    for needles, label in _STATEMENT_RULES:
        if any(n in lower for n in needles):
            return label
    return "Misc"


def receipt_labels(source, text):
    """(income source, expense category) guesses for an extracted receipt."""
    hint = " ".join(part for part in (source, text) if part)
    return source or detect_income_source(hint), detect_expense_category(hint)
