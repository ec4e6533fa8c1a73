# finance/insights.py
# ─────────────────────────────────────────────────────────────────────────────
# 💡 Monthly "AI insight" card.
#    1) month totals (income / expense / savings) from the shared aggregator
#    2) fixed prompt asking for 2–3 markdown bullets
#    3) text generation (finance.ai.generate_text, injectable for tests)
#    4) keep only bullet lines, max 3
#    Every failure ends in an EMPTY or ERROR result; nothing raises, nothing retries.
# ─────────────────────────────────────────────────────────────────────────────

import enum
import logging
from dataclasses import dataclass, field

from .ai import AIServiceError
from .aggregation import kind_key, aggregate
from .models import EXPENSE, INCOME
from .windows import admitted

logger = logging.getLogger(__name__)

MAX_BULLETS = 3
BULLET_MARKERS = ("*", "-", "•")

NO_INSIGHT_MESSAGE = "No insights available for this period. Add more transactions to generate insights."
FAILED_MESSAGE = "Failed to analyze your data. Please try again later."

PROMPT_TEMPLATE = """You are a helpful AI financial assistant.
Analyze this user's monthly finance summary and return exactly 2–3 concise bullet points:
* One insight about income
* One insight about spending
* One improvement tip (optional)
Respond ONLY with bullet points in markdown format using "*".
Month: {month_name} {year}
Total Income: {currency}{income:.2f}
Total Expense: {currency}{expense:.2f}
Savings: {currency}{savings:.2f}"""


class InsightStatus(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class InsightResult:
    status: InsightStatus
    bullets: list = field(default_factory=list)
    message: str = ""

    def as_dict(self):
        return {"status": self.status.value, "bullets": list(self.bullets), "message": self.message}


def month_totals(entries, month_window):
    """Income / expense / savings for one month (month mode)."""
    buckets = aggregate(admitted(entries, month_window), kind_key, domain=(INCOME, EXPENSE))
    return {
        "income": buckets[INCOME],
        "expense": buckets[EXPENSE],
        "savings": buckets[INCOME] - buckets[EXPENSE],
    }


def build_prompt(month_window, totals, currency="") -> str:
    return PROMPT_TEMPLATE.format(
        month_name=month_window.name,
        year=month_window.year,
        currency=currency,
        income=totals["income"],
        expense=totals["expense"],
        savings=totals["savings"],
    )


def parse_bullets(content) -> list:
    """Keep lines that start with a bullet marker, minus that one marker; at most 3."""
    bullets = []
    for line in (content or "").splitlines():
        stripped = line.strip()
        if not stripped.startswith(BULLET_MARKERS):
            continue
        text = stripped[1:].strip()                       # one marker only
        if text:
            bullets.append(text)
    return bullets[:MAX_BULLETS]


def request_insight(prompt, generate) -> InsightResult:
    """
    Call `generate(prompt)` once and map the outcome to a display state.
    `generate` is normally finance.ai.generate_text.
    """
    try:
        content = generate(prompt)
    except AIServiceError:
        logger.exception("insight generation failed")
        return InsightResult(InsightStatus.ERROR, message=FAILED_MESSAGE)

    if not isinstance(content, str) or not content.strip():
        return InsightResult(InsightStatus.EMPTY, message=NO_INSIGHT_MESSAGE)

    bullets = parse_bullets(content)
    if not bullets:
        return InsightResult(InsightStatus.EMPTY, message=NO_INSIGHT_MESSAGE)
    return InsightResult(InsightStatus.SUCCESS, bullets=bullets)


def monthly_insight(entries, month_window, generate, currency="") -> InsightResult:
    totals = month_totals(entries, month_window)
    return request_insight(build_prompt(month_window, totals, currency), generate)
