from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ai_services.llm import LLMClient
from common.dates import local_now, month_key
from expenses.expense_model import Expense

logger = logging.getLogger(__name__)


RECENT_LINES = 20

MONTH_SPEND_PATTERN = re.compile(r"(spend|spent).*month|month.*spend|how much.*month")
DAILY_PATTERN = re.compile(r"average|daily|per day")
CATEGORY_PATTERN = re.compile(r"category|categories|biggest|highest|most|where.*spend")

HELP_TEXT = (
    "👋 I'm your AI Financial Assistant! Try asking:\n\n"
    '💰 "How much did I spend this month?"\n'
    '📊 "What\'s my biggest category?"\n'
    '📈 "What\'s my average daily spending?"\n'
    '💡 "Any budget tips?"'
)


@dataclass
class SpendingContext:
    now: datetime
    total: float = 0.0
    this_month_total: float = 0.0
    this_month_count: int = 0
    category_totals: Dict[str, float] = field(default_factory=dict)
    recent_lines: List[str] = field(default_factory=list)

    @property
    def top_category(self) -> Optional[tuple[str, float]]:
        if not self.category_totals:
            return None
        return max(self.category_totals.items(), key=lambda item: item[1])


def build_spending_context(expenses: Sequence[Expense], now: Optional[datetime] = None) -> SpendingContext:
    """Summarize newest-first expenses into the figures the assistant talks about."""
    now = now or local_now()
    current = month_key(now)
    totals: Dict[str, float] = defaultdict(float)
    ctx = SpendingContext(now=now)
    for e in expenses:
        ctx.total += e.amount
        totals[e.category] += e.amount
        if month_key(e.date) == current:
            ctx.this_month_total += e.amount
            ctx.this_month_count += 1
    ctx.category_totals = dict(totals)
    ctx.recent_lines = [
        f"{e.date:%m/%d/%Y}: ${e.amount:.2f} - {e.description} ({e.category})" for e in expenses[:RECENT_LINES]
    ]
    return ctx


def build_chat_prompt(ctx: SpendingContext, message: str) -> str:
    breakdown = ", ".join(f"{cat}: ${amt:.2f}" for cat, amt in ctx.category_totals.items())
    recent = "\n".join(ctx.recent_lines)
    return (
        "You are a helpful financial assistant. The user has the following expense data:\n\n"
        f"Total expenses: ${ctx.total:.2f}\n"
        f"This month's expenses: ${ctx.this_month_total:.2f}\n"
        f"Categories breakdown: {breakdown}\n\n"
        "Recent transactions:\n"
        f"{recent}\n\n"
        f"User's question: {message}\n\n"
        "Provide a helpful, friendly, and concise response. Use emojis where appropriate. "
        "Keep your response under 200 words."
    )


def rule_based_reply(ctx: SpendingContext, message: str) -> str:
    text = message.lower()
    if MONTH_SPEND_PATTERN.search(text):
        return f"💰 This month you've spent ${ctx.this_month_total:.2f} across {ctx.this_month_count} transactions."
    if DAILY_PATTERN.search(text):
        days = ctx.now.day
        return f"📊 Your average daily spending this month is ${ctx.this_month_total / days:.2f} (based on {days} days)."
    if CATEGORY_PATTERN.search(text):
        top = ctx.top_category
        if top is None:
            return "📊 You haven't recorded any spending yet, so there's no top category."
        return f'📊 Your top spending category is "{top[0]}" with ${top[1]:.2f} spent.'
    return HELP_TEXT


class ChatAssistant:
    def __init__(self, llm: Optional[LLMClient] = None) -> None:
        self.llm = llm

    async def reply(self, expenses: Sequence[Expense], message: str, now: Optional[datetime] = None) -> str:
        ctx = build_spending_context(expenses, now)
        if self.llm is not None:
            try:
                answer = await self.llm.generate(build_chat_prompt(ctx, message))
            except Exception:
                logger.exception("LLM chat failed; answering with rules")
            else:
                if answer:
                    return answer
        return rule_based_reply(ctx, message)
