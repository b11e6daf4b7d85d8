"""
Heuristic spending analytics behind the /api/ai endpoints.

Everything here works on a list of expenses already loaded in memory
(newest first) and returns plain pydantic models; no I/O happens here.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from common.dates import local_now, month_key, previous_month_key
from common.models import CamelModel
from expenses.expense_model import Expense


PREDICTION_WEIGHTS = (0.5, 0.3, 0.2)
TREND_CHANGE_PERCENT = 10
MONTH_OVER_MONTH_CHANGE_PERCENT = 15
RECENT_WINDOW = 30


class SpendingPrediction(CamelModel):
    amount: int
    confidence: str  # high | medium | low
    trend: str  # up | down | stable
    percent_change: int


class Insight(CamelModel):
    type: str  # info | warning | alert | success
    message: str
    action: str


class MonthTotal(CamelModel):
    total: int
    transaction_count: int


class PredictionReport(CamelModel):
    predicted_amount: int
    confidence: str
    trend: str
    percent_change: int
    insights: List[Insight]
    current_month: MonthTotal
    last_month: MonthTotal


def round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def expenses_frame(expenses: Sequence[Expense]) -> pd.DataFrame:
    """One row per expense, input order preserved, with a YYYY-MM `month` column."""
    if not expenses:
        return pd.DataFrame(
            {
                "amount": pd.Series([], dtype="float64"),
                "category": pd.Series([], dtype="string"),
                "month": pd.Series([], dtype="string"),
            }
        )
    return pd.DataFrame(
        {
            "amount": [float(e.amount) for e in expenses],
            "category": [e.category for e in expenses],
            "month": [month_key(e.date) for e in expenses],
        }
    ).astype({"amount": "float64", "category": "string", "month": "string"})


def monthly_totals(expenses: Sequence[Expense]) -> pd.Series:
    """Total per month in order of first appearance; for newest-first input the most recent month leads."""
    df = expenses_frame(expenses)
    return df.groupby("month", sort=False)["amount"].sum()


def predict_spending(expenses: Sequence[Expense]) -> SpendingPrediction:
    totals = monthly_totals(expenses).to_numpy(dtype=float)
    if totals.size == 0:
        return SpendingPrediction(amount=0, confidence="low", trend="stable", percent_change=0)

    average = float(totals.mean())
    recent_avg = float(totals[:2].mean())
    older_avg = float(totals[2:].mean()) if totals.size > 2 else recent_avg

    percent_change = ((recent_avg - older_avg) / older_avg) * 100 if older_avg else 0.0
    trend = "stable"
    if percent_change > TREND_CHANGE_PERCENT:
        trend = "up"
    elif percent_change < -TREND_CHANGE_PERCENT:
        trend = "down"

    # Coefficient of variation of the monthly totals (population std)
    variation = float(totals.std()) / average if average else 0.0
    confidence = "medium"
    if variation < 0.2:
        confidence = "high"
    elif variation > 0.5:
        confidence = "low"

    # Weighted recent months; with fewer than three months the missing weights count as zero
    predicted = sum(totals[i] * PREDICTION_WEIGHTS[i] for i in range(min(len(PREDICTION_WEIGHTS), totals.size)))

    return SpendingPrediction(
        amount=round_half_up(predicted),
        confidence=confidence,
        trend=trend,
        percent_change=round_half_up(percent_change),
    )


def _month_slice(df: pd.DataFrame, key: str) -> pd.DataFrame:
    return df[df["month"] == key]


def generate_insights(expenses: Sequence[Expense], now: Optional[datetime] = None) -> List[Insight]:
    if not expenses:
        return [
            Insight(
                type="info",
                message="Start tracking expenses to get personalized insights",
                action="Add your first expense to begin",
            )
        ]

    now = now or local_now()
    df = expenses_frame(expenses)
    insights: List[Insight] = []

    by_category = df.groupby("category", sort=False)["amount"].sum().sort_values(ascending=False, kind="stable")
    top_category, top_total = str(by_category.index[0]), float(by_category.iloc[0])
    grand_total = float(df["amount"].sum())
    share = (top_total / grand_total) * 100 if grand_total else 0.0
    insights.append(
        Insight(
            type="warning",
            message=f"{top_category} is your highest spending category at {share:.1f}% of total expenses",
            action="Consider setting a budget limit for this category",
        )
    )

    recent = df["amount"].head(RECENT_WINDOW)
    high_count = int((recent > recent.mean() * 2).sum())
    if high_count > 0:
        insights.append(
            Insight(
                type="alert",
                message=f"{high_count} unusually high transaction(s) detected recently",
                action="Review these transactions to ensure they align with your budget",
            )
        )

    current_total = float(_month_slice(df, month_key(now))["amount"].sum())
    last_total = float(_month_slice(df, previous_month_key(now))["amount"].sum())
    if last_total > 0:
        change = ((current_total - last_total) / last_total) * 100
        if abs(change) > MONTH_OVER_MONTH_CHANGE_PERCENT:
            insights.append(
                Insight(
                    type="warning" if change > 0 else "success",
                    message=f"Your spending {'increased' if change > 0 else 'decreased'} by {abs(change):.1f}% compared to last month",
                    action="Consider reviewing your budget limits" if change > 0 else "Great job managing your expenses!",
                )
            )

    return insights


def build_prediction_report(expenses: Sequence[Expense], now: Optional[datetime] = None) -> PredictionReport:
    now = now or local_now()
    prediction = predict_spending(expenses)
    df = expenses_frame(expenses)
    current = _month_slice(df, month_key(now))
    last = _month_slice(df, previous_month_key(now))
    return PredictionReport(
        predicted_amount=prediction.amount,
        confidence=prediction.confidence,
        trend=prediction.trend,
        percent_change=prediction.percent_change,
        insights=generate_insights(expenses, now),
        current_month=MonthTotal(total=round_half_up(float(current["amount"].sum())), transaction_count=len(current)),
        last_month=MonthTotal(total=round_half_up(float(last["amount"].sum())), transaction_count=len(last)),
    )
