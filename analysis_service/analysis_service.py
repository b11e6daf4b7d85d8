from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import numpy as np
from functools import lru_cache
from datetime import datetime

from common.dates import ensure_aware
from common.models import CamelModel
from expenses.expense_model import Expense


ANOMALY_MIN_EXPENSES = 5
ANOMALY_STD_MULTIPLIER = 2
ANOMALY_LIMIT = 5
TOP_CATEGORY_SHARE = 0.4
HIGH_AVERAGE_TRANSACTION = 100
SAVINGS_RATE = 0.15
DAYS_PER_PERIOD = 30


class PayloadExpense(CamelModel):
  amount: float
  date: Optional[datetime] = None
  category: Optional[str] = None
  description: Optional[str] = None


class CategoryTotal(CamelModel):
  category: str
  total: float


class AnalyticsInsightsIn(CamelModel):
  expenses: List[PayloadExpense] = []
  total_by_category: List[CategoryTotal] = []
  time_range: Optional[str] = None


class AnalyticsInsights(CamelModel):
  summary: str
  top_spending_category: str
  top_spending_amount: float
  average_per_day: float
  average_per_transaction: float
  trend: str
  trend_percent: float
  recommendations: List[str]
  savings_opportunity: float
  total_spent: float
  total_transactions: int
  time_range: Optional[str] = None


class MonthlyTrend(CamelModel):
  month: str
  total: float
  count: int


class Anomaly(CamelModel):
  id: str
  description: str
  amount: float
  category: str
  date: datetime
  deviation: float
  average_spending: float


class AnalysisService():

  def __init__(self) -> None:
    pass

  def expenses_to_dataframe(self, expenses: Sequence[Expense]) -> pd.DataFrame:
    """
    Build a strictly typed frame from stored expenses, sorted chronologically.
    """
    if not expenses:
      return pd.DataFrame(columns=["id", "description", "amount", "category", "date"]).astype({
        "id": "string", "description": "string", "amount": "float64", "category": "string", "date": "object",
      })
    df = pd.DataFrame([
      {"id": e.id, "description": e.description, "amount": e.amount, "category": e.category, "date": ensure_aware(e.date)}
      for e in expenses
    ])
    df = df.astype({"id": "string", "description": "string", "amount": "float64", "category": "string"})
    # Stable sort keeps insertion order for same-instant expenses
    df["_ts"] = df["date"].map(lambda d: d.timestamp())
    return df.sort_values(by="_ts", kind="mergesort").drop(columns="_ts").reset_index(drop=True)

  async def spending_trends(self, df: pd.DataFrame) -> List[MonthlyTrend]:
    if df.empty:
      return []
    s = df.copy()
    s["month"] = s["date"].map(lambda d: d.strftime("%b %Y"))
    # groupby without sorting keeps the chronological order of first appearance
    agg = s.groupby("month", sort=False).agg(total=("amount", "sum"), count=("amount", "size")).reset_index()
    return [
      MonthlyTrend(month=str(row["month"]), total=round(float(row["total"]), 2), count=int(row["count"]))
      for _, row in agg.iterrows()
    ]

  async def detect_anomalies(self, df: pd.DataFrame) -> List[Anomaly]:
    """
    Expenses more than two (population) standard deviations above the mean amount.
    """
    if len(df) < ANOMALY_MIN_EXPENSES:
      return []
    amounts = df["amount"].to_numpy(dtype=float)
    mean = float(amounts.mean())
    threshold = mean + ANOMALY_STD_MULTIPLIER * float(amounts.std())
    flagged = df[df["amount"] > threshold].head(ANOMALY_LIMIT)
    return [
      Anomaly(
        id=str(row["id"]),
        description=str(row["description"]),
        amount=float(row["amount"]),
        category=str(row["category"]),
        date=row["date"],
        deviation=round((float(row["amount"]) - mean) / mean * 100, 1) if mean else 0.0,
        average_spending=round(mean, 2),
      )
      for _, row in flagged.iterrows()
    ]

  async def insights_from_payload(self, payload: AnalyticsInsightsIn) -> AnalyticsInsights:
    """
    Insights over a client-supplied slice of expenses (the reports view sends what it is showing).
    """
    rows = [
      {"amount": float(e.amount), "ts": ensure_aware(e.date).timestamp() if e.date else 0.0}
      for e in payload.expenses
    ]
    df = pd.DataFrame(rows).sort_values(by="ts", kind="mergesort").reset_index(drop=True)
    total_spent = float(df["amount"].sum())
    count = len(df)
    avg_per_transaction = total_spent / count

    top = CategoryTotal(category="N/A", total=0.0)
    if payload.total_by_category:
      top = payload.total_by_category[0]
      for cat in payload.total_by_category[1:]:
        if cat.total > top.total:
          top = cat

    mid = count // 2
    second_avg = float(df["amount"].iloc[mid:].mean())
    first_avg = float(df["amount"].iloc[:mid].mean()) if mid > 0 else second_avg
    trend = "increasing" if second_avg > first_avg else "decreasing"
    trend_percent = round(abs((second_avg - first_avg) / first_avg * 100), 1) if first_avg else 0.0

    recommendations: List[str] = []
    if top.total > total_spent * TOP_CATEGORY_SHARE:
      share = np.floor(top.total / total_spent * 100 + 0.5)
      recommendations.append(f"{top.category} represents {share:.0f}% of your spending. Consider setting a budget limit.")
    if trend == "increasing":
      recommendations.append("Your spending is trending upward. Review recent purchases and identify areas to cut back.")
    else:
      recommendations.append("Great job! Your spending is trending downward. Keep up the good habits!")
    if avg_per_transaction > HIGH_AVERAGE_TRANSACTION:
      recommendations.append("Your average transaction is quite high. Look for ways to reduce large purchases.")

    return AnalyticsInsights(
      summary=(
        f"You've spent ${total_spent:.2f} across {count} transactions. "
        f"Your spending is {trend} by {trend_percent}% compared to the previous period."
      ),
      top_spending_category=top.category,
      top_spending_amount=top.total,
      average_per_day=round(total_spent / DAYS_PER_PERIOD, 2),
      average_per_transaction=round(avg_per_transaction, 2),
      trend=trend,
      trend_percent=trend_percent,
      recommendations=recommendations,
      savings_opportunity=round(top.total * SAVINGS_RATE, 2),
      total_spent=round(total_spent, 2),
      total_transactions=count,
      time_range=payload.time_range,
    )


@lru_cache(maxsize=1)
def get_analysis_service() -> "AnalysisService":
  return AnalysisService()
