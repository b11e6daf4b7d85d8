from datetime import datetime, timedelta, timezone

import httpx
import pytest

from ai_services.spending import build_prediction_report, generate_insights, predict_spending
from expenses.expense_model import Expense

NOW = datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc)
_counter = 0


def _expense(amount, category="Food & Drinks", date=NOW):
    global _counter
    _counter += 1
    return Expense(
        id=f"expense:{_counter}",
        user_id="users:alice",
        description="x",
        amount=amount,
        category=category,
        date=date,
    )


def _month(year, month, day=10):
    return datetime(year, month, day, tzinfo=timezone.utc)


def test_prediction_with_no_history():
    prediction = predict_spending([])

    assert (prediction.amount, prediction.confidence, prediction.trend, prediction.percent_change) == (0, "low", "stable", 0)


def test_prediction_weights_recent_months():
    # Newest first, one expense per month
    expenses = [
        _expense(300, date=_month(2026, 3)),
        _expense(200, date=_month(2026, 2)),
        _expense(100, date=_month(2026, 1)),
    ]

    prediction = predict_spending(expenses)

    # 0.5*300 + 0.3*200 + 0.2*100
    assert prediction.amount == 230
    # recent avg 250 vs older avg 100
    assert prediction.trend == "up"
    assert prediction.percent_change == 150
    assert prediction.confidence == "medium"


def test_prediction_single_month_keeps_half_weight():
    prediction = predict_spending([_expense(100), _expense(50)])

    assert prediction.amount == 75
    assert prediction.trend == "stable"
    assert prediction.confidence == "high"


def test_prediction_trend_down():
    expenses = [
        _expense(100, date=_month(2026, 3)),
        _expense(100, date=_month(2026, 2)),
        _expense(400, date=_month(2026, 1)),
    ]

    assert predict_spending(expenses).trend == "down"


def test_insights_without_expenses():
    [insight] = generate_insights([], NOW)

    assert insight.type == "info"
    assert insight.message == "Start tracking expenses to get personalized insights"


def test_insights_top_category_and_month_change():
    expenses = [
        _expense(60, "Travel"),
        _expense(20, "Food & Drinks"),
        _expense(20, "Food & Drinks", date=_month(2026, 2)),
    ]

    insights = generate_insights(expenses, NOW)

    assert insights[0].type == "warning"
    assert insights[0].message == "Travel is your highest spending category at 60.0% of total expenses"
    change = insights[-1]
    assert change.type == "warning"
    assert change.message == "Your spending increased by 300.0% compared to last month"


def test_insights_flag_unusually_high_transactions():
    expenses = [_expense(10) for _ in range(9)] + [_expense(500)]

    insights = generate_insights(expenses, NOW)

    alerts = [i for i in insights if i.type == "alert"]
    assert [a.message for a in alerts] == ["1 unusually high transaction(s) detected recently"]


def test_insights_decrease_is_success():
    expenses = [_expense(50), _expense(100, date=_month(2026, 2))]

    change = generate_insights(expenses, NOW)[-1]

    assert change.type == "success"
    assert change.message == "Your spending decreased by 50.0% compared to last month"


def test_prediction_report_month_totals():
    expenses = [_expense(10.4), _expense(20.2), _expense(7.5, date=_month(2026, 2))]

    report = build_prediction_report(expenses, NOW)

    assert report.current_month.total == 31
    assert report.current_month.transaction_count == 2
    assert report.last_month.total == 8
    assert report.last_month.transaction_count == 1


@pytest.mark.asyncio
async def test_predict_and_insights_routes(client: httpx.AsyncClient):
    empty = (await client.get("/api/ai/predict")).json()
    assert empty["predictedAmount"] == 0
    assert empty["confidence"] == "low"

    await client.post(
        "/api/expenses",
        json={"description": "Dinner", "amount": 40, "category": "Food & Drinks", "date": (datetime.now().astimezone() - timedelta(minutes=1)).isoformat()},
    )

    report = (await client.get("/api/ai/predict")).json()
    assert report["predictedAmount"] == 20
    assert report["currentMonth"] == {"total": 40, "transactionCount": 1}

    insights = (await client.get("/api/ai/insights")).json()["insights"]
    assert insights[0]["message"] == "Food & Drinks is your highest spending category at 100.0% of total expenses"
