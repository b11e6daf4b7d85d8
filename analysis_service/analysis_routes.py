from __future__ import annotations

from fastapi import APIRouter, Depends
from typing import Dict, List

from analysis_service.analysis_service import (
    AnalysisService,
    AnalyticsInsights,
    AnalyticsInsightsIn,
    Anomaly,
    MonthlyTrend,
    get_analysis_service,
)
from auth.auth import get_current_user
from common.errors import ValidationError
from expenses.expense_repo import ExpenseRepo, get_expense_repo


router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.post("/insights", response_model=AnalyticsInsights, response_model_exclude_none=True)
async def payload_insights(
    payload: AnalyticsInsightsIn,
    user_id: str = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalyticsInsights:
    if not payload.expenses:
        raise ValidationError("No expense data provided")
    return await service.insights_from_payload(payload)


@router.get("/trends", response_model=List[MonthlyTrend])
async def spending_trends(
    user_id: str = Depends(get_current_user),
    repo: ExpenseRepo = Depends(get_expense_repo),
    service: AnalysisService = Depends(get_analysis_service),
) -> List[MonthlyTrend]:
    expenses = await repo.list_for_user(user_id, newest_first=False)
    return await service.spending_trends(service.expenses_to_dataframe(expenses))


@router.get("/anomalies")
async def anomalies(
    user_id: str = Depends(get_current_user),
    repo: ExpenseRepo = Depends(get_expense_repo),
    service: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, List[Anomaly]]:
    expenses = await repo.list_for_user(user_id)
    return {"anomalies": await service.detect_anomalies(service.expenses_to_dataframe(expenses))}
