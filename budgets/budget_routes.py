from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from auth.auth import get_current_user
from budgets.budget_model import Budget, BudgetCreate, BudgetStatusReport, BudgetSummary, BudgetUpdate
from budgets.budget_service import BudgetService, get_budget_service
from common.models import MessageOut


router = APIRouter(prefix="/api/budgets", tags=["budgets"])


@router.get("", response_model=List[Budget])
async def list_budgets(
    user_id: str = Depends(get_current_user),
    service: BudgetService = Depends(get_budget_service),
) -> List[Budget]:
    return await service.list_active(user_id)


@router.post("", response_model=Budget, status_code=status.HTTP_201_CREATED)
async def create_budget(
    payload: BudgetCreate,
    user_id: str = Depends(get_current_user),
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    return await service.create(user_id, payload)


@router.get("/status", response_model=BudgetStatusReport, response_model_exclude_none=True)
async def budget_status(
    user_id: str = Depends(get_current_user),
    service: BudgetService = Depends(get_budget_service),
) -> BudgetStatusReport:
    return await service.get_status(user_id)


@router.get("/summary", response_model=BudgetSummary)
async def budget_summary(
    user_id: str = Depends(get_current_user),
    service: BudgetService = Depends(get_budget_service),
) -> BudgetSummary:
    return await service.get_summary(user_id)


@router.put("/{budget_id}", response_model=Budget)
async def update_budget(
    budget_id: str,
    payload: BudgetUpdate,
    user_id: str = Depends(get_current_user),
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    return await service.update(user_id, budget_id, payload)


@router.delete("/{budget_id}", response_model=MessageOut)
async def delete_budget(
    budget_id: str,
    user_id: str = Depends(get_current_user),
    service: BudgetService = Depends(get_budget_service),
) -> MessageOut:
    await service.delete(user_id, budget_id)
    return MessageOut(message="Budget deleted successfully")
