from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, status

from auth.auth import get_current_user
from expenses.expense_model import Expense, ExpenseIn, ExpenseStats, ExpenseUpdate
from expenses.expense_service import ExpenseService, get_expense_service


router = APIRouter(prefix="/api/expenses", tags=["expenses"])


@router.get("", response_model=List[Expense])
async def list_expenses(
    user_id: str = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
) -> List[Expense]:
    return await service.list_for_user(user_id)


@router.post("", response_model=Expense, status_code=status.HTTP_201_CREATED)
async def create_expense(
    payload: ExpenseIn,
    user_id: str = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
) -> Expense:
    return await service.create(user_id, payload)


@router.get("/stats/summary", response_model=ExpenseStats)
async def expense_stats(
    user_id: str = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseStats:
    return await service.stats(user_id)


@router.get("/{expense_id}", response_model=Expense)
async def get_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
) -> Expense:
    return await service.get(user_id, expense_id)


@router.put("/{expense_id}", response_model=Expense)
async def update_expense(
    expense_id: str,
    payload: ExpenseUpdate,
    user_id: str = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
) -> Expense:
    return await service.update(user_id, expense_id, payload)


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
) -> Dict[str, str]:
    deleted_id = await service.delete(user_id, expense_id)
    return {"message": "Expense removed", "id": deleted_id}
