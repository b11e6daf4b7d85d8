from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends
from surrealdb import AsyncSurreal

from budgets.budget_model import AlertLevel
from budgets.budget_repo import BudgetRepo
from budgets.budget_service import BudgetService
from categories.category_model import parse_category
from common.dates import current_month_window, ensure_aware, local_now
from common.errors import NotFoundError, StorageError, ValidationError
from expenses.expense_model import Expense, ExpenseIn, ExpenseStats, ExpenseUpdate
from expenses.expense_repo import ExpenseRepo
from notifications.notification_repo import NotificationRepo
from settings.db import get_db

logger = logging.getLogger(__name__)


def _validate_amount(value: Any) -> float:
    if value is None or value <= 0:
        raise ValidationError("Amount must be greater than 0")
    return float(value)


def _validate_description(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationError("Description is required")
    return value.strip()


class ExpenseService:
    def __init__(self, expenses: ExpenseRepo, budgets: BudgetService, notifications: NotificationRepo) -> None:
        self.expenses = expenses
        self.budgets = budgets
        self.notifications = notifications

    async def list_for_user(self, user_id: str) -> List[Expense]:
        return await self.expenses.list_for_user(user_id)

    async def get(self, user_id: str, expense_id: str) -> Expense:
        expense = await self.expenses.get_for_user(user_id, expense_id)
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    async def create(self, user_id: str, payload: ExpenseIn) -> Expense:
        if not payload.description or payload.amount is None or not payload.category:
            raise ValidationError("Please include all required fields.")
        expense = await self.expenses.create(
            user_id=user_id,
            description=_validate_description(payload.description),
            amount=_validate_amount(payload.amount),
            category=parse_category(payload.category).value,
            date=ensure_aware(payload.date) if payload.date is not None else local_now(),
        )
        await self._notify_if_budget_high(user_id, expense)
        return expense

    async def update(self, user_id: str, expense_id: str, payload: ExpenseUpdate) -> Expense:
        expense = await self.get(user_id, expense_id)
        provided = payload.model_dump(exclude_unset=True)
        changes: Dict[str, Any] = {}
        if "description" in provided:
            changes["description"] = _validate_description(provided["description"])
        if "amount" in provided:
            changes["amount"] = _validate_amount(provided["amount"])
        if "category" in provided:
            changes["category"] = parse_category(provided["category"]).value
        if "date" in provided:
            if provided["date"] is None:
                raise ValidationError("Date is required")
            changes["date"] = ensure_aware(provided["date"])
        if not changes:
            return expense
        return await self.expenses.update(expense.id, changes)

    async def delete(self, user_id: str, expense_id: str) -> str:
        expense = await self.get(user_id, expense_id)
        await self.expenses.delete(expense.id)
        return expense.id

    async def stats(self, user_id: str, now: Optional[datetime] = None) -> ExpenseStats:
        expenses = await self.expenses.list_for_user(user_id)
        window = current_month_window(now)
        by_category: Dict[str, float] = defaultdict(float)
        for e in expenses:
            by_category[e.category] += e.amount
        return ExpenseStats(
            total=round(sum(e.amount for e in expenses), 2),
            count=len(expenses),
            this_month=round(sum(e.amount for e in expenses if window.contains(e.date)), 2),
            by_category={k: round(v, 2) for k, v in by_category.items()},
        )

    async def _notify_if_budget_high(self, user_id: str, expense: Expense) -> None:
        if not current_month_window().contains(expense.date):
            return
        status = await self.budgets.status_for_category(user_id, expense.category)
        if status is None or status.alert_level != AlertLevel.HIGH:
            return
        message = f"You've used {status.percentage}% of your {status.category} budget"
        if status.exceeds_limit:
            message = f"You've exceeded your {status.category} budget ({status.percentage}% used)"
        try:
            await self.notifications.create(user_id, message)
        except StorageError:
            # The expense is already stored; a missing alert is not worth failing the request
            logger.warning("Could not store budget alert for %s", user_id)


def get_expense_service(db: AsyncSurreal = Depends(get_db)) -> ExpenseService:
    expenses = ExpenseRepo(db)
    return ExpenseService(expenses, BudgetService(BudgetRepo(db), expenses), NotificationRepo(db))
