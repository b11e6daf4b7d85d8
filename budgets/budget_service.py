from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Depends
from surrealdb import AsyncSurreal

from budgets.budget_model import (
    DEFAULT_ALERT_THRESHOLD,
    MEDIUM_ALERT_PERCENT,
    AlertLevel,
    Budget,
    BudgetCreate,
    BudgetStatus,
    BudgetStatusReport,
    BudgetSummary,
    BudgetUpdate,
)
from budgets.budget_repo import DUPLICATE_BUDGET_MESSAGE, BudgetRepo
from categories.category_model import parse_category
from common.dates import MonthWindow, current_month_window
from common.errors import ConflictError, NotFoundError, ValidationError
from expenses.expense_model import Expense
from expenses.expense_repo import ExpenseRepo
from settings.db import get_db

logger = logging.getLogger(__name__)


NO_BUDGETS_MESSAGE = "No budgets set"


def classify_alert_level(percentage: float, alert_threshold: int) -> AlertLevel:
    """
    The budget's own threshold wins; the fixed medium band only applies below it.
    A threshold under 70 therefore goes straight from safe to high.
    """
    if percentage >= alert_threshold:
        return AlertLevel.HIGH
    if percentage >= MEDIUM_ALERT_PERCENT:
        return AlertLevel.MEDIUM
    return AlertLevel.SAFE


def build_budget_status(budget: Budget, expenses: Sequence[Expense]) -> BudgetStatus:
    spent = sum(e.amount for e in expenses)
    limit = budget.monthly_limit
    percentage = round(spent / limit * 100, 1) if limit > 0 else 0.0
    return BudgetStatus(
        budget_id=budget.id,
        category=budget.category,
        limit=limit,
        spent=round(spent, 2),
        remaining=round(max(0.0, limit - spent), 2),
        percentage=percentage,
        alert_level=classify_alert_level(percentage, budget.alert_threshold),
        exceeds_limit=spent > limit,
        transaction_count=len(expenses),
        alert_threshold=budget.alert_threshold,
    )


def summarize_budgets(budgets: Sequence[Budget], expenses: Sequence[Expense]) -> BudgetSummary:
    """Portfolio view; spend counts every expense in the window, budgeted category or not."""
    total_budget = sum(b.monthly_limit for b in budgets)
    total_spent = sum(e.amount for e in expenses)
    overall = (total_spent / total_budget) * 100 if total_budget > 0 else 0.0
    return BudgetSummary(
        total_budget=round(total_budget, 2),
        total_spent=round(total_spent, 2),
        total_remaining=round(max(0.0, total_budget - total_spent), 2),
        overall_percentage=round(overall, 1),
        budget_count=len(budgets),
        is_over_budget=total_spent > total_budget,
    )


def _validate_monthly_limit(value: Any) -> float:
    if value is None or value <= 0:
        raise ValidationError("Monthly limit must be greater than 0")
    return float(value)


def _validate_alert_threshold(value: Any) -> int:
    if value is None or value < 0 or value > 100:
        raise ValidationError("Alert threshold must be between 0 and 100")
    return int(value)


class BudgetService:
    def __init__(self, budgets: BudgetRepo, expenses: ExpenseRepo) -> None:
        self.budgets = budgets
        self.expenses = expenses

    async def list_active(self, user_id: str) -> List[Budget]:
        return await self.budgets.list_active(user_id)

    async def create(self, user_id: str, payload: BudgetCreate) -> Budget:
        if not payload.category or not payload.category.strip() or payload.monthly_limit is None:
            raise ValidationError("Category and monthly limit are required")
        monthly_limit = _validate_monthly_limit(payload.monthly_limit)
        category = parse_category(payload.category)
        alert_threshold = (
            DEFAULT_ALERT_THRESHOLD if payload.alert_threshold is None else _validate_alert_threshold(payload.alert_threshold)
        )

        if await self.budgets.find_by_category(user_id, category.value) is not None:
            raise ConflictError(DUPLICATE_BUDGET_MESSAGE, details={"category": category.value})

        budget = await self.budgets.create(
            user_id=user_id,
            category=category.value,
            monthly_limit=monthly_limit,
            alert_threshold=alert_threshold,
            notes=payload.notes or "",
        )
        logger.info("Created budget %s (%s) for %s", budget.id, budget.category, user_id)
        return budget

    async def update(self, user_id: str, budget_id: str, payload: BudgetUpdate) -> Budget:
        budget = await self.budgets.get_for_user(user_id, budget_id)
        if budget is None:
            raise NotFoundError("Budget not found")

        provided = payload.model_dump(exclude_unset=True)
        changes: Dict[str, Any] = {}
        if "monthly_limit" in provided:
            changes["monthly_limit"] = _validate_monthly_limit(provided["monthly_limit"])
        if "alert_threshold" in provided:
            changes["alert_threshold"] = _validate_alert_threshold(provided["alert_threshold"])
        if "is_active" in provided:
            if provided["is_active"] is None:
                raise ValidationError("isActive must be true or false")
            changes["is_active"] = provided["is_active"]
        if "notes" in provided:
            changes["notes"] = provided["notes"] or ""

        if not changes:
            return budget
        return await self.budgets.update(budget.id, changes)

    async def delete(self, user_id: str, budget_id: str) -> None:
        budget = await self.budgets.get_for_user(user_id, budget_id)
        if budget is None:
            raise NotFoundError("Budget not found")
        await self.budgets.delete(budget.id)
        logger.info("Deleted budget %s for %s", budget.id, user_id)

    async def _status_in_window(self, user_id: str, budget: Budget, window: MonthWindow) -> BudgetStatus:
        expenses = await self.expenses.find_in_window(user_id, window.start, window.end, category=budget.category)
        return build_budget_status(budget, expenses)

    async def get_status(self, user_id: str, now: Optional[datetime] = None) -> BudgetStatusReport:
        budgets = await self.budgets.list_active(user_id)
        if not budgets:
            return BudgetStatusReport(message=NO_BUDGETS_MESSAGE, budget_status=[])

        window = current_month_window(now)
        statuses = [await self._status_in_window(user_id, b, window) for b in budgets]
        statuses.sort(key=lambda s: s.percentage, reverse=True)
        return BudgetStatusReport(month=window.label, total_budgets=len(budgets), budget_status=statuses)

    async def get_summary(self, user_id: str, now: Optional[datetime] = None) -> BudgetSummary:
        budgets = await self.budgets.list_active(user_id)
        window = current_month_window(now)
        expenses = await self.expenses.find_in_window(user_id, window.start, window.end)
        return summarize_budgets(budgets, expenses)

    async def status_for_category(self, user_id: str, category: str, now: Optional[datetime] = None) -> Optional[BudgetStatus]:
        """Current-month status of the active budget for `category`, if there is one."""
        budget = await self.budgets.find_by_category(user_id, category)
        if budget is None or not budget.is_active:
            return None
        return await self._status_in_window(user_id, budget, current_month_window(now))


def get_budget_service(db: AsyncSurreal = Depends(get_db)) -> BudgetService:
    return BudgetService(BudgetRepo(db), ExpenseRepo(db))
