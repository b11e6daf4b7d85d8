from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from common.models import CamelModel


DEFAULT_ALERT_THRESHOLD = 80
# Fixed "medium" band, independent of each budget's own alert threshold
MEDIUM_ALERT_PERCENT = 70


class AlertLevel(str, Enum):
    SAFE = "safe"
    MEDIUM = "medium"
    HIGH = "high"


class Budget(CamelModel):
    id: str
    user_id: str
    category: str
    monthly_limit: float
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD
    is_active: bool = True
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BudgetCreate(CamelModel):
    category: Optional[str] = None
    monthly_limit: Optional[float] = None
    alert_threshold: Optional[int] = None
    notes: Optional[str] = None


class BudgetUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    monthly_limit: Optional[float] = None
    alert_threshold: Optional[int] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class BudgetStatus(CamelModel):
    budget_id: str
    category: str
    limit: float
    spent: float
    remaining: float
    percentage: float
    alert_level: AlertLevel
    exceeds_limit: bool
    transaction_count: int
    alert_threshold: int


class BudgetStatusReport(CamelModel):
    message: Optional[str] = None
    month: Optional[str] = None
    total_budgets: Optional[int] = None
    budget_status: List[BudgetStatus] = []


class BudgetSummary(CamelModel):
    total_budget: float
    total_spent: float
    total_remaining: float
    overall_percentage: float
    budget_count: int
    is_over_budget: bool
