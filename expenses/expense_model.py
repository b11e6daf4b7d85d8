from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import field_validator

from common.dates import ensure_aware
from common.models import CamelModel


class Expense(CamelModel):
    id: str
    user_id: str
    description: str
    amount: float
    category: str
    date: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def _aware_date(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class ExpenseIn(CamelModel):
    # Every field is optional here so the service can answer with a 400 and a readable message
    description: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    date: Optional[datetime] = None


class ExpenseUpdate(ExpenseIn):
    pass


class ExpenseStats(CamelModel):
    total: float
    count: int
    this_month: float
    by_category: Dict[str, float]
