from __future__ import annotations

from typing import Any, Dict, List, Optional

from budgets.budget_model import Budget
from common.dates import utc_now
from common.surreal_repo import SurrealRepo
from settings.db import to_record_id


DUPLICATE_BUDGET_MESSAGE = "Budget already exists for this category. Please update it instead."


class BudgetRepo(SurrealRepo):
    table = "budget"

    async def list_active(self, user_id: str) -> List[Budget]:
        rows = await self._query(
            "SELECT * FROM budget WHERE user_id = $user_id AND is_active = true ORDER BY category ASC;",
            {"user_id": user_id},
        )
        return [Budget(**r) for r in rows]

    async def find_by_category(self, user_id: str, category: str) -> Optional[Budget]:
        # Active or not: the (user, category) pair is unique across both
        rows = await self._query(
            "SELECT * FROM budget WHERE user_id = $user_id AND category = $category LIMIT 1;",
            {"user_id": user_id, "category": category},
        )
        return Budget(**rows[0]) if rows else None

    async def get_for_user(self, user_id: str, budget_id: str) -> Optional[Budget]:
        record = await self._select(to_record_id(self.table, budget_id))
        if record is None or record.get("user_id") != user_id:
            return None
        return Budget(**record)

    async def create(self, user_id: str, category: str, monthly_limit: float, alert_threshold: int, notes: str) -> Budget:
        now = utc_now()
        payload = {
            "user_id": user_id,
            "category": category,
            "monthly_limit": monthly_limit,
            "alert_threshold": alert_threshold,
            "is_active": True,
            "notes": notes,
            "created_at": now,
            "updated_at": now,
        }
        # The unique index on (user_id, category) settles concurrent creates
        record = await self._create(payload, conflict_message=DUPLICATE_BUDGET_MESSAGE)
        return Budget(**record)

    async def update(self, budget_id: str, changes: Dict[str, Any]) -> Budget:
        payload = {**changes, "updated_at": utc_now()}
        return Budget(**await self._merge(to_record_id(self.table, budget_id), payload))

    async def delete(self, budget_id: str) -> None:
        await self._delete(to_record_id(self.table, budget_id))
