from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends
from surrealdb import AsyncSurreal

from common.dates import utc_now
from common.surreal_repo import SurrealRepo
from expenses.expense_model import Expense
from settings.db import get_db, to_record_id


class ExpenseRepo(SurrealRepo):
    table = "expense"

    async def create(self, user_id: str, description: str, amount: float, category: str, date: datetime) -> Expense:
        now = utc_now()
        payload = {
            "user_id": user_id,
            "description": description,
            "amount": amount,
            "category": category,
            "date": date,
            "created_at": now,
            "updated_at": now,
        }
        return Expense(**await self._create(payload))

    async def get_for_user(self, user_id: str, expense_id: str) -> Optional[Expense]:
        record = await self._select(to_record_id(self.table, expense_id))
        if record is None or record.get("user_id") != user_id:
            return None
        return Expense(**record)

    async def list_for_user(self, user_id: str, limit: Optional[int] = None, since: Optional[datetime] = None, newest_first: bool = True) -> List[Expense]:
        filters = ["user_id = $user_id"]
        vars: Dict[str, Any] = {"user_id": user_id}
        if since is not None:
            filters.append("date >= $since")
            vars["since"] = since
        query = f"SELECT * FROM expense WHERE {' AND '.join(filters)} ORDER BY date {'DESC' if newest_first else 'ASC'}"
        if limit is not None:
            query += " LIMIT $limit"
            vars["limit"] = limit
        rows = await self._query(query + ";", vars)
        return [Expense(**r) for r in rows]

    async def find_in_window(self, user_id: str, start: datetime, end: datetime, category: Optional[str] = None) -> List[Expense]:
        """Expenses dated within [start, end], optionally restricted to one exact category label."""
        if category is None:
            query = "SELECT * FROM expense WHERE user_id = $user_id AND date >= $start AND date <= $end;"
            vars: Dict[str, Any] = {"user_id": user_id, "start": start, "end": end}
        else:
            query = "SELECT * FROM expense WHERE user_id = $user_id AND category = $category AND date >= $start AND date <= $end;"
            vars = {"user_id": user_id, "category": category, "start": start, "end": end}
        rows = await self._query(query, vars)
        return [Expense(**r) for r in rows]

    async def update(self, expense_id: str, changes: Dict[str, Any]) -> Expense:
        payload = {**changes, "updated_at": utc_now()}
        return Expense(**await self._merge(to_record_id(self.table, expense_id), payload))

    async def delete(self, expense_id: str) -> None:
        await self._delete(to_record_id(self.table, expense_id))


def get_expense_repo(db: AsyncSurreal = Depends(get_db)) -> ExpenseRepo:
    return ExpenseRepo(db)
