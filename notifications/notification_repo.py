from __future__ import annotations

from typing import List, Optional

from fastapi import Depends
from surrealdb import AsyncSurreal

from common.dates import utc_now
from common.surreal_repo import SurrealRepo
from notifications.notification_model import Notification
from settings.db import get_db, to_record_id


class NotificationRepo(SurrealRepo):
    table = "notification"

    async def create(self, user_id: str, message: str) -> Notification:
        record = await self._create({"user_id": user_id, "message": message, "read": False, "created_at": utc_now()})
        return Notification(**record)

    async def list_recent(self, user_id: str, limit: int = 10) -> List[Notification]:
        rows = await self._query(
            "SELECT * FROM notification WHERE user_id = $user_id ORDER BY created_at DESC LIMIT $limit;",
            {"user_id": user_id, "limit": limit},
        )
        return [Notification(**r) for r in rows]

    async def get_for_user(self, user_id: str, notification_id: str) -> Optional[Notification]:
        record = await self._select(to_record_id(self.table, notification_id))
        if record is None or record.get("user_id") != user_id:
            return None
        return Notification(**record)

    async def mark_read(self, notification_id: str) -> Notification:
        return Notification(**await self._merge(to_record_id(self.table, notification_id), {"read": True}))


def get_notification_repo(db: AsyncSurreal = Depends(get_db)) -> NotificationRepo:
    return NotificationRepo(db)
