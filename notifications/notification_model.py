from __future__ import annotations

from datetime import datetime
from typing import Optional

from common.models import CamelModel


class Notification(CamelModel):
    id: str
    user_id: str
    message: str
    read: bool = False
    created_at: Optional[datetime] = None
