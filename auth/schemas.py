from __future__ import annotations

from typing import Optional

from fastapi_users import schemas


class UserRead(schemas.BaseUser[str]):
    name: Optional[str] = None


class UserCreate(schemas.BaseUserCreate):
    name: Optional[str] = None


class UserUpdate(schemas.BaseUserUpdate):
    name: Optional[str] = None
