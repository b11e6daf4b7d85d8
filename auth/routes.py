from __future__ import annotations

from fastapi import APIRouter

from .auth import auth_backend, fastapi_users
from .schemas import UserCreate, UserRead, UserUpdate


router = APIRouter(prefix="/api/users", tags=["users"])

# POST /api/users/login, POST /api/users/logout
router.include_router(fastapi_users.get_auth_router(auth_backend))
# POST /api/users/register
router.include_router(fastapi_users.get_register_router(UserRead, UserCreate))
# GET/PATCH /api/users/me
router.include_router(fastapi_users.get_users_router(UserRead, UserUpdate))
