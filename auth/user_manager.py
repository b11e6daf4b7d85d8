from fastapi import Depends, Request
from fastapi_users import BaseUserManager
from typing import Any, Optional
import logging

from settings.config import settings
from users.user_repo import SurrealUserDatabase, get_user_db
from .models import User

logger = logging.getLogger(__name__)


class UserManager(BaseUserManager[User, str]):
    reset_password_token_secret = settings.ENV_RESET_PASSWORD_TOKEN_SECRET
    verification_token_secret = settings.ENV_VERIFICATION_TOKEN_SECRET

    def parse_id(self, value: Any) -> str:
        # Surreal record ids ("users:<key>") are used verbatim
        return str(value)

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has registered.")


async def get_user_manager(user_db: SurrealUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)
