from typing import Optional, Any, Dict
import logging

from fastapi import Depends
from fastapi_users.db import BaseUserDatabase
from surrealdb import AsyncSurreal

from auth.models import User
from common.dates import utc_now
from common.errors import StorageError
from settings.db import first_record, get_db, normalize_record, to_record_id


logger = logging.getLogger(__name__)

class SurrealUserDatabase(BaseUserDatabase[User, str]):
    def __init__(self, db: AsyncSurreal, collection: str = "users") -> None:
        self.db = db
        self.collection = collection

    async def get(self, id: str) -> Optional[User]:
        try:
            record = first_record(await self.db.select(to_record_id(self.collection, str(id))))
        except Exception as exc:
            logger.exception("Error querying user by id '%s': %s", id, exc)
            raise StorageError("Error querying user by id") from exc
        if record:
            return User(**normalize_record(record))
        return None

    async def get_by_email(self, email: str) -> Optional[User]:
        try:
            query = f"SELECT * FROM {self.collection} WHERE email = $email LIMIT 1;"
            results = await self.db.query(query, {"email": email.lower()})
        except Exception as exc:
            logger.exception("Error querying user by email from collection '%s': %s", self.collection, exc)
            raise StorageError("Error querying user by email") from exc
        if results:
            return User(**normalize_record(results[0]))
        return None

    async def create(self, create_dict: Dict[str, Any]) -> User:
        now = utc_now()
        # Ensure required flags and timestamps exist on create
        payload = {
            **create_dict,
            "email": str(create_dict["email"]).lower(),
            "is_active": create_dict.get("is_active", True),
            "is_superuser": create_dict.get("is_superuser", False),
            "is_verified": create_dict.get("is_verified", False),
            "created_at": now,
            "updated_at": now,
        }
        try:
            record = first_record(await self.db.create(self.collection, payload))
        except Exception as exc:
            logger.exception("Error creating user in '%s': %s", self.collection, exc)
            raise StorageError("Error creating user") from exc
        return User(**normalize_record(record))

    async def update(self, user: User, update_dict: Dict[str, Any]) -> User:
        payload = {**update_dict, "updated_at": utc_now()}
        if "email" in payload:
            payload["email"] = str(payload["email"]).lower()
        try:
            record = first_record(await self.db.merge(to_record_id(self.collection, user.id), payload))
        except Exception as exc:
            logger.exception("Error updating user '%s': %s", user.id, exc)
            raise StorageError("Error updating user") from exc
        return User(**normalize_record(record))

    async def delete(self, user: User) -> None:
        try:
            await self.db.delete(to_record_id(self.collection, user.id))
        except Exception as exc:
            logger.exception("Error deleting user '%s': %s", user.id, exc)
            raise StorageError("Error deleting user") from exc


async def get_user_db(db: AsyncSurreal = Depends(get_db)):
    yield SurrealUserDatabase(db, "users")
