import os
import sys

# Provide required auth secrets for tests if not already set
os.environ.setdefault("ENV_SECRET", "test-secret")
os.environ.setdefault("ENV_RESET_PASSWORD_TOKEN_SECRET", "test-reset-secret")
os.environ.setdefault("ENV_VERIFICATION_TOKEN_SECRET", "test-verify-secret")
os.environ.setdefault("OPENAI_API_KEY", "")


def pytest_sessionstart(session):
    # Ensure project root is on sys.path so top-level packages resolve
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


# --- Test utilities: Fake in-memory SurrealDB ---
import operator
import re
import uuid
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import Header
from surrealdb import RecordID


USER_A = "users:alice"
USER_B = "users:bob"

_SELECT_RE = re.compile(
    r"^\s*SELECT \* FROM (?P<table>\w+)"
    r"(?: WHERE (?P<where>.+?))?"
    r"(?: ORDER BY (?P<order>\w+) (?P<direction>ASC|DESC))?"
    r"(?: LIMIT (?P<limit>\$\w+|\d+))?\s*;?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_COND_RE = re.compile(r"^(\w+) (=|>=|<=|>|<) (\$\w+|true|false|\d+)$")
_OPS = {"=": operator.eq, ">=": operator.ge, "<=": operator.le, ">": operator.gt, "<": operator.lt}


class FakeAsyncSurreal:
    """
    Dict-backed stand-in for surrealdb.AsyncSurreal.
    Understands the plain `SELECT * FROM t WHERE a = $a AND ... ORDER BY f ASC|DESC LIMIT n`
    statements the repositories issue, and enforces unique indexes on create.
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[Any, Dict[str, Any]]] = {}
        self.unique_indexes = {
            "budget": ("budget_user_category", ("user_id", "category")),
            "users": ("users_email", ("email",)),
        }
        self.fail_with: Optional[Exception] = None
        self.queries: List[str] = []

    def _check_failure(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def records(self, table: str) -> List[Dict[str, Any]]:
        return [{**r} for r in self._tables.get(table, {}).values()]

    async def create(self, table: str, payload: dict):
        self._check_failure()
        index = self.unique_indexes.get(table)
        if index is not None:
            name, fields = index
            key = tuple(payload.get(f) for f in fields)
            for existing in self._tables.get(table, {}).values():
                if tuple(existing.get(f) for f in fields) == key:
                    raise Exception(f"Database index `{name}` already contains {list(key)}, with record `{existing['id']}`")
        rid = RecordID(table, uuid.uuid4().hex)
        record = {**payload, "id": rid}
        self._tables.setdefault(table, {})[rid.id] = record
        return {**record}

    async def select(self, thing: RecordID):
        self._check_failure()
        rec = self._tables.get(thing.table_name, {}).get(thing.id)
        return {**rec} if rec is not None else None

    async def merge(self, thing: RecordID, data: dict):
        self._check_failure()
        current = self._tables.get(thing.table_name, {}).get(thing.id)
        if current is None:
            return None
        updated = {**current, **data}
        self._tables[thing.table_name][thing.id] = updated
        return {**updated}

    async def delete(self, thing: RecordID):
        self._check_failure()
        self._tables.get(thing.table_name, {}).pop(thing.id, None)

    async def query(self, query: str, vars: dict | None = None):
        self._check_failure()
        self.queries.append(query)
        vars = vars or {}
        match = _SELECT_RE.match(query)
        if not match:
            # Default empty result for statements the fake does not model (e.g. schema DEFINEs)
            return []

        rows = list(self._tables.get(match["table"], {}).values())
        if match["where"]:
            for cond in re.split(r"\s+AND\s+", match["where"].strip(), flags=re.IGNORECASE):
                parsed = _COND_RE.match(cond.strip())
                assert parsed, f"FakeAsyncSurreal cannot evaluate condition: {cond!r}"
                field, op, raw = parsed.groups()
                value = self._literal(raw, vars)
                rows = [r for r in rows if field in r and _OPS[op](r[field], value)]
        if match["order"]:
            rows = sorted(rows, key=lambda r: r[match["order"]], reverse=match["direction"].upper() == "DESC")
        if match["limit"]:
            rows = rows[: int(self._literal(match["limit"], vars))]
        return [{**r} for r in rows]

    @staticmethod
    def _literal(raw: str, vars: dict) -> Any:
        if raw.startswith("$"):
            return vars[raw[1:]]
        if raw in ("true", "false"):
            return raw == "true"
        return int(raw)


@pytest_asyncio.fixture
async def fake_db():
    # Provide a fresh fake DB per test function
    db = FakeAsyncSurreal()
    yield db


async def _header_user(x_test_user: str = Header(default=USER_A)) -> str:
    return x_test_user


@pytest.fixture
def app(fake_db):
    from main import app as fastapi_app
    from ai_services.llm import get_llm_client
    from auth.auth import get_current_user
    from settings.db import get_db

    async def override_db():
        return fake_db

    fastapi_app.dependency_overrides[get_db] = override_db
    fastapi_app.dependency_overrides[get_current_user] = _header_user
    fastapi_app.dependency_overrides[get_llm_client] = lambda: None
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class FakeLLM:
    def __init__(self, answer: str = "", error: Optional[Exception] = None) -> None:
        self.answer = answer
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer
