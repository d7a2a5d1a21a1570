from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from parentai.config import CONFIG
from parentai.main import app
from parentai.supabase import UserContext, get_user_context

QUERY_KEYS = {"select", "order", "limit"}


class FakeSupabase:
    """In-memory stand-in for the PostgREST client: eq filters, order, limit."""

    def __init__(self) -> None:
        self.tables = defaultdict(list)
        self.calls = []
        self.fail_selects = False
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    @staticmethod
    def _matches(row, params) -> bool:
        for key, value in params.items():
            if key in QUERY_KEYS:
                continue
            if isinstance(value, str) and value.startswith("eq."):
                if str(row.get(key)) != value[3:]:
                    return False
        return True

    async def select(self, table, params):
        self.calls.append(("select", table, params))
        if self.fail_selects:
            raise HTTPException(status_code=503, detail="Supabase select failed")
        rows = [dict(row) for row in self.tables[table] if self._matches(row, params)]
        order = params.get("order")
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda row: str(row.get(column) or ""), reverse=direction == "desc")
        limit = params.get("limit")
        if limit:
            rows = rows[: int(limit)]
        return rows

    async def insert(self, table, payload, *, params=None):
        self.calls.append(("insert", table, payload, params))
        row = {"id": str(uuid4()), "created_at": self._tick(), **payload}
        self.tables[table].append(row)
        return [dict(row)]

    async def delete(self, table, params):
        self.calls.append(("delete", table, params))
        self.tables[table] = [row for row in self.tables[table] if not self._matches(row, params)]


class FakeCompletions:
    def __init__(self, content="Try a consistent bedtime routine.", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, completions: FakeCompletions) -> None:
        self.chat = SimpleNamespace(completions=completions)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def auth_context(fake_supabase: FakeSupabase) -> UserContext:
    return UserContext(
        user_id=str(uuid4()),
        user_email="parent@example.com",
        full_name="Pat Parent",
        access_token="test-token",
        supabase=fake_supabase,
    )


@pytest.fixture
def client(auth_context: UserContext):
    app.dependency_overrides[get_user_context] = lambda: auth_context
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def child_id() -> str:
    return str(uuid4())


@pytest.fixture
def fake_llm(monkeypatch: pytest.MonkeyPatch) -> FakeCompletions:
    completions = FakeCompletions()
    monkeypatch.setattr("parentai.ai_proxy.get_client", lambda: FakeOpenAI(completions))
    return completions


@pytest.fixture
def no_llm_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(CONFIG, "llm_api_key", None)
