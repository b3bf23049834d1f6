from __future__ import annotations

import itertools
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from registry.core.config import Settings
from registry.core.dependencies import get_session_store, get_worker_list_view, get_worker_repository
from registry.core.errors import AuthError, ErrorCode
from registry.main import app
from registry.models.auth import Credentials, Session, SessionEvent, UserInfo
from registry.services.session_store import SessionStore
from registry.services.worker_list import WorkerListView
from registry.services.worker_repository import WorkerRepository

TEST_USER_ID = "user-1"
TEST_EMAIL = "agent@registre.cd"
TEST_PASSWORD = "secret123"

T1 = "2024-03-01T08:00:00+00:00"
T2 = "2024-03-02T08:00:00+00:00"


def make_session(user_id: str = TEST_USER_ID, email: str = TEST_EMAIL) -> Session:
    return Session(user=UserInfo(id=user_id, email=email), access_token=f"token-{user_id}", expires_at=1_900_000_000)


def worker_row(worker_id: str, nom: str, departement: str, created_at: str, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": worker_id,
        "nom": nom,
        "postnom": "Tshibanda",
        "prenom": "Jean",
        "telephone": "+33 6 12 00 00 00",
        "departement": departement,
        "sexe": "Masculin",
        "niveau_etudes": "L2",
        "date_adhesion": "2023-05-02",
        "created_by": TEST_USER_ID,
        "created_at": created_at,
    }
    row.update(overrides)
    return row


def sample_rows() -> list[dict[str, Any]]:
    return [
        worker_row("w-mbuyi", "Mbuyi", "Finance", T1),
        worker_row("w-kalonji", "Kalonji", "Informatique", T2, prenom="Marie", sexe="Féminin", niveau_etudes="Master"),
    ]


# --------------------------------------------------------------------------
# Auth provider double
# --------------------------------------------------------------------------


class FakeSubscription:
    def __init__(self, provider: FakeAuthProvider, callback: Any) -> None:
        self.provider = provider
        self.callback = callback

    def unsubscribe(self) -> None:
        if self.callback in self.provider.callbacks:
            self.provider.callbacks.remove(self.callback)


class FakeAuthProvider:
    def __init__(self, session: Session | None = None) -> None:
        self.session = session
        self.accounts: dict[str, tuple[str, UserInfo]] = {}
        self.callbacks: list[Any] = []
        self.get_session_error: Exception | None = None
        self.sign_out_error: AuthError | None = None
        self._ids = itertools.count(2)
        if session is not None:
            self.accounts[session.user.email or ""] = (TEST_PASSWORD, session.user)

    async def sign_up(self, credentials: Credentials) -> UserInfo | None:
        if credentials.email in self.accounts:
            raise AuthError(ErrorCode.DUPLICATE_SIGNUP, "Un utilisateur avec cet email existe déjà.")
        user = UserInfo(id=f"user-{next(self._ids)}", email=credentials.email)
        self.accounts[credentials.email] = (credentials.password, user)
        return user

    async def sign_in(self, credentials: Credentials) -> Session:
        account = self.accounts.get(credentials.email)
        if account is None or account[0] != credentials.password:
            raise AuthError(ErrorCode.INVALID_CREDENTIALS, "Invalid login credentials")
        self.session = make_session(account[1].id, credentials.email)
        self.emit(SessionEvent.SIGNED_IN, self.session)
        return self.session

    async def sign_out(self) -> None:
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.session = None
        self.emit(SessionEvent.SIGNED_OUT, None)

    async def get_session(self) -> Session | None:
        if self.get_session_error is not None:
            raise self.get_session_error
        return self.session

    async def get_user(self) -> UserInfo | None:
        return self.session.user if self.session else None

    def on_session_change(self, callback: Any) -> FakeSubscription:
        self.callbacks.append(callback)
        return FakeSubscription(self, callback)

    def emit(self, event: SessionEvent, session: Session | None) -> None:
        for callback in list(self.callbacks):
            callback(event, session)


# --------------------------------------------------------------------------
# Supabase table double implementing the query-builder chain
# --------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


class FakeTable:
    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows: list[dict[str, Any]] = [dict(r) for r in rows or []]
        self.calls: list[dict[str, Any]] = []
        self.error: Exception | None = None
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    def actions(self) -> list[str]:
        return [call["action"] for call in self.calls]

    def run(self, query: FakeQuery) -> list[dict[str, Any]]:
        self.calls.append(
            {
                "action": query.action,
                "filters": list(query.filters),
                "order": query.order_by,
                "payload": query.payload,
            }
        )
        if self.error is not None:
            raise self.error

        if query.action == "insert":
            row = dict(query.payload)
            row.setdefault("id", f"w-new-{next(self._ids)}")
            row.setdefault("created_at", f"2030-01-01T00:00:{next(self._clock):02d}+00:00")
            self.rows.append(row)
            return [dict(row)]

        matched = [r for r in self.rows if all(r.get(col) == val for col, val in query.filters)]

        if query.action == "update":
            for row in matched:
                row.update(query.payload)
            return [dict(r) for r in matched]

        if query.action == "delete":
            self.rows = [r for r in self.rows if r not in matched]
            return [dict(r) for r in matched]

        if query.order_by is not None:
            column, desc = query.order_by
            matched = sorted(matched, key=lambda r: r[column], reverse=desc)
        if query.limit_n is not None:
            matched = matched[: query.limit_n]
        return [dict(r) for r in matched]


class FakeQuery:
    def __init__(self, table: FakeTable) -> None:
        self.table = table
        self.action = "select"
        self.payload: Any = None
        self.filters: list[tuple[str, Any]] = []
        self.order_by: tuple[str, bool] | None = None
        self.limit_n: int | None = None

    def select(self, *columns: str) -> FakeQuery:
        self.action = "select"
        return self

    def insert(self, payload: dict[str, Any]) -> FakeQuery:
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]) -> FakeQuery:
        self.action = "update"
        self.payload = payload
        return self

    def delete(self) -> FakeQuery:
        self.action = "delete"
        return self

    def eq(self, column: str, value: Any) -> FakeQuery:
        self.filters.append((column, value))
        return self

    def order(self, column: str, *, desc: bool = False) -> FakeQuery:
        self.order_by = (column, desc)
        return self

    def limit(self, size: int) -> FakeQuery:
        self.limit_n = size
        return self

    async def execute(self) -> FakeResponse:
        return FakeResponse(self.table.run(self))


class FakeSupabaseClient:
    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.workers = FakeTable(rows)
        self.requested_tables: list[str] = []

    def table(self, name: str) -> FakeQuery:
        self.requested_tables.append(name)
        return FakeQuery(self.workers)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# --------------------------------------------------------------------------
# Fixtures
# --------------------------------------------------------------------------


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_provider():
    return FakeAuthProvider()


@pytest.fixture
def logged_in_provider():
    return FakeAuthProvider(session=make_session())


@pytest.fixture
async def store(fake_provider):
    session_store = SessionStore(fake_provider)
    await session_store.initialize()
    yield session_store
    await session_store.close()


@pytest.fixture
async def logged_in_store(logged_in_provider):
    session_store = SessionStore(logged_in_provider)
    await session_store.initialize()
    yield session_store
    await session_store.close()


@pytest.fixture
def fake_supabase():
    return FakeSupabaseClient(sample_rows())


@pytest.fixture
async def repository(fake_supabase):
    repo = WorkerRepository()
    await repo.initialize(fake_supabase, Settings())
    yield repo
    await repo.close()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
async def list_view(repository, logged_in_store, fake_clock):
    view = WorkerListView(repository, logged_in_store, notification_ttl=5.0, clock=fake_clock)
    view.mount()
    await view.refresh()
    yield view
    view.unmount()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def api_client(logged_in_store, repository, list_view):
    app.dependency_overrides[get_session_store] = lambda: logged_in_store
    app.dependency_overrides[get_worker_repository] = lambda: repository
    app.dependency_overrides[get_worker_list_view] = lambda: list_view
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
