"""
In-memory stand-in for the Supabase client, covering the query builder,
rpc, storage and auth calls the services make.
"""
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from school_portal.core.rate_limit import limiter
from school_portal.database.supabase_client import (
    CODE_VERIFIER_KEY, get_service_supabase, get_session_client_factory, get_supabase
)
from school_portal.main import app
from school_portal.modules.auth.service import clear_auth_cache

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

TABLE_DEFAULTS = {
    "user_roles": {"approved": False, "pending_approval": True, "email": None},
    "user_permissions": {"granted": False},
}


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: List[tuple] = []
        self.orders: List[tuple] = []
        self._limit: Optional[int] = None
        self._offset = 0

    # builder
    def select(self, *columns, **kwargs):
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def offset(self, count):
        self._offset = count
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    # execution
    def _matches(self, row: dict) -> bool:
        for kind, column, value in self.filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "in" and row.get(column) not in value:
                return False
        return True

    def _payload_rows(self) -> List[dict]:
        if self.payload is None:
            return []
        return list(self.payload) if isinstance(self.payload, list) else [self.payload]

    def _check_failures(self):
        eq_values = {column: value for kind, column, value in self.filters if kind == "eq"}
        for table, op, match in self.db.failures:
            if table != self.table or op != self.op:
                continue
            candidates = [eq_values] + self._payload_rows()
            if not match or any(all(c.get(k) == v for k, v in match.items()) for c in candidates):
                raise Exception(f"simulated {op} failure on {table}")

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.op))
        self._check_failures()
        rows = self.db.rows(self.table)

        if self.op == "insert":
            return FakeResponse([dict(self.db.new_row(self.table, item)) for item in self._payload_rows()])

        if self.op == "upsert":
            keys = self.on_conflict.split(",") if self.on_conflict else ["id"]
            saved = []
            for item in self._payload_rows():
                existing = next(
                    (row for row in rows if all(row.get(k) == item.get(k) for k in keys)),
                    None
                )
                if existing is not None:
                    existing.update(item)
                    saved.append(dict(existing))
                else:
                    saved.append(dict(self.db.new_row(self.table, item)))
            return FakeResponse(saved)

        matched = [row for row in rows if self._matches(row)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in matched])

        # Nulls sort last, like Postgres ascending order
        for column, desc in reversed(self.orders):
            present = [row for row in matched if row.get(column) is not None]
            missing = [row for row in matched if row.get(column) is None]
            present.sort(key=lambda row: row[column], reverse=desc)
            matched = present + missing
        matched = matched[self._offset:]
        if self._limit is not None:
            matched = matched[:self._limit]
        return FakeResponse([dict(row) for row in matched])


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.rpc_calls.append((self.name, self.params))
        if self.name in self.db.rpc_failures:
            raise Exception(f"simulated rpc failure: {self.name}")
        result = self.db.rpc_results.get(self.name)
        return FakeResponse(result(self.params) if callable(result) else result)


class FakeBucket:
    def __init__(self, db: "FakeSupabase", bucket: str):
        self.db = db
        self.bucket = bucket

    def upload(self, path, file, file_options=None):
        if self.db.storage_fails:
            raise Exception("simulated storage failure")
        self.db.uploads[(self.bucket, path)] = (file, file_options or {})
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.bucket}/{path}"


class FakeStorage:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def from_(self, bucket):
        return FakeBucket(self.db, bucket)


class FakeAuthAdmin:
    def __init__(self, auth: "FakeAuth"):
        self.auth = auth

    def list_users(self):
        if self.auth.admin_fails:
            raise Exception("simulated auth admin failure")
        return list(self.auth.users.values())

    def sign_out(self, jwt, scope="global"):
        self.auth.revoked.append(jwt)


class FakeMemoryStorage:
    def __init__(self):
        self.storage: Dict[str, str] = {}

    def get_item(self, key):
        return self.storage.get(key)

    def set_item(self, key, value):
        self.storage[key] = value

    def remove_item(self, key):
        self.storage.pop(key, None)


class FakeAuth:
    def __init__(self, storage: FakeMemoryStorage):
        self.storage = storage
        self.users: Dict[str, SimpleNamespace] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.codes: Dict[str, str] = {}
        self.revoked: List[str] = []
        self.admin_fails = False
        self.admin = FakeAuthAdmin(self)

    def add_user(self, user_id: str, email: Optional[str], password: str = "secret123") -> str:
        self.users[user_id] = SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata={},
            app_metadata={},
            created_at=BASE_TIME.isoformat(),
        )
        if email:
            self.passwords[email] = password
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def _session(self, user_id: str):
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return SimpleNamespace(
            user=self.users[user_id],
            session=SimpleNamespace(access_token=token, refresh_token=f"refresh-{user_id}"),
        )

    def get_user(self, jwt=None):
        user_id = self.tokens.get(jwt)
        if user_id is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.users[user_id])

    def sign_in_with_password(self, credentials):
        email = credentials["email"]
        if self.passwords.get(email) != credentials["password"]:
            raise Exception("Invalid login credentials")
        user_id = next(user.id for user in self.users.values() if user.email == email)
        return self._session(user_id)

    def sign_up(self, credentials):
        if credentials["email"] in self.passwords:
            raise Exception("User already registered")
        user_id = str(uuid.uuid4())
        self.add_user(user_id, credentials["email"], credentials["password"])
        self.users[user_id].user_metadata = credentials.get("options", {}).get("data", {})
        return SimpleNamespace(user=self.users[user_id], session=None)

    def sign_in_with_oauth(self, credentials):
        redirect_to = credentials.get("options", {}).get("redirect_to", "")
        verifier = f"verifier-{uuid.uuid4().hex}"
        self.storage.set_item(CODE_VERIFIER_KEY, verifier)
        return SimpleNamespace(
            provider=credentials["provider"],
            url=(
                f"https://auth.test/authorize?provider={credentials['provider']}&redirect_to={redirect_to}"
                f"&code_challenge=challenge-{verifier}&code_challenge_method=s256"
            ),
        )

    def exchange_code_for_session(self, params):
        user_id = self.codes.pop(params["auth_code"], None)
        if user_id is None:
            raise Exception("invalid flow state, no valid flow state found")
        return self._session(user_id)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.calls: List[tuple] = []
        self.failures: List[tuple] = []
        self.rpc_results: Dict[str, Any] = {}
        self.rpc_failures: set = set()
        self.rpc_calls: List[tuple] = []
        self.uploads: Dict[tuple, tuple] = {}
        self.storage_fails = False
        self.options = SimpleNamespace(storage=FakeMemoryStorage())
        self.auth = FakeAuth(self.options.storage)
        self.storage = FakeStorage(self)
        self._clock = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Optional[dict] = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})

    def rows(self, table: str) -> List[dict]:
        return self.tables.setdefault(table, [])

    def new_row(self, table: str, item: dict) -> dict:
        self._clock += 1
        row = dict(TABLE_DEFAULTS.get(table, {}))
        row["id"] = str(uuid.uuid4())
        row["created_at"] = (BASE_TIME + timedelta(seconds=self._clock)).isoformat()
        row.update(item)
        self.rows(table).append(row)
        return row

    def fail(self, table: str, op: str, **match):
        """Make matching executions raise; match compares eq filters or payload fields"""
        self.failures.append((table, op, match))

    def writes(self, table: str) -> List[str]:
        return [op for name, op in self.calls if name == table and op != "select"]

    # seeding helpers
    def add_account(
        self,
        user_id: str,
        email: Optional[str] = None,
        role: Optional[str] = None,
        approved: bool = True,
        permissions=(),
        store_email: bool = True,
    ) -> Dict[str, str]:
        email = email or f"{user_id}@school.ac.th"
        token = self.auth.add_user(user_id, email)
        if role:
            self.new_row("user_roles", {
                "user_id": user_id,
                "role": role,
                "email": email if store_email else None,
                "approved": approved,
                "pending_approval": not approved,
            })
        for name in permissions:
            self.new_row("user_permissions", {"user_id": user_id, "permission_name": name, "granted": True})
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_session_client_factory] = lambda: lambda: db
    limiter.reset()
    clear_auth_cache()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def admin_headers(db) -> Dict[str, str]:
    return db.add_account("admin-1", email="admin@school.ac.th", role="admin")


@pytest.fixture
def teacher_headers(db) -> Dict[str, str]:
    return db.add_account("teacher-1", email="teacher@school.ac.th", role="teacher")
