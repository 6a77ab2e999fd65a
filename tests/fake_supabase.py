# tests/fake_supabase.py

"""
In-memory stand-in for the Supabase client.

Implements the slice of the query builder and auth API the application
uses, so routers and services can be exercised end to end without a
network. Installed through app.dependency_overrides in conftest.py.
"""

import copy
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional
from uuid import uuid4

from postgrest.exceptions import APIError


UNIQUE_CONSTRAINTS = {
    "complaints": [("complaint_number",)],
    "meeting_rsvps": [("meeting_id", "user_id")],
    "maintenance_payments": [("user_id", "month")],
    "profiles": [("user_id",)],
    "user_roles": [("user_id",)],
}

# user_roles / profiles / meeting_rsvps are keyed by their natural key
NO_ID_TABLES = {"user_roles", "profiles", "meeting_rsvps"}


def unique_violation(table: str, columns) -> APIError:
    return APIError({
        "message": f'duplicate key value violates unique constraint "{table}_{"_".join(columns)}_key"',
        "code": "23505",
        "details": None,
        "hint": None,
    })


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = None


# ============================================================
# Query builder
# ============================================================
class FakeQuery:

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload = None
        self.on_conflict: Optional[str] = None
        self.filters = []
        self.orders = []
        self._limit: Optional[int] = None

    # ----- operations -----
    def select(self, columns: str = "*", **kwargs):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, rows, **kwargs):
        self.op = "insert"
        self.payload = rows
        return self

    def update(self, values: dict, **kwargs):
        self.op = "update"
        self.payload = values
        return self

    def upsert(self, rows, on_conflict: Optional[str] = None, **kwargs):
        self.op = "upsert"
        self.payload = rows
        self.on_conflict = on_conflict
        return self

    def delete(self, **kwargs):
        self.op = "delete"
        return self

    # ----- filters -----
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) <= value)
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, size: int, **kwargs):
        self._limit = size
        return self

    # ----- execution -----
    def _matching(self) -> List[dict]:
        return [row for row in self.db.rows(self.table) if all(f(row) for f in self.filters)]

    def _project(self, row: dict) -> dict:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in self.columns.split(",") if c.strip()]
        return {c: copy.deepcopy(row.get(c)) for c in wanted}

    def execute(self) -> FakeResponse:
        self.db.maybe_fail(self.table, self.op)
        self.db.calls.append((self.table, self.op))
        return getattr(self, f"_execute_{self.op}")()

    def _execute_select(self):
        rows = self._matching()
        for column, desc in reversed(self.orders):
            rows.sort(key=lambda r: (r.get(column) is None, str(r.get(column) or "")), reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return FakeResponse([self._project(r) for r in rows])

    def _execute_insert(self):
        rows = self.payload if isinstance(self.payload, list) else [self.payload]
        return FakeResponse([copy.deepcopy(self.db.add_row(self.table, r)) for r in rows])

    def _execute_update(self):
        updated = []
        for row in self._matching():
            candidate = {**row, **self.payload}
            self.db.check_unique(self.table, candidate, ignore=row)
            row.update(copy.deepcopy(self.payload))
            updated.append(copy.deepcopy(row))
        return FakeResponse(updated)

    def _execute_delete(self):
        doomed = self._matching()
        table = self.db.rows(self.table)
        for row in doomed:
            table.remove(row)
        return FakeResponse(copy.deepcopy(doomed))

    def _execute_upsert(self):
        keys = [c.strip() for c in (self.on_conflict or "id").split(",")]
        rows = self.payload if isinstance(self.payload, list) else [self.payload]
        written = []
        for incoming in rows:
            existing = next(
                (r for r in self.db.rows(self.table) if all(r.get(k) == incoming.get(k) for k in keys)),
                None,
            )
            if existing is not None:
                existing.update(copy.deepcopy(incoming))
                written.append(copy.deepcopy(existing))
            else:
                written.append(copy.deepcopy(self.db.add_row(self.table, incoming)))
        return FakeResponse(written)


# ============================================================
# Auth
# ============================================================
class FakeAuthAdmin:

    def __init__(self, auth: "FakeAuth"):
        self.auth = auth

    def create_user(self, attributes: dict):
        email = attributes["email"].lower()
        if email in self.auth.passwords:
            raise APIError({"message": "duplicate key value violates unique constraint \"users_email_key\"", "code": "23505"})
        user = self.auth.register(email, attributes.get("password"))
        return SimpleNamespace(user=user)

    def sign_out(self, jwt: str, scope: str = "global"):
        self.auth.signed_out.append(jwt)
        self.auth.tokens.pop(jwt, None)


class FakeAuth:

    def __init__(self):
        self.users: Dict[str, SimpleNamespace] = {}
        self.tokens: Dict[str, str] = {}
        self.passwords: Dict[str, tuple] = {}
        self.signed_out: List[str] = []
        self.get_user_calls = 0
        self.admin = FakeAuthAdmin(self)

    def register(self, email: str, password: Optional[str]) -> SimpleNamespace:
        user = SimpleNamespace(id=str(uuid4()), email=email)
        self.users[user.id] = user
        self.passwords[email] = (password, user.id)
        return user

    def issue_token(self, user_id: str) -> str:
        token = f"token-{uuid4().hex}"
        self.tokens[token] = user_id
        return token

    def get_user(self, jwt: str):
        self.get_user_calls += 1
        user_id = self.tokens.get(jwt)
        if user_id is None:
            raise APIError({"message": "invalid JWT: token is expired", "code": "bad_jwt"})
        return SimpleNamespace(user=self.users[user_id])

    def sign_in_with_password(self, credentials: dict):
        stored = self.passwords.get(credentials["email"].lower())
        if not stored or stored[0] != credentials["password"]:
            raise APIError({"message": "Invalid login credentials", "code": "invalid_credentials"})
        user = self.users[stored[1]]
        session = SimpleNamespace(
            access_token=self.issue_token(user.id),
            refresh_token=f"refresh-{uuid4().hex}",
            expires_in=3600,
        )
        return SimpleNamespace(user=user, session=session)


# ============================================================
# Client
# ============================================================
class FakeSupabase:

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.auth = FakeAuth()
        self.calls: List[tuple] = []
        self._failures: Dict[tuple, list] = {}
        self._clock = datetime.now(timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, table: str) -> List[dict]:
        return self.tables.setdefault(table, [])

    # ----- row helpers -----
    def _next_timestamp(self) -> str:
        # strictly increasing so "newest first" is deterministic
        self._clock = max(self._clock + timedelta(milliseconds=1), datetime.now(timezone.utc))
        return self._clock.isoformat()

    def check_unique(self, table: str, row: dict, ignore: Optional[dict] = None):
        for columns in UNIQUE_CONSTRAINTS.get(table, []):
            for other in self.rows(table):
                if other is ignore:
                    continue
                if all(other.get(c) == row.get(c) for c in columns):
                    raise unique_violation(table, columns)

    def add_row(self, table: str, row: dict) -> dict:
        stored = copy.deepcopy(row)
        if table not in NO_ID_TABLES:
            stored.setdefault("id", str(uuid4()))
        stored.setdefault("created_at", self._next_timestamp())
        self.check_unique(table, stored)
        self.rows(table).append(stored)
        return stored

    def seed(self, table: str, **row) -> dict:
        return copy.deepcopy(self.add_row(table, row))

    # ----- failure injection -----
    def fail(self, table: str, op: str, times: int = 1, after: int = 0, error: Optional[Exception] = None):
        """Make the next `times` executions of (table, op) raise, after `after` successful ones."""
        self._failures[(table, op)] = [after, times, error or APIError({"message": "connection reset by peer", "code": "08006"})]

    def maybe_fail(self, table: str, op: str):
        plan = self._failures.get((table, op))
        if not plan:
            return
        if plan[0] > 0:
            plan[0] -= 1
            return
        if plan[1] > 0:
            plan[1] -= 1
            raise plan[2]

    # ----- principals -----
    def add_user(
        self,
        role: Optional[str],
        full_name: str = "Test User",
        wing: Optional[str] = None,
        flat_number: Optional[str] = None,
        email: Optional[str] = None,
        password: str = "password123",
    ) -> SimpleNamespace:
        """Auth user + profile + (unless role is None) one user_roles row, with a live token."""
        email = email or f"{uuid4().hex[:8]}@example.com"
        user = self.auth.register(email, password)
        self.add_row("profiles", {
            "user_id": user.id,
            "full_name": full_name,
            "wing": wing,
            "flat_number": flat_number,
            "phone": None,
        })
        if role is not None:
            self.add_row("user_roles", {"user_id": user.id, "role": role})

        token = self.auth.issue_token(user.id)
        return SimpleNamespace(
            id=user.id,
            email=email,
            password=password,
            token=token,
            headers={"Authorization": f"Bearer {token}"},
        )
