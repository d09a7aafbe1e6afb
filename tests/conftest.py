"""Pytest configuration and fixtures"""

import copy
import os
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from attenthive.database.supabase_client import get_auth_client, get_supabase
from attenthive.main import app
from attenthive.modules.auth.service import clear_auth_cache
from attenthive.modules.users.service import UserService


# (table, embedded name) -> (target table, local column, remote column, one-to-many)
RELATIONS = {
    ("care_recipients", "hives"): ("hives", "id", "recipient_id", True),
    ("care_recipients", "care_logs"): ("care_logs", "id", "recipient_id", True),
    ("hives", "users"): ("users", "user_id", "id", False),
    ("hives", "care_recipients"): ("care_recipients", "recipient_id", "id", False),
    ("care_logs", "users"): ("users", "user_id", "id", False),
}

UNIQUE_KEYS = {
    "users": [("email",)],
    "hives": [("recipient_id", "user_id")],
}

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _split_columns(columns: str) -> List[str]:
    parts, depth, current = [], 0, ""
    for ch in columns:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


def _parse_columns(columns: str):
    plain, embeds = [], {}
    for part in _split_columns(columns):
        if "(" in part:
            name = part[:part.index("(")].strip()
            embeds[name] = part[part.index("(") + 1:part.rindex(")")]
        else:
            plain.append(part)
    return plain, embeds


def _is_uuid_column(column: str) -> bool:
    return column == "id" or column.endswith("_id")


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = None


class FakeQuery:
    """The subset of the PostgREST request builder the services use"""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.columns = "*"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.orders = []
        self.limit_count = None

    def select(self, columns: str = "*"):
        self.action = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict: str = None):
        self.action = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, count: int):
        self.limit_count = count
        return self

    def _check_filter_types(self):
        for op, column, value in self.filters:
            if "." in column or not _is_uuid_column(column):
                continue
            for item in value if op == "in" else [value]:
                try:
                    uuid.UUID(str(item))
                except ValueError:
                    raise APIError({
                        "code": "22P02",
                        "message": f'invalid input syntax for type uuid: "{item}"',
                        "hint": None,
                        "details": None,
                    })

    def _matches(self, row: Dict, prefix: str = "") -> bool:
        for op, column, value in self.filters:
            if not column.startswith(prefix):
                continue
            name = column[len(prefix):]
            if "." in name:
                continue
            if op == "eq" and row.get(name) != value:
                return False
            if op == "in" and row.get(name) not in value:
                return False
        return True

    def _project(self, table: str, row: Dict, columns: str, path: str = "") -> Dict:
        plain, embeds = _parse_columns(columns)
        if "*" in plain:
            out = copy.deepcopy(row)
        else:
            out = {c: copy.deepcopy(row.get(c)) for c in plain}
        for name, inner in embeds.items():
            target, local, remote, many = RELATIONS[(table, name)]
            prefix = f"{path}{name}."
            related = [
                r for r in self.db.tables[target]
                if r.get(remote) == row.get(local) and self._matches(r, prefix)
            ]
            projected = [self._project(target, r, inner, prefix) for r in related]
            out[name] = projected if many else (projected[0] if projected else None)
        return out

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.action))
        self._check_filter_types()
        if self.action == "insert":
            return FakeResponse(self.db.insert_rows(self.table_name, self.payload))
        if self.action == "upsert":
            return FakeResponse(self.db.upsert_rows(self.table_name, self.payload, self.on_conflict))

        rows = self.db.tables[self.table_name]
        matched = [r for r in rows if self._matches(r)]

        if self.action == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(matched))
        if self.action == "delete":
            self.db.tables[self.table_name] = [r for r in rows if all(r is not m for m in matched)]
            return FakeResponse(copy.deepcopy(matched))

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        return FakeResponse([self._project(self.table_name, r, self.columns) for r in matched])


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        self.storage.objects[(self.name, path)] = {"content": file, "options": file_options or {}}
        return {"Key": f"{self.name}/{path}"}

    def get_public_url(self, path):
        return f"https://test.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.objects: Dict = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeAuth:
    """Supabase Auth stand-in: accounts by email, opaque bearer tokens"""

    def __init__(self):
        self.accounts: Dict[str, Dict] = {}
        self.tokens: Dict[str, Dict] = {}
        self.get_user_calls = 0

    def create_account(self, email: str, password: str = "password123", name: str = "") -> Dict:
        account = {
            "id": str(uuid.uuid4()),
            "email": email,
            "password": password,
            "user_metadata": {"full_name": name} if name else {},
        }
        self.accounts[email.lower()] = account
        return account

    def issue_token(self, account: Dict) -> str:
        token = f"token-{uuid.uuid4()}"
        self.tokens[token] = account
        return token

    @staticmethod
    def _user(account: Dict):
        return SimpleNamespace(
            id=account["id"],
            email=account["email"],
            user_metadata=account["user_metadata"],
            app_metadata={},
        )

    def sign_up(self, credentials: Dict):
        email = credentials["email"]
        if email.lower() in self.accounts:
            raise Exception("User already registered")
        name = (credentials.get("options") or {}).get("data", {}).get("full_name", "")
        account = self.create_account(email, credentials["password"], name)
        return SimpleNamespace(user=self._user(account), session=None)

    def sign_in_with_password(self, credentials: Dict):
        account = self.accounts.get(credentials["email"].lower())
        if account is None or account["password"] != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = self.issue_token(account)
        return SimpleNamespace(user=self._user(account), session=SimpleNamespace(access_token=token))

    def get_user(self, jwt: str = None):
        self.get_user_calls += 1
        account = self.tokens.get(jwt)
        if account is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self._user(account))

    def sign_out(self):
        return None


class FakeSupabase:
    """In-memory stand-in for supabase.Client"""

    def __init__(self):
        self.tables: Dict[str, List[Dict]] = {
            "users": [],
            "care_recipients": [],
            "hives": [],
            "care_logs": [],
        }
        self.storage = FakeStorage()
        self.auth = FakeAuth()
        self.calls = []
        self._clock = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def _now(self) -> str:
        self._clock += 1
        return (BASE_TIME + timedelta(seconds=self._clock)).isoformat()

    def _check_unique(self, table: str, row: Dict, ignore: Dict = None):
        for keys in UNIQUE_KEYS.get(table, []):
            for existing in self.tables[table]:
                if existing is ignore:
                    continue
                if all(existing.get(k) == row.get(k) for k in keys):
                    raise APIError({
                        "code": "23505",
                        "message": f"duplicate key value violates unique constraint on {table}",
                        "hint": None,
                        "details": None,
                    })

    def insert_rows(self, table: str, payload) -> List[Dict]:
        rows = payload if isinstance(payload, list) else [payload]
        created = []
        for data in rows:
            row = copy.deepcopy(data)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self._now())
            self._check_unique(table, row)
            self.tables[table].append(row)
            created.append(copy.deepcopy(row))
        return created

    def upsert_rows(self, table: str, payload, on_conflict: str) -> List[Dict]:
        keys = [k.strip() for k in (on_conflict or "id").split(",")]
        rows = payload if isinstance(payload, list) else [payload]
        saved = []
        for data in rows:
            existing = next(
                (r for r in self.tables[table] if all(r.get(k) == data.get(k) for k in keys)),
                None
            )
            if existing is None:
                saved.extend(self.insert_rows(table, data))
            else:
                existing.update(copy.deepcopy(data))
                saved.append(copy.deepcopy(existing))
        return saved


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def client(db):
    """Test client wired to the in-memory Supabase"""
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_auth_client] = lambda: db
    clear_auth_cache()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def make_user(db):
    """Create an account with a users row and a bearer token"""
    def _make_user(email: str, name: str = ""):
        account = db.auth.create_account(email, name=name)
        actor = UserService(db).get_or_create_by_email(email, name)
        token = db.auth.issue_token(account)
        return SimpleNamespace(
            id=actor.id,
            email=actor.email,
            name=actor.name,
            actor=actor,
            headers={"Authorization": f"Bearer {token}"},
        )
    return _make_user


@pytest.fixture
def make_recipient(db):
    def _make_recipient(owner, name: str = "Rex", category: str = "PET", subtype: str = "DOG", **fields):
        row = {
            "owner_id": owner.id,
            "name": name,
            "category": category,
            "subtype": subtype,
            "characteristics": [],
            "image_url": None,
        }
        row.update(fields)
        return db.insert_rows("care_recipients", row)[0]
    return _make_recipient


@pytest.fixture
def add_member(db):
    def _add_member(recipient, user, role: str):
        return db.insert_rows("hives", {
            "recipient_id": recipient["id"],
            "user_id": user.id,
            "role": role,
        })[0]
    return _add_member


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", "Alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", "Bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol@example.com", "Carol")


@pytest.fixture
def dave(make_user):
    return make_user("dave@example.com", "Dave")
