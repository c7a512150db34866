"""In-memory stand-ins for the Supabase client and the clock."""
import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.count = None
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self._order = None
        self._limit = None

    # Actions

    def select(self, columns="*", count=None):
        self.action, self.columns, self.count = "select", columns, count
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.action, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict=""):
        self.action, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.action = "delete"
        return self

    # Filters

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and str(row[column]) >= str(value))
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and str(row[column]) <= str(value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self):
        self.db.calls.append((self.table, self.action))
        rows = self.db.tables.setdefault(self.table, [])
        matching = [row for row in rows if all(check(row) for check in self.filters)]

        if self.action == "select":
            if self._order:
                column, desc = self._order
                matching.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=desc)
            if self._limit is not None:
                matching = matching[:self._limit]
            data = [self._project(row) for row in matching]
            return FakeResponse(data, count=len(data) if self.count else None)

        if self.action == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse([self.db.add(self.table, payload) for payload in payloads])

        if self.action == "update":
            for row in matching:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse([dict(row) for row in matching])

        if self.action == "upsert":
            keys = [key.strip() for key in self.on_conflict.split(",") if key.strip()]
            for row in rows:
                if keys and all(row.get(key) == self.payload.get(key) for key in keys):
                    row.update(copy.deepcopy(self.payload))
                    return FakeResponse([dict(row)])
            return FakeResponse([self.db.add(self.table, self.payload)])

        if self.action == "delete":
            self.db.tables[self.table] = [row for row in rows if row not in matching]
            return FakeResponse([dict(row) for row in matching])

        raise AssertionError(f"unsupported action {self.action}")

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        columns = [column.strip() for column in self.columns.split(",")]
        return {column: row.get(column) for column in columns}


class FakeAuth:
    def __init__(self):
        self.tokens = {}

    def get_user(self, token):
        if token not in self.tokens:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[token]))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.auth = FakeAuth()
        self._tick = 0

    def table(self, name):
        return FakeQuery(self, name)

    def add(self, table, payload):
        self._tick += 1
        row = {
            "id": str(uuid.uuid4()),
            "created_at": (datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=self._tick)).isoformat(),
        }
        row.update(copy.deepcopy(payload))
        self.tables.setdefault(table, []).append(row)
        return dict(row)

    def rows(self, table):
        return self.tables.get(table, [])


class FixedClock:
    def __init__(self, now):
        self.current = now
        self.tz = now.tzinfo

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)
