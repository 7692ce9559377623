from __future__ import annotations

from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from bizdash.errors import BackendError
from bizdash.main import app, get_backend


class FakeBackend:
    """In-memory stand-in for BackendClient."""

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]] | None = None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.insert_calls: List[tuple] = []
        self.rpc_calls: List[tuple] = []
        self.fail_with: str | None = None
        self.failing_keys: set = set()

    def _check(self):
        if self.fail_with:
            raise BackendError(self.fail_with)

    def select(self, table, *, columns="*", order_by=None, descending=False, filters=None):
        self._check()
        rows = [
            dict(r) for r in self.tables.get(table, [])
            if all(str(r.get(k)) == str(v) for k, v in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda r: str(r.get(order_by) or ""), reverse=descending)
        return rows

    def insert(self, table, rows):
        self._check()
        self.insert_calls.append((table, rows))
        self.tables.setdefault(table, []).extend(dict(r) for r in rows)

    def delete_all(self, table):
        self._check()
        self.tables[table] = []

    def rpc(self, function, params):
        self._check()
        self.rpc_calls.append((function, params))
        if params.get("p_setting_key") in self.failing_keys:
            raise BackendError("permission denied")
        if function == "upsert_user_setting":
            rows = self.tables.setdefault("user_settings", [])
            rows[:] = [
                r for r in rows
                if (r["user_id"], r["setting_key"]) != (params["p_user_id"], params["p_setting_key"])
            ]
            rows.append({
                "user_id": params["p_user_id"],
                "setting_key": params["p_setting_key"],
                "setting_value": params["p_setting_value"],
            })

    def close(self):
        pass


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_backend] = lambda: backend
    yield TestClient(app)
    app.dependency_overrides.clear()
