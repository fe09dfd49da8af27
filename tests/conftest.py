"""Shared test fixtures.

FakeBackend mimics the slice of PostgREST the code uses (select with
eq/gte/lte/lt/gt filters, order, limit; insert; upsert on_conflict; delete;
the exec_sql RPC) on in-memory tables. FakeApiFootball serves canned
payloads per endpoint. Both sit behind httpx.MockTransport, so the real
clients are exercised end to end without network.
"""
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from sportsync.api_football.client import ApiFootballClient
from sportsync.backend.client import BackendClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SUPABASE_URL = "https://test-project.supabase.co"
API_BASE_URL = "https://v3.football.api-sports.io"

_CREATE_TABLE = re.compile(r"CREATE TABLE (IF NOT EXISTS )?(\w+)", re.IGNORECASE)
_CREATE_INDEX = re.compile(r"CREATE INDEX (IF NOT EXISTS )?(\w+)", re.IGNORECASE)
_RESERVED_PARAMS = {"select", "order", "limit", "on_conflict"}


def load_fixture(name: str) -> Dict[str, Any]:
    return json.loads((FIXTURES_DIR / name).read_text())


# ─── Fake Supabase REST ───────────────────────────────────────────────────────

class FakeBackend:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = tables or {}
        self.indexes: set = set()
        self.executed_sql: List[str] = []
        self.requests: List[httpx.Request] = []
        # (method, table) -> (status, message, code); method "*" matches any
        self.failures: Dict[Tuple[str, str], Tuple[int, str, str]] = {}
        self.has_exec_sql = True
        self._next_id = 1

    def fail(self, method: str, table: str, message: str, status: int = 403, code: str = "42501"):
        self.failures[(method, table)] = (status, message, code)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/rest/v1/")

        if path.startswith("rpc/"):
            return self._rpc(path[len("rpc/"):], json.loads(request.content or b"{}"))

        failure = self.failures.get((request.method, path)) or self.failures.get(("*", path))
        if failure:
            status, message, code = failure
            return httpx.Response(status, json={"message": message, "code": code})

        if path not in self.tables:
            return httpx.Response(
                404,
                json={"message": f'relation "public.{path}" does not exist', "code": "42P01"},
            )

        params = list(request.url.params.multi_items())
        if request.method == "GET":
            return httpx.Response(200, json=self._select(path, params))
        if request.method == "POST":
            return httpx.Response(201, json=self._write(path, params, json.loads(request.content)))
        if request.method == "DELETE":
            return httpx.Response(200, json=self._delete(path, params))
        return httpx.Response(405, json={"message": "method not allowed"})

    def _rpc(self, function: str, payload: Dict[str, Any]) -> httpx.Response:
        if function != "exec_sql" or not self.has_exec_sql:
            return httpx.Response(
                404,
                json={"message": f"Could not find the function public.{function}", "code": "PGRST202"},
            )
        sql = payload["sql_query"]
        self.executed_sql.append(sql)
        table_match = _CREATE_TABLE.search(sql)
        index_match = _CREATE_INDEX.search(sql)
        if table_match:
            if_not_exists, name = table_match.groups()
            if name in self.tables and not if_not_exists:
                return httpx.Response(200, json=f'Error: relation "{name}" already exists')
            self.tables.setdefault(name, [])
        elif index_match:
            self.indexes.add(index_match.group(2))
        return httpx.Response(200, json="SQL executed successfully")

    def _matches(self, row: Dict[str, Any], params: List[Tuple[str, str]]) -> bool:
        for column, expr in params:
            if column in _RESERVED_PARAMS:
                continue
            op, _, value = expr.partition(".")
            actual = row.get(column)
            actual = "" if actual is None else str(actual)
            if op == "eq" and not actual == value:
                return False
            if op == "gte" and not actual >= value:
                return False
            if op == "lte" and not actual[: len(value)] <= value:
                return False
            if op == "lt" and not actual < value:
                return False
            if op == "gt" and not actual > value:
                return False
        return True

    def _select(self, table: str, params: List[Tuple[str, str]]) -> List[Dict[str, Any]]:
        rows = [dict(r) for r in self.tables[table] if self._matches(r, params)]
        query = dict(params)
        if "order" in query:
            column, _, direction = query["order"].partition(".")
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=direction == "desc")
        if "limit" in query:
            rows = rows[: int(query["limit"])]
        return rows

    def _write(self, table, params, payload) -> List[Dict[str, Any]]:
        rows = payload if isinstance(payload, list) else [payload]
        conflict = dict(params).get("on_conflict")
        written = []
        for row in rows:
            row = dict(row)
            if conflict:
                keys = conflict.split(",")
                existing = next(
                    (r for r in self.tables[table] if all(r.get(k) == row.get(k) for k in keys)),
                    None,
                )
                if existing is not None:
                    existing.update(row)
                    written.append(dict(existing))
                    continue
            if table == "data_sync_logs":
                row.setdefault("id", self._next_id)
                self._next_id += 1
            self.tables[table].append(row)
            written.append(dict(row))
        return written

    def _delete(self, table, params) -> List[Dict[str, Any]]:
        removed = [r for r in self.tables[table] if self._matches(r, params)]
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, params)]
        return removed


@pytest.fixture(name="fake_backend")
def fake_backend_fixture() -> FakeBackend:
    """Backend with the entity tables present but data_sync_logs not yet created."""
    return FakeBackend(
        tables={name: [] for name in ("countries", "seasons", "leagues", "teams", "fixtures")}
    )


@pytest.fixture(name="backend")
def backend_fixture(fake_backend: FakeBackend) -> BackendClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_backend.handler))
    return BackendClient(SUPABASE_URL, "test-key", http=http)


# ─── Fake API-Football ────────────────────────────────────────────────────────

class FakeApiFootball:
    def __init__(self):
        self.payloads: Dict[str, Dict[str, Any]] = {
            "/countries": load_fixture("api_countries.json"),
            "/leagues": load_fixture("api_leagues.json"),
            "/teams": load_fixture("api_teams.json"),
            "/fixtures": load_fixture("api_fixtures.json"),
        }
        self.status_overrides: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.status_overrides:
            return httpx.Response(self.status_overrides[path])
        body = self.payloads.get(path)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, json=body)


@pytest.fixture(name="fake_api")
def fake_api_fixture() -> FakeApiFootball:
    return FakeApiFootball()


@pytest.fixture(name="api_client")
def api_client_fixture(fake_api: FakeApiFootball) -> ApiFootballClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    return ApiFootballClient("test-api-key", base_url=API_BASE_URL, http=http)
