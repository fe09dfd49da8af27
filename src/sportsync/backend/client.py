"""
Thin async client for the Supabase REST (PostgREST) interface.

Only what the sync and provisioning code needs: table select, insert,
upsert with a conflict key, delete with filters, RPC calls and the
`exec_sql` RPC used by provisioning.

Filters are (column, operator, value) triples, rendered the PostgREST way:
("sync_date", "gte", "2025-01-01") -> sync_date=gte.2025-01-01

The client owns its httpx.AsyncClient unless one is injected (tests pass
one built on httpx.MockTransport). Close it with aclose() or `async with`.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import httpx

logger = logging.getLogger(__name__)

Filter = Tuple[str, str, Any]
Rows = Union[Dict[str, Any], Sequence[Dict[str, Any]]]

EXEC_SQL_FUNCTION = "exec_sql"


class BackendError(RuntimeError):
    """Raised when the backend rejects a request (non-2xx or SQL error)."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class BackendClient:
    """Async wrapper over the Supabase REST endpoint for one project."""

    def __init__(
        self,
        url: str,
        key: str,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            url: Project URL, e.g. https://abc.supabase.co
            key: Anon or service-role key, sent as apikey and bearer token.
            http: Optional pre-built AsyncClient.
            timeout: Request timeout when the client builds its own AsyncClient.
        """
        self._rest_url = url.rstrip("/") + "/rest/v1"
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings) -> "BackendClient":
        return cls(
            settings.supabase_url,
            settings.supabase_key,
            timeout=settings.http_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ─── Table operations ────────────────────────────────────────────────────

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Iterable[Filter]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Read rows. `order` uses PostgREST syntax, e.g. "created_at.desc"."""
        params = [("select", columns)] + _filter_params(filters)
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, params=params) or []

    async def insert(self, table: str, rows: Rows) -> List[Dict[str, Any]]:
        return await self._request(
            "POST",
            table,
            json=rows,
            prefer="return=representation",
        ) or []

    async def upsert(
        self, table: str, rows: Rows, on_conflict: str
    ) -> List[Dict[str, Any]]:
        """Insert or merge on the comma-separated conflict columns."""
        return await self._request(
            "POST",
            table,
            params=[("on_conflict", on_conflict)],
            json=rows,
            prefer="resolution=merge-duplicates,return=representation",
        ) or []

    async def delete(
        self, table: str, filters: Iterable[Filter]
    ) -> List[Dict[str, Any]]:
        params = _filter_params(filters)
        if not params:
            # PostgREST refuses unfiltered deletes too; fail before the round trip.
            raise ValueError("delete requires at least one filter")
        return await self._request(
            "DELETE", table, params=params, prefer="return=representation"
        ) or []

    # ─── RPC ─────────────────────────────────────────────────────────────────

    async def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("POST", f"rpc/{function}", json=params or {})

    async def exec_sql(self, sql: str) -> Any:
        """Run a raw statement through the `exec_sql` RPC.

        The database function traps SQL errors and returns them as text
        starting with "Error:", so those are raised here as BackendError.
        """
        result = await self.rpc(EXEC_SQL_FUNCTION, {"sql_query": sql})
        if isinstance(result, str) and result.startswith("Error:"):
            raise BackendError(result[len("Error:"):].strip())
        return result

    # ─── Internal ────────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        url = f"{self._rest_url}/{path}"
        logger.debug("%s %s %s", method, path, params or "")

        response = await self._http.request(
            method, url, params=params, json=json, headers=headers
        )
        if response.is_error:
            raise _error_from_response(response)
        if not response.content:
            return None
        return response.json()


def _filter_params(filters: Optional[Iterable[Filter]]) -> List[Tuple[str, str]]:
    params = []
    for column, operator, value in filters or ():
        if isinstance(value, bool):
            value = str(value).lower()
        params.append((column, f"{operator}.{value}"))
    return params


def _error_from_response(response: httpx.Response) -> BackendError:
    """Build a BackendError from a PostgREST error body ({"message", "code", ...})."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("message"):
        message = body["message"]
        code = body.get("code")
    else:
        message = response.text or response.reason_phrase
        code = None
    return BackendError(
        f"{message} (HTTP {response.status_code})",
        code=code,
        status_code=response.status_code,
    )
