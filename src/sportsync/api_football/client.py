"""
Async client for the API-Football v3 REST API.

Every endpoint is an authenticated GET returning
{"get": ..., "results": N, "errors": [...] | {...}, "response": [...]}.
A non-2xx status or a non-empty `errors` field raises ApiFootballError;
callers read the `response` payload themselves.

`calls_made` counts requests sent, so sync runs can record how much of
the daily quota they used.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from sportsync.config import DEFAULT_API_FOOTBALL_BASE_URL

logger = logging.getLogger(__name__)


class ApiFootballError(RuntimeError):
    """Raised for a missing key, a non-2xx response or an error payload."""


class ApiFootballClient:
    """Thin async wrapper over the API-Football endpoints the sync uses."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_FOOTBALL_BASE_URL,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._host = httpx.URL(self._base_url).host
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self.calls_made = 0

    @classmethod
    def from_settings(cls, settings) -> "ApiFootballClient":
        return cls(
            settings.api_football_key if settings.has_api_football_key else "",
            base_url=settings.api_football_base_url,
            timeout=settings.http_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiFootballClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """GET an endpoint such as "/countries". None-valued params are dropped."""
        if not self._api_key:
            raise ApiFootballError("API-Football key not configured")

        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        logger.info("API-Football request: %s %s", endpoint, query or "")

        self.calls_made += 1
        response = await self._http.get(
            f"{self._base_url}{endpoint}",
            params=query,
            headers={
                "X-RapidAPI-Key": self._api_key,
                "X-RapidAPI-Host": self._host,
            },
        )
        if response.is_error:
            raise ApiFootballError(
                f"API-Football request failed: {response.status_code} {response.reason_phrase}"
            )

        body = response.json()
        errors = body.get("errors")
        if errors:
            raise ApiFootballError(f"API-Football error: {_join_errors(errors)}")
        return body

    async def get_countries(self) -> Dict[str, Any]:
        return await self.get("/countries")

    async def get_leagues(
        self, country: Optional[str] = None, season: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self.get("/leagues", {"country": country, "season": season})

    async def get_teams(
        self,
        league: Optional[int] = None,
        season: Optional[int] = None,
        country: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.get(
            "/teams", {"league": league, "season": season, "country": country}
        )

    async def get_fixtures(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Fixtures filtered by league, season, team, date, from, to or status."""
        return await self.get("/fixtures", params)

    async def get_live_fixtures(self) -> Dict[str, Any]:
        return await self.get("/fixtures", {"live": "all"})

    async def get_status(self) -> Dict[str, Any]:
        """Account status and remaining daily quota."""
        return await self.get("/status")


def _join_errors(errors: Any) -> str:
    # The API returns a list on some endpoints and a {field: message} dict on others.
    if isinstance(errors, dict):
        return ", ".join(f"{key}: {value}" for key, value in errors.items())
    return ", ".join(str(e) for e in errors)
