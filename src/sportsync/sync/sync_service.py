"""
DataSyncService: pulls entities from API-Football and upserts them into the backend.

Flow for one table:
  1. Fetch the API payload (one request)
  2. Transform each item and upsert it on its conflict key
  3. Count synced rows and per-row errors into a SyncRunSummary
  4. Append a SyncLogEntry (duration, API calls used, derived status)

A failed fetch counts as one error; a failed row counts as one error and
the loop moves on. Nothing is retried.

The service holds no module-level state: clients are passed in, and the
last-sync times and running flag live on the instance.
"""
import logging
import time
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Optional

from sportsync.backend.client import BackendClient
from sportsync.api_football.client import ApiFootballClient
from sportsync.models.football import to_row
from sportsync.models.sync import SyncRunSummary, TestResult
from sportsync.reporting.report import elapsed_ms, summary_to_log_entry
from sportsync.sync.transform import (
    season_for,
    transform_country,
    transform_fixture,
    transform_league,
    transform_team,
)
from sportsync.tracking import DataTrackingService

logger = logging.getLogger(__name__)

HOUR = 60 * 60

# Minimum seconds between syncs of each kind.
SYNC_INTERVALS: Dict[str, int] = {
    "countries": 24 * HOUR,
    "leagues": 24 * HOUR,
    "teams": 12 * HOUR,
    "fixtures": 30 * 60,
    "live_fixtures": 30,
}


class DataSyncService:
    """Orchestrates API-Football → backend sync for each entity table."""

    def __init__(
        self,
        api: ApiFootballClient,
        backend: BackendClient,
        tracking: Optional[DataTrackingService] = None,
    ):
        """
        Args:
            api: ApiFootballClient; its calls_made counter feeds api_calls_used.
            backend: BackendClient the rows are upserted through.
            tracking: Where SyncLogEntry rows go. None disables sync logging.
        """
        self.api = api
        self.backend = backend
        self.tracking = tracking
        self.is_running = False
        self.last_sync_times: Dict[str, float] = {}

    # ─── Per-table syncs ─────────────────────────────────────────────────────

    async def sync_countries(self) -> SyncRunSummary:
        return await self._sync_table(
            kind="countries",
            table="countries",
            fetch=self.api.get_countries,
            upsert_item=self._upsert_country,
        )

    async def sync_leagues(
        self, country: Optional[str] = None, season: Optional[int] = None
    ) -> SyncRunSummary:
        season = season or date.today().year
        return await self._sync_table(
            kind="leagues",
            table="leagues",
            fetch=lambda: self.api.get_leagues(country=country, season=season),
            upsert_item=lambda raw: self._upsert_league(raw, season),
        )

    async def sync_teams(
        self, league_id: Optional[int] = None, season: Optional[int] = None
    ) -> SyncRunSummary:
        season = season or date.today().year
        return await self._sync_table(
            kind="teams",
            table="teams",
            fetch=lambda: self.api.get_teams(league=league_id, season=season),
            upsert_item=self._upsert_team,
        )

    async def sync_fixtures(
        self,
        league: Optional[int] = None,
        season: Optional[int] = None,
        team: Optional[int] = None,
        on_date: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> SyncRunSummary:
        params = {
            "league": league,
            "season": season,
            "team": team,
            "date": on_date,
            "from": from_date,
            "to": to_date,
        }
        return await self._sync_table(
            kind="fixtures",
            table="fixtures",
            fetch=lambda: self.api.get_fixtures(params),
            upsert_item=self._upsert_fixture,
        )

    async def sync_live_fixtures(self) -> SyncRunSummary:
        return await self._sync_table(
            kind="live_fixtures",
            table="fixtures",
            fetch=self.api.get_live_fixtures,
            upsert_item=self._upsert_fixture,
        )

    async def sync_today_fixtures(self, today: Optional[date] = None) -> SyncRunSummary:
        return await self.sync_fixtures(on_date=(today or date.today()).isoformat())

    async def sync_all(self) -> TestResult:
        """Countries, leagues, teams, then today's fixtures, in dependency order.

        Returns a failed result without syncing if a run is already in progress.
        """
        if self.is_running:
            return TestResult("Full sync", False, "Sync already in progress")

        self.is_running = True
        started = time.time()
        try:
            logger.info("Starting full data synchronization")
            details = {
                "countries": await self.sync_countries(),
                "leagues": await self.sync_leagues(),
                "teams": await self.sync_teams(),
                "fixtures": await self.sync_today_fixtures(),
            }
        finally:
            self.is_running = False

        synced = sum(s.synced for s in details.values())
        errors = sum(s.errors for s in details.values())
        logger.info("Full synchronization finished: %d synced, %d errors", synced, errors)
        return TestResult(
            test="Full sync",
            success=errors == 0,
            message=f"Full synchronization completed: {synced} synced, {errors} errors",
            duration_ms=elapsed_ms(started),
            data=details,
        )

    # ─── Scheduling helpers ──────────────────────────────────────────────────

    def should_sync(self, kind: str, now: Optional[float] = None) -> bool:
        """True when `kind` has never synced or its interval has elapsed."""
        now = time.time() if now is None else now
        return now - self.last_sync_times.get(kind, 0) > SYNC_INTERVALS[kind]

    def get_sync_status(self) -> Dict[str, Any]:
        return {
            "is_running": self.is_running,
            "last_sync_times": dict(self.last_sync_times),
            "intervals": dict(SYNC_INTERVALS),
        }

    # ─── Internal helpers ────────────────────────────────────────────────────

    async def _sync_table(
        self,
        *,
        kind: str,
        table: str,
        fetch: Callable[[], Awaitable[Dict[str, Any]]],
        upsert_item: Callable[[Dict[str, Any]], Awaitable[None]],
    ) -> SyncRunSummary:
        summary = SyncRunSummary()
        started = time.time()
        calls_before = self.api.calls_made
        error_message = None
        logger.info("Syncing %s...", kind)

        try:
            payload = await fetch()
        except Exception as exc:
            logger.error("Error fetching %s from API: %s", kind, exc)
            summary.errors += 1
            error_message = str(exc)
        else:
            for raw in payload.get("response") or []:
                try:
                    await upsert_item(raw)
                    summary.synced += 1
                except Exception as exc:
                    logger.warning("Error syncing %s item: %s", kind, exc)
                    summary.errors += 1
                    error_message = error_message or str(exc)
            self.last_sync_times[kind] = time.time()
            logger.info(
                "%s sync completed: %d synced, %d errors",
                kind.capitalize(), summary.synced, summary.errors,
            )

        if self.tracking is not None:
            await self.tracking.log_sync(
                summary_to_log_entry(
                    table,
                    summary,
                    duration_ms=elapsed_ms(started),
                    api_calls_used=self.api.calls_made - calls_before,
                    error_message=error_message,
                )
            )
        return summary

    async def _upsert_country(self, raw: Dict[str, Any]) -> None:
        await self.backend.upsert(
            "countries", to_row(transform_country(raw)), on_conflict="country_id"
        )

    async def _upsert_league(self, raw: Dict[str, Any], season: int) -> None:
        league = transform_league(raw, default_season=season)
        # League rows reference their season; make sure it exists first.
        await self.backend.upsert(
            "seasons", to_row(season_for(league.season_year)), on_conflict="season_year"
        )
        await self.backend.upsert(
            "leagues", to_row(league), on_conflict="league_id,season_year"
        )

    async def _upsert_team(self, raw: Dict[str, Any]) -> None:
        await self.backend.upsert(
            "teams", to_row(transform_team(raw)), on_conflict="team_id"
        )

    async def _upsert_fixture(self, raw: Dict[str, Any]) -> None:
        await self.backend.upsert(
            "fixtures", to_row(transform_fixture(raw)), on_conflict="fixture_id"
        )
