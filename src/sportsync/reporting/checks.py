"""
Aggregate connectivity checks: API-Football, backend reads and writes,
payload transformation, a parallel-request probe and a small sync.

All checks run concurrently. The run succeeds only if every check does.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List

from sportsync.api_football.client import ApiFootballClient
from sportsync.backend.client import BackendClient
from sportsync.models.football import Country, to_row
from sportsync.models.sync import SyncRunSummary, TestResult, TestSummary
from sportsync.reporting.report import (
    Step,
    StepOutcome,
    format_results,
    overall_success,
    run_all,
    summarize,
)
from sportsync.sync.sync_service import DataSyncService
from sportsync.sync.transform import hash_code, transform_country

logger = logging.getLogger(__name__)

# Written and removed again by the write check.
SENTINEL_COUNTRY = Country(
    country_id=hash_code("TST"),
    name="Test Country",
    code="TST",
)
PARALLEL_REQUESTS = 3


@dataclass
class CheckReport:
    success: bool
    results: List[TestResult]
    summary: TestSummary


class ConnectionCheckRunner:
    """Runs the fixed set of checks against the configured services."""

    def __init__(
        self,
        api: ApiFootballClient,
        backend: BackendClient,
        sync_service: DataSyncService,
    ):
        self.api = api
        self.backend = backend
        self.sync_service = sync_service

    def steps(self) -> List[Step]:
        return [
            Step("API-Football connection", self.check_api_connection),
            Step("Database connection", self.check_database_connection),
            Step("Database write", self.check_database_write),
            Step("Data transformation", self.check_data_transformation),
            Step("Rate limit probe", self.check_rate_limit),
            Step("Small sync (countries)", self.check_small_sync),
        ]

    async def run(self) -> CheckReport:
        results = await run_all(self.steps())
        summary = summarize(results)
        logger.info("Checks finished: %d/%d passed", summary.passed, summary.total)
        return CheckReport(overall_success(results), results, summary)

    # ─── Individual checks ───────────────────────────────────────────────────

    async def check_api_connection(self) -> StepOutcome:
        body = await self.api.get_countries()
        return StepOutcome(
            True,
            f"API-Football reachable, {body.get('results', 0)} countries available",
        )

    async def check_database_connection(self) -> StepOutcome:
        rows = await self.backend.select("countries", columns="country_id", limit=1)
        return StepOutcome(True, f"Backend reachable, read {len(rows)} row(s) from countries")

    async def check_database_write(self) -> StepOutcome:
        await self.backend.upsert(
            "countries", to_row(SENTINEL_COUNTRY), on_conflict="country_id"
        )
        await self.backend.delete(
            "countries", [("country_id", "eq", SENTINEL_COUNTRY.country_id)]
        )
        return StepOutcome(True, "Backend write and delete succeeded")

    async def check_data_transformation(self) -> StepOutcome:
        body = await self.api.get_countries()
        countries = body.get("response") or []
        if not countries:
            return StepOutcome(False, "No countries returned by API-Football")
        country = transform_country(countries[0])
        return StepOutcome(
            True,
            f"Transformed {country.name} ({country.code}) -> country_id {country.country_id}",
            data={"raw": countries[0], "transformed": to_row(country)},
        )

    async def check_rate_limit(self) -> StepOutcome:
        # All requests finish before returning; failures are counted, not raised.
        outcomes = await asyncio.gather(
            *(self.api.get_countries() for _ in range(PARALLEL_REQUESTS)),
            return_exceptions=True,
        )
        errors = [o for o in outcomes if isinstance(o, BaseException)]
        succeeded = PARALLEL_REQUESTS - len(errors)
        if errors:
            return StepOutcome(
                False,
                f"{succeeded}/{PARALLEL_REQUESTS} parallel requests succeeded: {errors[0]}",
            )
        return StepOutcome(True, f"{PARALLEL_REQUESTS} parallel requests succeeded")

    async def check_small_sync(self) -> SyncRunSummary:
        return await self.sync_service.sync_countries()


def print_report(report: CheckReport) -> None:
    print(format_results(report.results))
    print("✅ All checks passed" if report.success else "❌ Some checks failed")
