"""Integration tests for the aggregate connectivity checks."""
import asyncio

import httpx
import pytest

from sportsync.api_football.client import ApiFootballClient
from sportsync.reporting.checks import SENTINEL_COUNTRY, ConnectionCheckRunner
from sportsync.sync.sync_service import DataSyncService

API_BASE_URL = "https://v3.football.api-sports.io"

LABELS = [
    "API-Football connection",
    "Database connection",
    "Database write",
    "Data transformation",
    "Rate limit probe",
    "Small sync (countries)",
]


@pytest.fixture(name="runner")
def runner_fixture(api_client, backend):
    return ConnectionCheckRunner(api_client, backend, DataSyncService(api_client, backend))


def _by_label(report):
    return {r.test: r for r in report.results}


class TestConnectionChecks:
    @pytest.mark.asyncio
    async def test_all_pass(self, runner):
        report = await runner.run()

        assert report.success is True
        assert [r.test for r in report.results] == LABELS
        assert report.summary.total == 6
        assert report.summary.passed == 6
        assert report.summary.success_rate == 100.0
        assert all(r.duration_ms is not None for r in report.results)

    @pytest.mark.asyncio
    async def test_messages(self, runner):
        results = _by_label(await runner.run())

        assert results["API-Football connection"].message == (
            "API-Football reachable, 3 countries available"
        )
        assert results["Rate limit probe"].message == "3 parallel requests succeeded"
        assert "3 records synced, 0 errors" in results["Small sync (countries)"].message
        transformed = results["Data transformation"].data["transformed"]
        assert transformed["code"] == "GB"

    @pytest.mark.asyncio
    async def test_sentinel_removed_after_write_check(self, runner, fake_backend):
        await runner.check_database_write()
        ids = [r["country_id"] for r in fake_backend.tables["countries"]]
        assert SENTINEL_COUNTRY.country_id not in ids

    @pytest.mark.asyncio
    async def test_write_rejection_fails_overall(self, runner, fake_backend):
        fake_backend.fail("POST", "countries", "permission denied for table countries")

        report = await runner.run()

        assert report.success is False
        results = _by_label(report)
        assert results["Database write"].success is False
        assert "permission denied" in results["Database write"].message
        assert results["API-Football connection"].success is True
        assert results["Small sync (countries)"].success is False

    @pytest.mark.asyncio
    async def test_api_down(self, runner, fake_api):
        fake_api.status_overrides["/countries"] = 500

        report = await runner.run()

        results = _by_label(report)
        assert report.success is False
        assert results["API-Football connection"].success is False
        assert "500" in results["API-Football connection"].message
        assert results["Database connection"].success is True

    @pytest.mark.asyncio
    async def test_empty_country_list_fails_transformation(self, runner, fake_api):
        fake_api.payloads["/countries"] = {"errors": [], "results": 0, "response": []}

        results = _by_label(await runner.run())

        assert results["Data transformation"].success is False
        assert results["Data transformation"].message == "No countries returned by API-Football"

    @pytest.mark.asyncio
    async def test_missing_api_key(self, backend):
        api = ApiFootballClient("")
        runner = ConnectionCheckRunner(api, backend, DataSyncService(api, backend))

        report = await runner.run()

        results = _by_label(report)
        assert "not configured" in results["API-Football connection"].message
        assert results["Database connection"].success is True
        assert api.calls_made == 0


class TestRateLimitCheck:
    @pytest.mark.asyncio
    async def test_waits_for_every_request_and_counts_failures(self, backend):
        received = []
        finished = []

        async def handler(request):
            received.append(request)
            if len(received) == 1:
                return httpx.Response(429)
            await asyncio.sleep(0.02)
            finished.append(request)
            return httpx.Response(200, json={"errors": [], "results": 0, "response": []})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        api = ApiFootballClient("test-api-key", base_url=API_BASE_URL, http=http)
        runner = ConnectionCheckRunner(api, backend, DataSyncService(api, backend))

        outcome = await runner.check_rate_limit()

        assert outcome.success is False
        assert outcome.message.startswith("2/3 parallel requests succeeded")
        assert "429" in outcome.message
        assert len(finished) == 2
        assert api.calls_made == 3
