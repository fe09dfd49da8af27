"""Tests for APScheduler job configuration and the sync job body."""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from sportsync.models.sync import SyncRunSummary
from sportsync.scheduler.jobs import SCHEDULES, _run_sync_job, build_scheduler


def _fields(job):
    return {f.name: str(f) for f in job.trigger.fields}


class TestBuildScheduler:
    def test_returns_scheduler(self):
        scheduler = build_scheduler(MagicMock())
        assert isinstance(scheduler, AsyncIOScheduler)

    def test_all_jobs_registered(self):
        scheduler = build_scheduler(MagicMock())
        job_ids = {job.id for job in scheduler.get_jobs()}
        assert job_ids == {job_id for job_id, _, _ in SCHEDULES}

    def test_jobs_are_cron(self):
        scheduler = build_scheduler(MagicMock())
        for job in scheduler.get_jobs():
            assert job.trigger.__class__.__name__ == "CronTrigger"

    def test_nightly_reference_data_hours(self):
        scheduler = build_scheduler(MagicMock())
        jobs = {job.id: job for job in scheduler.get_jobs()}
        assert _fields(jobs["daily_countries"])["hour"] == "2"
        assert _fields(jobs["daily_leagues"])["hour"] == "3"
        assert _fields(jobs["daily_teams"])["hour"] == "4"

    def test_live_fixtures_every_two_minutes(self):
        scheduler = build_scheduler(MagicMock())
        job = next(j for j in scheduler.get_jobs() if j.id == "live_fixtures")
        assert _fields(job)["minute"] == "*/2"

    def test_jobs_carry_service_and_method(self):
        service = MagicMock()
        scheduler = build_scheduler(service)
        job = next(j for j in scheduler.get_jobs() if j.id == "hourly_fixtures")
        assert job.kwargs == {"sync_service": service, "method": "sync_today_fixtures"}

    def test_timezone_from_settings(self):
        with patch("sportsync.scheduler.jobs.get_settings") as mock_settings:
            mock_settings.return_value.sync_timezone = "Europe/London"
            scheduler = build_scheduler(MagicMock())
        assert str(scheduler.timezone) == "Europe/London"

    def test_scheduler_not_running_on_creation(self):
        scheduler = build_scheduler(MagicMock())
        assert not scheduler.running


# ─── _run_sync_job job body ────────────────────────────────────────────────────

class TestRunSyncJob:
    @pytest.mark.asyncio
    async def test_calls_named_method(self):
        service = MagicMock()
        service.sync_countries = AsyncMock(return_value=SyncRunSummary(49, 0))
        await _run_sync_job(service, "sync_countries")
        service.sync_countries.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog):
        service = MagicMock()
        service.sync_live_fixtures = AsyncMock(side_effect=RuntimeError("API down"))
        await _run_sync_job(service, "sync_live_fixtures")
        assert "API down" in caplog.text
