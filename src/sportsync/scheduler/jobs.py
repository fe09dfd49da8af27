"""
APScheduler jobs for recurring syncs.

Reference data (countries, leagues, teams) refreshes nightly, fixtures
hourly and live fixtures every two minutes. A failed run is logged and left
for the next trigger; nothing is retried.
"""
import logging
from typing import Any, Dict, List, Tuple

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from sportsync.config import get_settings

logger = logging.getLogger(__name__)

# (job id, DataSyncService method, cron fields)
SCHEDULES: List[Tuple[str, str, Dict[str, Any]]] = [
    ("daily_countries", "sync_countries", {"hour": 2, "minute": 0}),
    ("daily_leagues", "sync_leagues", {"hour": 3, "minute": 0}),
    ("daily_teams", "sync_teams", {"hour": 4, "minute": 0}),
    ("hourly_fixtures", "sync_today_fixtures", {"minute": 0}),
    ("live_fixtures", "sync_live_fixtures", {"minute": "*/2"}),
]


def build_scheduler(sync_service) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        sync_service: DataSyncService whose methods the jobs call.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler(timezone=settings.sync_timezone)

    for job_id, method, cron in SCHEDULES:
        scheduler.add_job(
            _run_sync_job,
            trigger="cron",
            id=job_id,
            replace_existing=True,
            kwargs={"sync_service": sync_service, "method": method},
            **cron,
        )

    return scheduler


async def _run_sync_job(sync_service, method: str) -> None:
    """Run one sync method, logging instead of raising."""
    try:
        summary = await getattr(sync_service, method)()
        logger.info("%s finished: %s", method, summary)
    except Exception as exc:
        logger.error("%s failed: %s", method, exc)
