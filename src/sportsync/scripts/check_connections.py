"""
Smoke-test the backend and API-Football: runs every connectivity check
concurrently and prints a pass/fail table.

Usage:
    python -m sportsync check

Exit code 0 when all checks pass, 1 otherwise.
"""
import asyncio
import logging
import sys

from sportsync.api_football.client import ApiFootballClient
from sportsync.backend.client import BackendClient
from sportsync.config import ConfigurationError, Settings, load_settings
from sportsync.reporting.checks import ConnectionCheckRunner, print_report
from sportsync.sync.sync_service import DataSyncService
from sportsync.tracking import DataTrackingService

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def _check(settings: Settings) -> bool:
    if not settings.has_api_football_key:
        logger.info("API_FOOTBALL_KEY not set, API checks will fail.")

    async with BackendClient.from_settings(settings) as backend, \
            ApiFootballClient.from_settings(settings) as api:
        service = DataSyncService(api, backend, DataTrackingService(backend))
        runner = ConnectionCheckRunner(api, backend, service)
        print("\n🧪 Running connection checks...\n")
        report = await runner.run()

    print_report(report)
    return report.success


def main() -> int:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    try:
        ok = asyncio.run(_check(settings))
    except Exception:
        logger.exception("Connection checks crashed")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
