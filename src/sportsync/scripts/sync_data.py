"""
One-shot full sync: countries, leagues, teams and today's fixtures.

Usage:
    python -m sportsync sync

Each table run is appended to data_sync_logs. Exit code 0 when no record
failed, 1 otherwise.
"""
import asyncio
import logging
import sys

from sportsync.api_football.client import ApiFootballClient
from sportsync.backend.client import BackendClient
from sportsync.config import ConfigurationError, Settings, load_settings
from sportsync.reporting.report import format_results
from sportsync.sync.sync_service import DataSyncService
from sportsync.tracking import DataTrackingService

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def _sync(settings: Settings) -> bool:
    async with BackendClient.from_settings(settings) as backend, \
            ApiFootballClient.from_settings(settings) as api:
        service = DataSyncService(api, backend, DataTrackingService(backend))
        result = await service.sync_all()
        logger.info("API calls used: %d", api.calls_made)

    print(format_results([result]))
    return result.success


def main() -> int:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    try:
        ok = asyncio.run(_sync(settings))
    except Exception:
        logger.exception("Sync failed")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
