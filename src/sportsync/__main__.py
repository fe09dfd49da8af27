"""
Main entrypoint: runs the sync scheduler, or a one-shot script.

FastAPI runs separately under uvicorn (for the report endpoints).

Usage:
    python -m sportsync setup       # provision data_sync_logs
    python -m sportsync check       # connectivity checks
    python -m sportsync sync        # one full sync
    python -m sportsync [scheduler] # starts the scheduler
    uvicorn sportsync.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


async def _run_scheduler() -> int:
    from sportsync.api_football.client import ApiFootballClient
    from sportsync.backend.client import BackendClient
    from sportsync.config import ConfigurationError, load_settings
    from sportsync.scheduler.jobs import build_scheduler
    from sportsync.sync.sync_service import DataSyncService
    from sportsync.tracking import DataTrackingService

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    if not settings.has_api_football_key:
        logger.error("API_FOOTBALL_KEY not set. Scheduled syncs would all fail.")
        return 1

    async with BackendClient.from_settings(settings) as backend, \
            ApiFootballClient.from_settings(settings) as api:
        service = DataSyncService(api, backend, DataTrackingService(backend))
        scheduler = build_scheduler(service)
        scheduler.start()
        logger.info("Scheduler started (%s, %s)", settings.app_env, settings.sync_timezone)

        try:
            await asyncio.Event().wait()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Shutting down...")
        finally:
            scheduler.shutdown()
            logger.info("Goodbye.")
    return 0


def main() -> int:
    command = sys.argv[1] if len(sys.argv) > 1 else None
    if command == "setup":
        from sportsync.scripts.setup_sync_logs import main as run
        return run()
    if command == "check":
        from sportsync.scripts.check_connections import main as run
        return run()
    if command == "sync":
        from sportsync.scripts.sync_data import main as run
        return run()
    if command not in (None, "scheduler"):
        print(__doc__)
        return 1
    return asyncio.run(_run_scheduler())


if __name__ == "__main__":
    sys.exit(main())
