"""
Provision the data_sync_logs table (and indexes) in the Supabase backend.

Usage:
    python -m sportsync setup
    python -m sportsync.scripts.setup_sync_logs   (direct invocation)

Safe to re-run: every statement is CREATE ... IF NOT EXISTS. Set
SEED_SAMPLE_LOGS=true to also insert sample rows for today and yesterday.
Exit code 0 when every step succeeded, 1 otherwise.
"""
import asyncio
import logging
import sys

from sportsync.backend.client import BackendClient
from sportsync.config import ConfigurationError, Settings, load_settings
from sportsync.provisioning.sync_logs import (
    EXEC_SQL_FUNCTION_DDL,
    ensure_sync_log_table,
    seed_sample_logs,
)
from sportsync.reporting.report import format_results, overall_success

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def _provision(settings: Settings) -> bool:
    print("\n🔧 Setting up data_sync_logs...\n")
    async with BackendClient.from_settings(settings) as backend:
        results = [await ensure_sync_log_table(backend)]
        if results[0].success and settings.seed_sample_logs:
            results.append(await seed_sample_logs(backend))

    print(format_results(results))
    if not results[0].success:
        print("\nIf the exec_sql function is missing, create it in the SQL editor:\n")
        print(EXEC_SQL_FUNCTION_DDL)
    return overall_success(results)


def main() -> int:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    try:
        ok = asyncio.run(_provision(settings))
    except Exception:
        logger.exception("Provisioning failed")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
