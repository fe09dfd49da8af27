"""
Provision the `data_sync_logs` table in the backend.

DDL is rendered from the SyncLogEntry table definition for PostgreSQL and
sent through the `exec_sql` RPC. Every statement is CREATE ... IF NOT EXISTS,
so reruns are safe and never touch existing rows. There is no rollback:
a failed statement stops the sequence and is reported.

The `exec_sql` function has to exist in the database already (created once
from the Supabase SQL editor); see EXEC_SQL_FUNCTION_DDL.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable

from sportsync.backend.client import BackendClient
from sportsync.models.sync import SYNC_LOG_TABLE, SyncLogEntry, SyncStatus, TestResult
from sportsync.reporting.report import StepOutcome, run_step

logger = logging.getLogger(__name__)

EXEC_SQL_FUNCTION_DDL = """\
CREATE OR REPLACE FUNCTION exec_sql(sql_query text)
RETURNS text
LANGUAGE plpgsql
SECURITY DEFINER
AS $$
BEGIN
  EXECUTE sql_query;
  RETURN 'SQL executed successfully';
EXCEPTION
  WHEN OTHERS THEN
    RETURN 'Error: ' || SQLERRM;
END;
$$;"""

# (table_name, records_added, records_updated, api_calls_used, sync_duration_ms)
SAMPLE_LOGS = [
    ("countries", 50, 0, 1, 1200),
    ("leagues", 25, 5, 2, 2500),
    ("teams", 100, 10, 5, 4500),
    ("fixtures", 200, 50, 10, 8500),
    ("players", 500, 25, 15, 12000),
    ("odds", 1000, 100, 20, 15000),
    ("predictions", 50, 10, 5, 3000),
]


def render_sync_log_ddl() -> List[str]:
    """CREATE TABLE / CREATE INDEX statements for data_sync_logs, all IF NOT EXISTS."""
    dialect = postgresql.dialect()
    table = SyncLogEntry.__table__
    statements = [str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)).strip()]
    for index in sorted(table.indexes, key=lambda i: i.name):
        statements.append(
            str(CreateIndex(index, if_not_exists=True).compile(dialect=dialect)).strip()
        )
    return statements


async def ensure_sync_log_table(backend: BackendClient) -> TestResult:
    """Create data_sync_logs and its indexes if missing, then read the table back."""

    async def _ensure() -> StepOutcome:
        statements = render_sync_log_ddl()
        for statement in statements:
            logger.debug("exec_sql: %s", statement.splitlines()[0])
            await backend.exec_sql(statement)
        rows = await backend.select(SYNC_LOG_TABLE, columns="id", limit=1)
        return StepOutcome(
            True,
            f"{SYNC_LOG_TABLE} ready: {len(statements)} statements applied, "
            f"read-back returned {len(rows)} row(s)",
        )

    return await run_step(f"Ensure {SYNC_LOG_TABLE}", _ensure)


def sample_log_rows(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Sample rows for today plus a scaled-down copy for yesterday."""
    today = today or date.today()
    yesterday = today - timedelta(days=1)
    rows = []
    for day, added, updated, calls, duration in (
        (today, 1.0, 1.0, 1.0, 1.0),
        (yesterday, 0.9, 0.8, 0.9, 0.95),
    ):
        for table_name, records_added, records_updated, api_calls, duration_ms in SAMPLE_LOGS:
            entry = SyncLogEntry(
                table_name=table_name,
                sync_date=day,
                records_added=int(records_added * added),
                records_updated=int(records_updated * updated),
                api_calls_used=int(api_calls * calls),
                sync_duration_ms=int(duration_ms * duration),
                status=SyncStatus.SUCCESS.value,
            )
            rows.append(entry.to_row())
    return rows


async def seed_sample_logs(backend: BackendClient, today: Optional[date] = None) -> TestResult:
    async def _seed() -> StepOutcome:
        rows = sample_log_rows(today)
        await backend.insert(SYNC_LOG_TABLE, rows)
        return StepOutcome(True, f"{len(rows)} sample rows inserted")

    return await run_step("Seed sample sync logs", _seed)
