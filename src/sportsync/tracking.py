"""
DataTrackingService: append sync logs and aggregate them for reporting.

Writes are append-only. Reads that fail are logged and return empty
results, so a reporting screen degrades to "no data" instead of erroring.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

import httpx

from sportsync.backend.client import BackendClient, BackendError
from sportsync.models.sync import SYNC_LOG_TABLE, SyncLogEntry, SyncStatus

logger = logging.getLogger(__name__)


@dataclass
class DailySyncSummary:
    date: date
    total_records_added: int
    total_api_calls: int
    tables_synced: int
    sync_sessions: int
    success_rate: float


@dataclass
class TableSyncStats:
    table_name: str
    total_records_added: int
    total_api_calls: int
    avg_sync_duration_ms: float
    success_rate: float
    last_sync: Optional[datetime]


def _success_rate(logs: Sequence[SyncLogEntry]) -> float:
    if not logs:
        return 0.0
    ok = sum(1 for log in logs if log.status == SyncStatus.SUCCESS.value)
    return ok / len(logs) * 100


def summarize_day(day: date, logs: Sequence[SyncLogEntry]) -> DailySyncSummary:
    return DailySyncSummary(
        date=day,
        total_records_added=sum(log.records_added for log in logs),
        total_api_calls=sum(log.api_calls_used for log in logs),
        tables_synced=len({log.table_name for log in logs}),
        sync_sessions=len(logs),
        success_rate=_success_rate(logs),
    )


def summarize_table(table_name: str, logs: Sequence[SyncLogEntry]) -> TableSyncStats:
    durations = [log.sync_duration_ms for log in logs]
    created = [log.created_at for log in logs if log.created_at is not None]
    return TableSyncStats(
        table_name=table_name,
        total_records_added=sum(log.records_added for log in logs),
        total_api_calls=sum(log.api_calls_used for log in logs),
        avg_sync_duration_ms=sum(durations) / len(durations) if durations else 0.0,
        success_rate=_success_rate(logs),
        last_sync=max(created) if created else None,
    )


class DataTrackingService:
    """Reads and appends `data_sync_logs` rows through the backend client."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def log_sync(self, entry: SyncLogEntry) -> bool:
        """Append one log row. Returns False (and logs) if the backend refuses it."""
        try:
            await self.backend.insert(SYNC_LOG_TABLE, [entry.to_row()])
        except (BackendError, httpx.HTTPError) as exc:
            logger.error("Failed to log sync for %s: %s", entry.table_name, exc)
            return False
        return True

    async def get_sync_logs(
        self,
        start: date,
        end: date,
        table_name: Optional[str] = None,
    ) -> List[SyncLogEntry]:
        """Logs with start <= sync_date <= end, newest first."""
        filters = [
            ("sync_date", "gte", start.isoformat()),
            ("sync_date", "lte", end.isoformat()),
        ]
        if table_name:
            filters.append(("table_name", "eq", table_name))
        try:
            rows = await self.backend.select(
                SYNC_LOG_TABLE, filters=filters, order="created_at.desc"
            )
        except (BackendError, httpx.HTTPError) as exc:
            logger.error("Failed to read sync logs: %s", exc)
            return []
        return [SyncLogEntry.model_validate(row) for row in rows]

    async def get_latest_log(self) -> Optional[SyncLogEntry]:
        try:
            rows = await self.backend.select(
                SYNC_LOG_TABLE, order="created_at.desc", limit=1
            )
        except (BackendError, httpx.HTTPError) as exc:
            logger.error("Failed to read latest sync log: %s", exc)
            return None
        return SyncLogEntry.model_validate(rows[0]) if rows else None

    async def get_daily_summary(self, day: date) -> DailySyncSummary:
        return summarize_day(day, await self.get_sync_logs(day, day))

    async def get_weekly_summary(self, today: Optional[date] = None) -> List[DailySyncSummary]:
        """Seven daily summaries ending today, oldest first."""
        today = today or date.today()
        return [
            await self.get_daily_summary(today - timedelta(days=offset))
            for offset in range(6, -1, -1)
        ]

    async def get_table_stats(
        self,
        table_name: str,
        days: int = 7,
        today: Optional[date] = None,
    ) -> TableSyncStats:
        today = today or date.today()
        logs = await self.get_sync_logs(today - timedelta(days=days), today, table_name)
        return summarize_table(table_name, logs)
