"""Sync log table and the ephemeral run/report records built around it."""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import DateTime, Index, Text, text
from sqlmodel import Field, SQLModel

SYNC_LOG_TABLE = "data_sync_logs"


class SyncStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncLogEntry(SQLModel, table=True):
    """Outcome of one sync run against one table. Append-only: never updated or deleted."""

    __tablename__ = SYNC_LOG_TABLE
    __table_args__ = (
        Index("idx_data_sync_logs_table_date", "table_name", "sync_date"),
        Index("idx_data_sync_logs_date", "sync_date"),
        Index("idx_data_sync_logs_status", "status"),
        Index("idx_data_sync_logs_created_at", "created_at"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    table_name: str = Field(max_length=100)
    sync_date: date = Field(default_factory=date.today)
    records_added: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    records_updated: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    api_calls_used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    sync_duration_ms: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    status: str = Field(  # SyncStatus value
        default=SyncStatus.SUCCESS.value,
        max_length=20,
        sa_column_kwargs={"server_default": SyncStatus.SUCCESS.value},
    )
    error_message: Optional[str] = Field(default=None, sa_type=Text)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": text("now()")},
    )

    def to_row(self) -> dict:
        """JSON-ready dict for a REST insert (server assigns the id)."""
        return self.model_dump(mode="json", exclude={"id"})


@dataclass
class SyncRunSummary:
    """Tally over one sync operation's attempted records."""

    synced: int = 0
    errors: int = 0

    @property
    def status(self) -> SyncStatus:
        if self.errors == 0:
            return SyncStatus.SUCCESS
        if self.synced > 0:
            return SyncStatus.PARTIAL
        return SyncStatus.FAILED


@dataclass
class TestResult:
    """Outcome of one named step. Created per invocation, never persisted."""

    __test__ = False  # not a pytest test class

    test: str
    success: bool
    message: str
    duration_ms: Optional[int] = None
    data: Optional[Any] = None


@dataclass
class TestSummary:
    __test__ = False

    total: int
    passed: int
    failed: int
    success_rate: float
    total_duration_ms: int
