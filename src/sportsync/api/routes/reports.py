"""Data usage reports built from data_sync_logs."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from sportsync.api.deps import get_tracking
from sportsync.tracking import DailySyncSummary, DataTrackingService, TableSyncStats

router = APIRouter()


@router.get("/daily", response_model=DailySyncSummary)
async def daily_report(
    day: Optional[date] = None,
    tracking: DataTrackingService = Depends(get_tracking),
):
    """Totals for one day (default: today)."""
    return await tracking.get_daily_summary(day or date.today())


@router.get("/weekly", response_model=List[DailySyncSummary])
async def weekly_report(
    today: Optional[date] = None,
    tracking: DataTrackingService = Depends(get_tracking),
):
    """Seven daily summaries, oldest first."""
    return await tracking.get_weekly_summary(today)


@router.get("/tables/{table_name}", response_model=TableSyncStats)
async def table_report(
    table_name: str,
    days: int = Query(default=7, ge=1, le=90),
    tracking: DataTrackingService = Depends(get_tracking),
):
    return await tracking.get_table_stats(table_name, days=days)
