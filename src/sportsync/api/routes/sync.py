"""Sync trigger and status routes."""
import logging
from datetime import date, datetime
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel

from sportsync.api.deps import get_sync_service, get_tracking
from sportsync.sync.sync_service import DataSyncService
from sportsync.tracking import DataTrackingService

logger = logging.getLogger(__name__)

router = APIRouter()


class SyncStatusResponse(BaseModel):
    status: str
    table_name: Optional[str]
    sync_date: Optional[date]
    created_at: Optional[datetime]
    records_added: Optional[int]
    error_message: Optional[str]
    is_running: bool
    last_sync_times: Dict[str, float]


async def _do_sync(sync_service: DataSyncService) -> None:
    """Background task: run a full sync on the shared service."""
    result = await sync_service.sync_all()
    logger.info("Triggered sync finished: %s", result.message)


@router.post("/trigger")
async def trigger_sync(
    background_tasks: BackgroundTasks,
    sync_service: DataSyncService = Depends(get_sync_service),
):
    """
    Trigger an on-demand full sync.
    Returns immediately; sync runs in background.
    """
    if sync_service.is_running:
        return {"message": "Sync already in progress"}
    background_tasks.add_task(_do_sync, sync_service)
    return {"message": "Sync started"}


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(
    tracking: DataTrackingService = Depends(get_tracking),
    sync_service: DataSyncService = Depends(get_sync_service),
):
    """Return the most recent sync log entry and the in-process sync state."""
    state = sync_service.get_sync_status()
    log = await tracking.get_latest_log()
    if not log:
        return SyncStatusResponse(
            status="never_run",
            table_name=None,
            sync_date=None,
            created_at=None,
            records_added=None,
            error_message=None,
            is_running=state["is_running"],
            last_sync_times=state["last_sync_times"],
        )
    return SyncStatusResponse(
        status=log.status,
        table_name=log.table_name,
        sync_date=log.sync_date,
        created_at=log.created_at,
        records_added=log.records_added,
        error_message=log.error_message,
        is_running=state["is_running"],
        last_sync_times=state["last_sync_times"],
    )
