"""Request-scoped clients and services for the routes.

Tests override these with app.dependency_overrides.
"""
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException

from sportsync.api_football.client import ApiFootballClient
from sportsync.backend.client import BackendClient
from sportsync.config import ConfigurationError, Settings, load_settings
from sportsync.reporting.checks import ConnectionCheckRunner
from sportsync.sync.sync_service import DataSyncService
from sportsync.tracking import DataTrackingService

_sync_service: Optional[DataSyncService] = None


def get_app_settings() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


async def get_backend(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[BackendClient, None]:
    async with BackendClient.from_settings(settings) as backend:
        yield backend


async def get_api(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[ApiFootballClient, None]:
    async with ApiFootballClient.from_settings(settings) as api:
        yield api


def get_tracking(backend: BackendClient = Depends(get_backend)) -> DataTrackingService:
    return DataTrackingService(backend)


def get_sync_service(settings: Settings = Depends(get_app_settings)) -> DataSyncService:
    """Return the process-wide sync service, creating it on first call.

    Triggered syncs share this instance, so its running flag refuses a second
    full sync while one is in progress. Its clients live as long as the app.
    """
    global _sync_service
    if _sync_service is None:
        backend = BackendClient.from_settings(settings)
        _sync_service = DataSyncService(
            ApiFootballClient.from_settings(settings),
            backend,
            DataTrackingService(backend),
        )
    return _sync_service


def get_check_runner(
    api: ApiFootballClient = Depends(get_api),
    backend: BackendClient = Depends(get_backend),
) -> ConnectionCheckRunner:
    service = DataSyncService(api, backend, DataTrackingService(backend))
    return ConnectionCheckRunner(api, backend, service)
