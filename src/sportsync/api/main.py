"""FastAPI application factory."""
from fastapi import FastAPI

from sportsync.api.routes import health, reports, sync as sync_routes


def create_app() -> FastAPI:
    """Build and return the FastAPI app."""
    app = FastAPI(
        title="Sportsync API",
        description="Sync status and data usage reports for the football data backend",
        version="0.1.0",
    )

    app.include_router(sync_routes.router, prefix="/sync", tags=["sync"])
    app.include_router(reports.router, prefix="/reports", tags=["reports"])
    app.include_router(health.router, prefix="/health", tags=["health"])

    return app


# Module-level app instance for uvicorn
app = create_app()
