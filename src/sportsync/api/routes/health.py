"""Connectivity checks over HTTP."""
from dataclasses import asdict

from fastapi import APIRouter, Depends

from sportsync.api.deps import get_check_runner
from sportsync.reporting.checks import ConnectionCheckRunner

router = APIRouter()


@router.get("/checks")
async def run_checks(runner: ConnectionCheckRunner = Depends(get_check_runner)):
    """Run every connectivity check. `success` is true only if all passed."""
    report = await runner.run()
    return asdict(report)
