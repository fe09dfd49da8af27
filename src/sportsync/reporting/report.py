"""
Run named steps and turn their outcomes into TestResult records.

A step is an async callable returning one of:
  - SyncRunSummary  -> success when errors == 0, message quotes both counts
  - StepOutcome     -> used as-is
  - anything else   -> success, value kept in `data`

Exceptions raised by a step are caught here and become a failed result
carrying the exception text. They are never re-raised.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, List, NamedTuple, Optional, Sequence

from sportsync.models.sync import (
    SyncLogEntry,
    SyncRunSummary,
    TestResult,
    TestSummary,
)

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[Any]]
Describe = Callable[[Any], str]


@dataclass
class StepOutcome:
    success: bool
    message: str
    data: Optional[Any] = None


class Step(NamedTuple):
    label: str
    operation: Operation
    describe: Optional[Describe] = None


def describe_summary(summary: SyncRunSummary) -> str:
    return f"{summary.synced} records synced, {summary.errors} errors"


def elapsed_ms(started: float) -> int:
    """Wall-clock milliseconds since `started` (a time.time() value), never negative."""
    return max(0, int((time.time() - started) * 1000))


async def run_step(
    label: str, operation: Operation, describe: Optional[Describe] = None
) -> TestResult:
    """Await `operation`, time it and build a TestResult. Never raises."""
    started = time.time()
    try:
        outcome = await operation()
    except Exception as exc:
        message = f"{label} failed: {str(exc) or exc.__class__.__name__}"
        logger.warning(message)
        return TestResult(
            test=label,
            success=False,
            message=message,
            duration_ms=elapsed_ms(started),
        )

    duration_ms = elapsed_ms(started)
    if isinstance(outcome, StepOutcome):
        result = TestResult(label, outcome.success, outcome.message, duration_ms, outcome.data)
    elif isinstance(outcome, SyncRunSummary):
        message = (describe or describe_summary)(outcome)
        result = TestResult(label, outcome.errors == 0, message, duration_ms, outcome)
    else:
        message = describe(outcome) if describe else "OK"
        result = TestResult(label, True, message, duration_ms, outcome)

    logger.info("%s: %s (%d ms)", label, result.message, duration_ms)
    return result


async def run_all(steps: Sequence[Step]) -> List[TestResult]:
    """Run every step concurrently; results come back in submission order."""
    return list(
        await asyncio.gather(
            *(run_step(s.label, s.operation, s.describe) for s in steps)
        )
    )


def overall_success(results: Sequence[TestResult]) -> bool:
    return all(r.success for r in results)


def summarize(results: Sequence[TestResult]) -> TestSummary:
    total = len(results)
    passed = sum(1 for r in results if r.success)
    return TestSummary(
        total=total,
        passed=passed,
        failed=total - passed,
        success_rate=(passed / total) * 100 if total else 0.0,
        total_duration_ms=sum(r.duration_ms or 0 for r in results),
    )


def format_results(results: Sequence[TestResult]) -> str:
    """Human-readable table: one line per result, then a passed/total footer."""
    lines = []
    for r in results:
        icon = "✅" if r.success else "❌"
        timing = f" ({r.duration_ms} ms)" if r.duration_ms is not None else ""
        lines.append(f"{icon} {r.test}: {r.message}{timing}")
    summary = summarize(results)
    lines.append(f"\n{summary.passed}/{summary.total} passed")
    return "\n".join(lines)


def summary_to_log_entry(
    table_name: str,
    summary: SyncRunSummary,
    duration_ms: int,
    api_calls_used: int = 0,
    error_message: Optional[str] = None,
    sync_date: Optional[date] = None,
) -> SyncLogEntry:
    """SyncLogEntry for a finished run; status follows SyncRunSummary.status."""
    return SyncLogEntry(
        table_name=table_name,
        sync_date=sync_date or date.today(),
        records_added=max(0, summary.synced),
        records_updated=0,
        api_calls_used=max(0, api_calls_used),
        sync_duration_ms=max(0, duration_ms),
        status=summary.status.value,
        error_message=error_message,
    )
