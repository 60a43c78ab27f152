"""
POST /api/report
================
Replays a recorded event stream through a FocusReporter and returns the
rendered report.

Accepts the lifecycle events in engine order (run_start, suite_start,
record, suite_end, run_report). Each event may carry an ``at`` timestamp
in seconds; timestamps drive suite durations and the run's wall time. A
stream without a run_report event is reported at its end.

Errors:
    - malformed events / options → 422 (pydantic validation)
    - a record with no recognisable outcome → 422
"""
import io
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from focusreport.core.config import ReporterOptions, RunContext
from focusreport.models.test_record import TestRecord
from focusreport.parser.classification import UnclassifiableResultError
from focusreport.reporters.focus_reporter import FocusReporter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Report"])

EventName = Literal["run_start", "suite_start", "suite_end", "record", "run_report"]


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------
class RunEvent(BaseModel):
    event: EventName
    at: Optional[float] = None
    suite: Optional[str] = None
    record: Optional[TestRecord] = None

    @model_validator(mode="after")
    def check_payload(self) -> "RunEvent":
        if self.event in ("suite_start", "suite_end") and not self.suite:
            raise ValueError(f"'{self.event}' events require a suite name")
        if self.event == "record" and self.record is None:
            raise ValueError("'record' events require a record")
        return self


class ReportRequest(BaseModel):
    options: ReporterOptions = Field(default_factory=ReporterOptions)
    cwd: str = ""
    events: List[RunEvent] = []


class TotalsSummary(BaseModel):
    count: int
    assertions: int
    failures: int
    errors: int
    skips: int
    total_time: float


class ReportResponse(BaseModel):
    status: str                # pass / skip / error / failure
    has_big_problems: bool
    totals: TotalsSummary
    output: str                # live marks + report, exactly as a terminal would see it


class _ReplayClock:
    """Clock that reports the timestamp of the event being replayed."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


# ---------------------------------------------------------------------------
# Helper: replay events into a reporter
# ---------------------------------------------------------------------------
def replay_events(request: ReportRequest) -> FocusReporter:
    clock = _ReplayClock()
    reporter = FocusReporter(
        options=request.options,
        io=io.StringIO(),
        context=RunContext(cwd=request.cwd, environ={}, is_tty=False),
        clock=clock,
    )

    reported = False
    for event in request.events:
        if event.at is not None:
            clock.now = event.at

        if event.event == "run_start":
            reporter.on_run_start()
        elif event.event == "suite_start":
            reporter.on_suite_start(event.suite)
        elif event.event == "suite_end":
            reporter.on_suite_end(event.suite)
        elif event.event == "record":
            reporter.on_test_record(event.record)
        elif event.event == "run_report":
            reporter.on_run_report()
            reported = True

    if not reported:
        reporter.on_run_report()
    return reporter


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------
@router.post("/report", response_model=ReportResponse)
async def report_run(request: ReportRequest):
    """Render the focus report for a recorded run."""
    logger.info("[API] Report request with %d event(s)", len(request.events))

    try:
        reporter = replay_events(request)
    except UnclassifiableResultError as exc:
        logger.error("[API] Unclassifiable result in event stream: %s", exc, exc_info=True)
        raise HTTPException(status_code=422, detail=str(exc))

    agg = reporter.aggregator
    t = agg.totals
    return ReportResponse(
        status=agg.run_status(),
        has_big_problems=agg.has_big_problems(),
        totals=TotalsSummary(
            count=t.count,
            assertions=t.assertions,
            failures=t.failures,
            errors=t.errors,
            skips=t.skips,
            total_time=t.total_time,
        ),
        output=reporter.io.getvalue(),
    )
