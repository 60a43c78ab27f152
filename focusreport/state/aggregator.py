"""
Aggregator
==========
Accumulates everything the report needs while a run streams in.

Lifecycle (strictly ordered by the host engine):
    on_run_start → {on_suite_start → on_test_record* → on_suite_end}* → on_run_report

State:
    totals          - RunTotals counters
    records         - every TestRecord, in delivery order
    suite_times     - finished suites as SuiteTiming, in finish order
    _suite_starts   - suite name → start timestamp, for suites still running

Bucket builders are derived views over ``records``: pure, repeatable, never
maintained incrementally.

Not thread-safe. A host running tests on several workers must serialize
events before they reach this object.
"""
import logging
import time
from typing import Callable, Iterable, Optional

from focusreport.models.buckets import LineBucket, SiteBucket
from focusreport.models.run_totals import RunTotals
from focusreport.models.suite_timing import SuiteTiming
from focusreport.models.test_record import TestRecord
from focusreport.parser.classification import Outcome, classify, run_status
from focusreport.parser.location import DEFAULT_TEST_ROOTS, normalize_location

logger = logging.getLogger(__name__)


def suite_name(suite) -> str:
    """Suites may arrive as names, classes or engine objects."""
    if isinstance(suite, str):
        return suite
    for attr in ("name", "__name__"):
        value = getattr(suite, attr, None)
        if isinstance(value, str) and value:
            return value
    return str(suite)


class Aggregator:
    """
    Run-scoped accumulation of test records and suite timings.

    Usage:
        agg = Aggregator(cwd="/work/app")
        agg.on_run_start()
        agg.on_suite_start("UserTest")
        agg.on_test_record(record)
        agg.on_suite_end("UserTest")
        agg.on_run_report()
        agg.build_failure_location_buckets()
    """

    def __init__(
        self,
        cwd: str = "",
        test_roots: Iterable[str] = DEFAULT_TEST_ROOTS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.cwd = cwd
        self.test_roots = tuple(test_roots)
        self._clock = clock or time.monotonic
        self._reset()

    def _reset(self) -> None:
        self.totals = RunTotals()
        self.records: list[TestRecord] = []
        self.suite_times: list[SuiteTiming] = []
        self._suite_starts: dict[str, float] = {}
        self._run_start: Optional[float] = None
        self._running = False

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------
    def on_run_start(self) -> None:
        """Reset for a new run. Ignored while a run is already in progress."""
        if self._running:
            logger.debug("on_run_start received mid-run; keeping current state")
            return
        self._reset()
        self._running = True
        self._run_start = self._clock()

    def on_suite_start(self, suite) -> None:
        name = suite_name(suite)
        if name in self._suite_starts:
            logger.warning("Suite '%s' started twice without ending; last start wins", name)
        self._suite_starts[name] = self._clock()

    def on_suite_end(self, suite) -> SuiteTiming:
        name = suite_name(suite)
        start = self._suite_starts.pop(name, None)
        if start is None:
            logger.warning("Suite '%s' ended without a recorded start; duration 0", name)
            duration = 0.0
        else:
            duration = max(0.0, self._clock() - start)

        timing = SuiteTiming(name=name, duration=duration)
        self.suite_times.append(timing)
        return timing

    def on_test_record(self, record: TestRecord) -> Outcome:
        """
        Store a record and update the totals.

        Raises
        ------
        UnclassifiableResultError
            If the record matches no outcome. Nothing is stored in that case.
        """
        outcome = classify(record)

        self.records.append(record)
        totals = self.totals
        totals.count += 1
        totals.assertions += record.assertions
        totals.test_time += record.time
        if outcome is Outcome.FAILED:
            totals.failures += 1
        elif outcome is Outcome.ERROR:
            totals.errors += 1
        elif outcome is Outcome.SKIPPED:
            totals.skips += 1
        return outcome

    def on_run_report(self) -> RunTotals:
        """Fix the run's wall time and close the run."""
        if self._run_start is None:
            self.totals.total_time = self.totals.test_time
        else:
            self.totals.total_time = max(0.0, self._clock() - self._run_start)
        self._running = False
        return self.totals

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------
    def has_big_problems(self) -> bool:
        return self.totals.failures > 0 or self.totals.errors > 0

    def run_status(self) -> str:
        t = self.totals
        return run_status(t.failures, t.errors, t.skips)

    def failed_tests(self) -> list[TestRecord]:
        """Errored and failed records, in delivery order."""
        return [
            r for r in self.records
            if classify(r) in (Outcome.ERROR, Outcome.FAILED)
        ]

    def skipped_tests(self) -> list[TestRecord]:
        return [r for r in self.records if classify(r) is Outcome.SKIPPED]

    def normalize(self, path: str) -> str:
        return normalize_location(path, self.cwd, self.test_roots)

    # -----------------------------------------------------------------------
    # Bucket Builders
    # -----------------------------------------------------------------------
    def _line_buckets(self, records: list[TestRecord]) -> dict[str, LineBucket]:
        buckets: dict[str, LineBucket] = {}
        for record in records:
            key = self.normalize(record.file_path)
            buckets.setdefault(key, LineBucket()).lines.append(record.line_number)
        return buckets

    def build_skip_location_buckets(self) -> dict[str, LineBucket]:
        """Skipped tests grouped by test-definition file."""
        return self._line_buckets(self.skipped_tests())

    def build_failure_location_buckets(self) -> dict[str, LineBucket]:
        """Errored / failed tests grouped by test-definition file."""
        return self._line_buckets(self.failed_tests())

    def build_failure_site_buckets(self) -> dict[str, SiteBucket]:
        """
        Errored / failed tests grouped by where the failure triggered
        ("path:line"). The message is taken from the first occurrence.
        """
        buckets: dict[str, SiteBucket] = {}
        for record in self.failed_tests():
            failure = record.failure
            if failure is None:
                continue
            key = f"{self.normalize(failure.file_path)}:{failure.line_number}"
            bucket = buckets.get(key)
            if bucket is None:
                buckets[key] = SiteBucket(count=1, message=failure.message)
            else:
                bucket.count += 1
        return buckets
