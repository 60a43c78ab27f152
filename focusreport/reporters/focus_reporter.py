"""
Focus Reporter
==============
The lifecycle sink a test engine drives. Wires events into the Aggregator,
prints live progress, and writes the composed report at the end.

Events:
    on_run_start()          - blank line, fresh run state
    on_suite_start(suite)   - suite timing begins
    on_test_record(record)  - progress mark (+ verbose timing, + fast-fail detail)
    on_suite_end(suite)     - suite timing ends
    on_run_report()         - two blank lines, then the report

Output goes to ``io`` (stdout by default); diagnostics go to logging.
"""
import logging
import sys
from typing import Callable, Optional, TextIO

from focusreport.core.config import ReporterOptions, RunContext, color_enabled
from focusreport.core.output_formatter import Styler, make_styler
from focusreport.models.test_record import TestRecord
from focusreport.parser.classification import OUTCOME_TAG, Outcome, result_code_for
from focusreport.services.report_composer import ReportComposer
from focusreport.state.aggregator import Aggregator

logger = logging.getLogger(__name__)


class FocusReporter:
    """
    Usage:
        reporter = FocusReporter(ReporterOptions(slow_count=5))
        reporter.on_run_start()
        reporter.on_suite_start("UserTest")
        reporter.on_test_record(record)
        reporter.on_suite_end("UserTest")
        reporter.on_run_report()
    """

    def __init__(
        self,
        options: Optional[ReporterOptions] = None,
        io: Optional[TextIO] = None,
        context: Optional[RunContext] = None,
        styler: Optional[Styler] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.options = options or ReporterOptions()
        self.io = io if io is not None else sys.stdout
        self.context = context or RunContext.from_process(self.io)
        self.styler = styler or make_styler(color_enabled(self.options, self.context))

        self.aggregator = Aggregator(
            cwd=self.context.cwd,
            test_roots=self.options.test_roots,
            clock=clock,
        )
        self.composer = ReportComposer(self.aggregator, self.options, self.styler)

    def _write(self, text: str) -> None:
        self.io.write(text)

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------
    def on_run_start(self) -> None:
        self.aggregator.on_run_start()
        self._write("\n")

    def on_suite_start(self, suite) -> None:
        self.aggregator.on_suite_start(suite)

    def on_suite_end(self, suite) -> None:
        timing = self.aggregator.on_suite_end(suite)
        logger.debug("Suite %s finished in %.3fs", timing.name, timing.duration)

    def on_test_record(self, record: TestRecord) -> Outcome:
        outcome = self.aggregator.on_test_record(record)

        if self.options.verbose:
            self._write(f"\n{record.suite}#{record.name} {record.time:.2f} = ")

        code = record.result_code or result_code_for(outcome)
        self._write(self.styler.style(OUTCOME_TAG[outcome], code))

        if self.options.fast_fail and self._show_inline(outcome):
            detail = self.composer.failure_detail(record)
            if detail:
                self._write("\n" + "\n".join(detail) + "\n")
        return outcome

    def _show_inline(self, outcome: Outcome) -> bool:
        if outcome in (Outcome.ERROR, Outcome.FAILED):
            return True
        return outcome is Outcome.SKIPPED and not self.aggregator.has_big_problems()

    def on_run_report(self) -> str:
        totals = self.aggregator.on_run_report()
        logger.info(
            "Run finished: %d tests, %d failures, %d errors, %d skips in %.2fs",
            totals.count, totals.failures, totals.errors, totals.skips, totals.total_time,
        )
        text = "\n\n" + self.composer.render()
        self._write(text)
        return text

    report = on_run_report
