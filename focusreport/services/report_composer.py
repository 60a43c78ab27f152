"""
Report Composer
===============
Assembles the end-of-run report from Aggregator state.

Section order is FIXED; each section has its own gate:

    1. failure details     - skipped entirely in fast-fail mode
    2. run counts          - always
    3. performance         - always
    4. slowest tests       - no big problems, no skips, slow_count > 0
    5. slowest suites      - no big problems, no skips, slow_suite_count > 0
    6. problematic tests   - big problems only
    7. problematic code    - big problems only
    8. skipped tests       - no big problems, at least one skip

"Big problems" = at least one failure or error. Once something is broken,
timing and skip information is left out of the report.

The composer returns lines; it never writes to a stream.
"""
import logging
from typing import Optional

from focusreport.core.config import ReporterOptions
from focusreport.core.constants import (
    NOT_AVAILABLE,
    PROBLEM_CODE_HEADER,
    PROBLEM_CODE_LIMIT,
    PROBLEM_TESTS_HEADER,
    PROBLEM_TESTS_LIMIT,
    SKIPPED_FILES_LIMIT,
    SKIPPED_HEADER,
)
from focusreport.core.output_formatter import PlainStyler, Styler
from focusreport.models.test_record import TestRecord
from focusreport.parser.classification import OUTCOME_TAG, Outcome, classify
from focusreport.parser.location import relative_location
from focusreport.services.ranking import top_n, top_slowest
from focusreport.state.aggregator import Aggregator

logger = logging.getLogger(__name__)

_DETAIL_LABELS: dict[Outcome, str] = {
    Outcome.SKIPPED: "Skipped",
    Outcome.ERROR:   "Error",
    Outcome.FAILED:  "Failure",
}


def _rate(amount: int, seconds: float) -> str:
    if seconds <= 0:
        return NOT_AVAILABLE
    return f"{amount / seconds:.2f}"


class ReportComposer:
    def __init__(
        self,
        aggregator: Aggregator,
        options: Optional[ReporterOptions] = None,
        styler: Optional[Styler] = None,
    ) -> None:
        self.agg = aggregator
        self.options = options or ReporterOptions()
        self.styler = styler or PlainStyler()

    def _s(self, tag: str, text: str) -> str:
        return self.styler.style(tag, text)

    # -----------------------------------------------------------------------
    # Failure Detail (shared with live fast-fail output)
    # -----------------------------------------------------------------------
    def failure_detail(self, record: TestRecord) -> list[str]:
        """
        Detail block for one non-passing record, or [] if it has none to show.

        Skipped tests only get a block when ``detailed_skip`` is on. A blank
        failure message renders no message line.
        """
        outcome = classify(record)
        if outcome is Outcome.PASSED:
            return []
        if outcome is Outcome.SKIPPED and not self.options.detailed_skip:
            return []

        tag = OUTCOME_TAG[outcome]
        failure = record.failure
        lines = [self._s(tag, f"{_DETAIL_LABELS[outcome]}: {record.suite} {record.display_name}")]

        if failure is not None:
            if failure.file_path:
                site = self.agg.normalize(failure.file_path)
                lines.append(self._s(tag, f"{site}:{failure.line_number}"))
            if outcome is not Outcome.SKIPPED and failure.error_class:
                lines.append(self._s("dark_gray", f"{failure.error_class}:"))
            if failure.has_message:
                lines.append(self._s("dark_gray", failure.message.strip()))

        if self.options.show_location and record.file_path:
            path = relative_location(record.file_path, self.agg.cwd)
            lines.extend(["", f"{path}:{record.line_number}"])

        rerun = self._rerun_line(record)
        if rerun:
            lines.append(self._s("dark_gray", rerun))

        lines.append("")
        return lines

    def _rerun_line(self, record: TestRecord) -> str:
        template = self.options.rerun_command
        if not template:
            return ""
        try:
            return template.format(
                file=relative_location(record.file_path, self.agg.cwd),
                line=record.line_number,
                suite=record.suite,
                name=record.name,
            )
        except (KeyError, IndexError, ValueError) as e:
            logger.warning("Invalid rerun_command template %r: %s", template, e)
            return ""

    # -----------------------------------------------------------------------
    # Sections
    # -----------------------------------------------------------------------
    def failures_summary(self) -> list[str]:
        if self.options.fast_fail:
            return []
        lines: list[str] = []
        for record in self.agg.records:
            lines.extend(self.failure_detail(record))
        return lines

    def counts_summary(self) -> list[str]:
        t = self.agg.totals
        parts = []
        if t.failures:
            parts.append(self._s("failure", f"{t.failures} failures."))
        if t.errors:
            parts.append(self._s("error", f"{t.errors} errors."))
        if t.skips:
            parts.append(self._s("skip", f"{t.skips} skips."))

        lines = [" ".join(parts)] if parts else []
        lines.append(self._s(self.agg.run_status(), f"{t.count} tests & {t.assertions} assertions"))
        return lines

    def performance_summary(self) -> list[str]:
        t = self.agg.totals
        duration = self._s("white", f"{t.total_time:.2f}s ")
        rates = self._s(
            "dark_gray",
            f"({_rate(t.count, t.total_time)} tests/s, "
            f"{_rate(t.assertions, t.total_time)} assertions/s)",
        )
        return [duration + rates, ""]

    def _timing_suppressed(self) -> bool:
        return self.agg.has_big_problems() or self.agg.totals.skips > 0

    def slow_tests_summary(self) -> list[str]:
        opts = self.options
        if opts.slow_count == 0 or self._timing_suppressed():
            return []

        slow = top_slowest(
            self.agg.records, opts.slow_count, opts.slow_threshold,
            duration=lambda r: r.time,
        )
        if not slow:
            return []

        lines = [""]
        for record in slow:
            path = relative_location(record.file_path, self.agg.cwd)
            lines.append(self._s("white", f"{record.time:.2f}s") + f" {record.name} - {record.suite}")
            lines.append(self._s("dark_gray", f"      {path}:{record.line_number}"))
        return lines

    def slow_suite_summary(self) -> list[str]:
        opts = self.options
        if opts.slow_suite_count == 0 or self._timing_suppressed():
            return []

        slow = top_slowest(
            self.agg.suite_times, opts.slow_suite_count, opts.slow_suite_threshold,
            duration=lambda s: s.duration,
        )
        if not slow:
            return []
        return [f"{suite.duration:.2f}s {suite.name}" for suite in slow] + [""]

    def test_problem_areas_summary(self) -> list[str]:
        if not self.agg.has_big_problems():
            return []

        ranked = top_n(self.agg.build_failure_location_buckets(), PROBLEM_TESTS_LIMIT)
        if not ranked:
            return []

        lines = [self._s("failure", PROBLEM_TESTS_HEADER)]
        for path, bucket in ranked:
            lines.append(
                self._s("white", f"{bucket.count} ")
                + self._s("gray", f"{path} ")
                + self._s("dark_gray", str(bucket.sorted_lines()))
            )
        lines.append("")
        return lines

    def code_problem_areas_summary(self) -> list[str]:
        if not self.agg.has_big_problems():
            return []

        ranked = top_n(self.agg.build_failure_site_buckets(), PROBLEM_CODE_LIMIT)
        if not ranked:
            return []

        lines = [self._s("error", PROBLEM_CODE_HEADER)]
        for site, bucket in ranked:
            lines.append(self._s("white", f"{bucket.count} ") + self._s("gray", site))
            if bucket.message and bucket.message.strip():
                lines.append(self._s("dark_gray", bucket.message.strip()))
            lines.append("")
        return lines

    def skipped_summary(self) -> list[str]:
        if self.agg.totals.skips == 0 or self.agg.has_big_problems():
            return []

        ranked = top_n(
            self.agg.build_skip_location_buckets(),
            SKIPPED_FILES_LIMIT,
            exclude_singletons=self.options.exclude_singleton_skips,
        )
        if not ranked:
            return []

        lines = [self._s("skip", SKIPPED_HEADER)]
        for path, bucket in ranked:
            lines.append(
                self._s("skip", f"{bucket.count} ")
                + self._s("gray", f"{path} ")
                + self._s("dark_gray", str(bucket.sorted_lines()))
            )
        lines.append("")
        return lines

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------
    def compose(self) -> list[str]:
        lines: list[str] = []
        for section in (
            self.failures_summary,
            self.counts_summary,
            self.performance_summary,
            self.slow_tests_summary,
            self.slow_suite_summary,
            self.test_problem_areas_summary,
            self.code_problem_areas_summary,
            self.skipped_summary,
        ):
            lines.extend(section())
        return lines

    def render(self) -> str:
        return "\n".join(self.compose()) + "\n"
