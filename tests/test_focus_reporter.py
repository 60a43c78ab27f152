"""
Unit Tests - Focus Reporter
============================
Live progress output, fast-fail inline detail and the final report write.
"""
import io

import pytest

from focusreport.core.config import ReporterOptions, RunContext
from focusreport.models.test_record import FailureDetail, TestRecord
from focusreport.parser.classification import Outcome, UnclassifiableResultError
from focusreport.reporters.focus_reporter import FocusReporter

CWD = "/work/app"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _reporter(environ=None, is_tty=False, clock=None, **options) -> FocusReporter:
    return FocusReporter(
        options=ReporterOptions(**options),
        io=io.StringIO(),
        context=RunContext(cwd=CWD, environ=environ or {}, is_tty=is_tty),
        clock=clock or FakeClock(),
    )


def _passed(name="test_ok", time=0.0) -> TestRecord:
    return TestRecord(suite="UserTest", name=name, passed=True, time=time, assertions=1)


def _failed(name="test_user_can_login", error=False) -> TestRecord:
    return TestRecord(
        suite="UserTest", name=name, error=error,
        failure=FailureDetail(error_class="AssertionError", message="expected true",
                              file_path="/work/app/tests/test_user.py", line_number=12),
        file_path="/work/app/tests/test_user.py", line_number=10,
    )


def _skipped(name="test_pending") -> TestRecord:
    return TestRecord(
        suite="UserTest", name=name, skipped=True,
        failure=FailureDetail(error_class="Skipped", message="later",
                              file_path="/work/app/tests/test_user.py", line_number=20),
        file_path="/work/app/tests/test_user.py", line_number=20,
    )


def _output(reporter: FocusReporter) -> str:
    return reporter.io.getvalue()


# ---------------------------------------------------------------------------
# 1. Progress marks
# ---------------------------------------------------------------------------
class TestProgress:

    def test_run_start_writes_newline(self):
        reporter = _reporter()
        reporter.on_run_start()
        assert _output(reporter) == "\n"

    def test_marks_per_outcome(self):
        reporter = _reporter()
        reporter.on_run_start()
        for record in (_passed(), _skipped(), _failed(error=True), _failed()):
            reporter.on_test_record(record)
        assert _output(reporter) == "\n.SEF"

    def test_engine_result_code_wins(self):
        reporter = _reporter()
        reporter.on_test_record(TestRecord(suite="UserTest", name="test_x", passed=True,
                                           result_code="+"))
        assert _output(reporter) == "+"

    def test_returns_outcome(self):
        assert _reporter().on_test_record(_failed(error=True)) is Outcome.ERROR

    def test_verbose_line(self):
        reporter = _reporter(verbose=True)
        reporter.on_test_record(_passed(name="test_login", time=0.123))
        assert _output(reporter) == "\nUserTest#test_login 0.12 = ."

    def test_unclassifiable_propagates(self):
        reporter = _reporter()
        with pytest.raises(UnclassifiableResultError):
            reporter.on_test_record(TestRecord(suite="UserTest", name="test_limbo"))
        assert _output(reporter) == ""


# ---------------------------------------------------------------------------
# 2. Fast-fail
# ---------------------------------------------------------------------------
class TestFastFail:

    def test_failure_detail_printed_inline(self):
        reporter = _reporter(fast_fail=True)
        reporter.on_test_record(_failed())
        assert _output(reporter) == (
            "F\n"
            "Failure: UserTest user can login\n"
            "test_user.py:12\n"
            "AssertionError:\n"
            "expected true\n"
            "\n"
        )

    def test_skip_inline_while_clean(self):
        reporter = _reporter(fast_fail=True)
        reporter.on_test_record(_skipped())
        assert "Skipped: UserTest pending" in _output(reporter)

    def test_skip_not_inline_after_a_failure(self):
        reporter = _reporter(fast_fail=True)
        reporter.on_test_record(_failed())
        before = _output(reporter)
        reporter.on_test_record(_skipped())
        assert _output(reporter) == before + "S"

    def test_skip_not_inline_without_detailed_skip(self):
        reporter = _reporter(fast_fail=True, detailed_skip=False)
        reporter.on_test_record(_skipped())
        assert _output(reporter) == "S"

    def test_no_inline_detail_by_default(self):
        reporter = _reporter()
        reporter.on_test_record(_failed())
        assert _output(reporter) == "F"


# ---------------------------------------------------------------------------
# 3. Final report
# ---------------------------------------------------------------------------
class TestReport:

    def test_report_follows_two_blank_lines(self):
        clock = FakeClock()
        reporter = _reporter(clock=clock)
        reporter.on_run_start()
        reporter.on_suite_start("UserTest")
        reporter.on_test_record(_passed())
        clock.now = 1.0
        reporter.on_suite_end("UserTest")
        text = reporter.on_run_report()

        assert text == "\n\n1 tests & 1 assertions\n1.00s (1.00 tests/s, 1.00 assertions/s)\n\n"
        assert _output(reporter) == "\n." + text

    def test_report_alias(self):
        assert FocusReporter.report is FocusReporter.on_run_report


# ---------------------------------------------------------------------------
# 4. Color resolution
# ---------------------------------------------------------------------------
class TestColor:

    def test_tty_with_color_term(self):
        reporter = _reporter(environ={"TERM": "xterm-256color"}, is_tty=True)
        reporter.on_test_record(_failed())
        assert _output(reporter) == "\x1b[0;31mF\x1b[0m"

    def test_not_a_tty(self):
        reporter = _reporter(environ={"TERM": "xterm-256color"}, is_tty=False)
        reporter.on_test_record(_passed())
        assert _output(reporter) == "."

    def test_forced_color(self):
        reporter = _reporter(color=True)
        reporter.on_test_record(_passed())
        assert _output(reporter) == "\x1b[1;32m.\x1b[0m"
