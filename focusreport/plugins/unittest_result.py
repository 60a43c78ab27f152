"""
Unittest Adapter
================
A ``unittest.TestResult`` that feeds a FocusReporter.

    result = FocusTestResult(FocusReporter())
    result.startTestRun()
    suite.run(result)
    result.stopTestRun()

Suites are test classes; a change of class between tests ends the previous
suite. The failure site is recovered from the exception traceback.
A test whose subtests fail is recorded once, from its first failing subtest.
"""
import inspect
import time
import unittest
from typing import Callable, Optional

from focusreport.models.test_record import FailureDetail, TestRecord
from focusreport.parser.classification import Outcome, result_code_for
from focusreport.parser.location import failure_site_from_traceback
from focusreport.reporters.focus_reporter import FocusReporter


def _test_location(test) -> tuple[str, int]:
    """(source file, first line) of the test method, or ("", 0)."""
    method_name = getattr(test, "_testMethodName", None)
    method = getattr(test, method_name, None) if method_name else None
    func = getattr(method, "__func__", method)
    code = getattr(func, "__code__", None)
    if code is None:
        return "", 0
    try:
        path = inspect.getsourcefile(func) or code.co_filename
    except TypeError:
        path = code.co_filename
    return path, code.co_firstlineno


def _split_id(test) -> tuple[str, str]:
    suite, _, name = test.id().rpartition(".")
    return (suite or type(test).__name__), name


class FocusTestResult(unittest.TestResult):
    def __init__(
        self,
        reporter: FocusReporter,
        stream=None,
        descriptions=None,
        verbosity=None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        super().__init__(stream, descriptions, verbosity)
        self.reporter = reporter
        self._clock = clock or time.monotonic
        self._started: dict[str, float] = {}
        self._recorded: set[str] = set()
        self._current_suite: Optional[str] = None

    # -----------------------------------------------------------------------
    # Run / Suite boundaries
    # -----------------------------------------------------------------------
    def startTestRun(self):
        super().startTestRun()
        self.reporter.on_run_start()

    def stopTestRun(self):
        super().stopTestRun()
        if self._current_suite is not None:
            self.reporter.on_suite_end(self._current_suite)
            self._current_suite = None
        self.reporter.on_run_report()

    def startTest(self, test):
        super().startTest(test)
        suite, _ = _split_id(test)
        if suite != self._current_suite:
            if self._current_suite is not None:
                self.reporter.on_suite_end(self._current_suite)
            self._current_suite = suite
            self.reporter.on_suite_start(suite)
        self._started[test.id()] = self._clock()
        self._recorded.discard(test.id())

    # -----------------------------------------------------------------------
    # Outcomes
    # -----------------------------------------------------------------------
    def _record(self, test, outcome: Outcome, failure: Optional[FailureDetail] = None) -> None:
        # one record per test, even when several subtests fail
        if test.id() in self._recorded:
            return
        self._recorded.add(test.id())
        suite, name = _split_id(test)
        path, line = _test_location(test)
        start = self._started.pop(test.id(), None)
        elapsed = 0.0 if start is None else max(0.0, self._clock() - start)

        self.reporter.on_test_record(TestRecord(
            suite=suite,
            name=name,
            result_code=result_code_for(outcome),
            passed=outcome is Outcome.PASSED,
            skipped=outcome is Outcome.SKIPPED,
            error=outcome is Outcome.ERROR,
            failure=failure,
            time=elapsed,
            file_path=path,
            line_number=line,
        ))

    @staticmethod
    def _detail(err) -> FailureDetail:
        exc_type, exc_value, tb = err
        path, line = failure_site_from_traceback(tb)
        return FailureDetail(
            error_class=getattr(exc_type, "__name__", str(exc_type)),
            message=str(exc_value),
            file_path=path,
            line_number=line,
        )

    def addSuccess(self, test):
        super().addSuccess(test)
        self._record(test, Outcome.PASSED)

    def addFailure(self, test, err):
        super().addFailure(test, err)
        self._record(test, Outcome.FAILED, self._detail(err))

    def addError(self, test, err):
        super().addError(test, err)
        self._record(test, Outcome.ERROR, self._detail(err))

    def addSkip(self, test, reason):
        super().addSkip(test, reason)
        path, line = _test_location(test)
        self._record(test, Outcome.SKIPPED, FailureDetail(
            error_class="Skipped", message=reason, file_path=path, line_number=line,
        ))

    def addExpectedFailure(self, test, err):
        super().addExpectedFailure(test, err)
        self._record(test, Outcome.PASSED)

    def addUnexpectedSuccess(self, test):
        super().addUnexpectedSuccess(test)
        self._record(test, Outcome.FAILED, FailureDetail(
            error_class="UnexpectedSuccess", message="test was expected to fail",
        ))

    def addSubTest(self, test, subtest, err):
        super().addSubTest(test, subtest, err)
        if err is None:
            return
        outcome = Outcome.FAILED if issubclass(err[0], test.failureException) else Outcome.ERROR
        self._record(test, outcome, self._detail(err))
