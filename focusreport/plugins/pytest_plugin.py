"""
Pytest Adapter
==============
Drives a FocusReporter from pytest's reporting hooks.

Enable with:
    pytest -p focusreport.plugins.pytest_plugin --focus-report

Mapping:
    pytest_sessionstart        → on_run_start
    pytest_runtest_logstart    → on_suite_end / on_suite_start when the
                                 "module::Class" prefix of the node id changes
    pytest_runtest_logreport   → on_test_record (call phase, failed or skipped
                                 setup, failed teardown)
    pytest_terminal_summary    → on_suite_end for the open suite, on_run_report

An xfailed test counts as passed, the same as an expected failure under
unittest.

Options come from FOCUS_* environment variables (see core/config.py).
"""
import logging
import os
from typing import Optional

import pytest

from focusreport.core.config import RunContext, options_from_env
from focusreport.models.test_record import FailureDetail, TestRecord
from focusreport.parser.classification import Outcome, result_code_for
from focusreport.reporters.focus_reporter import FocusReporter

logger = logging.getLogger(__name__)

_PLUGIN_NAME = "focusreport-reporter"


def split_nodeid(nodeid: str) -> tuple[str, str]:
    """'tests/test_a.py::TestX::test_y[1]' → ('tests/test_a.py::TestX', 'test_y[1]')"""
    suite, sep, name = nodeid.rpartition("::")
    if not sep:
        return nodeid, nodeid
    return suite, name


def _absolute(rootdir: str, path: str) -> str:
    if not path or os.path.isabs(path):
        return path
    return os.path.join(rootdir, path)


def _split_exception(message: str) -> tuple[str, str]:
    """'ValueError: bad input' → ('ValueError', 'bad input'); no class → ('', message)"""
    head, sep, rest = message.partition(":")
    if sep and head.replace(".", "").replace("_", "").isalnum():
        return head.strip(), rest.strip()
    return "", message


def _failure_detail(report, rootdir: str) -> Optional[FailureDetail]:
    longrepr = getattr(report, "longrepr", None)
    if longrepr is None:
        return None

    # Skips carry (path, lineno, "Skipped: reason")
    if isinstance(longrepr, tuple) and len(longrepr) == 3:
        path, lineno, reason = longrepr
        return FailureDetail(
            error_class="Skipped",
            message=str(reason).replace("Skipped: ", "", 1),
            file_path=_absolute(rootdir, str(path)),
            line_number=int(lineno or 0),
        )

    crash = getattr(longrepr, "reprcrash", None)
    if crash is not None:
        error_class, message = _split_exception(crash.message or "")
        return FailureDetail(
            error_class=error_class,
            message=message,
            file_path=_absolute(rootdir, str(crash.path)),
            line_number=int(crash.lineno or 0),
        )

    return FailureDetail(message=str(longrepr))


def _outcome_of(report) -> Optional[Outcome]:
    """Pick the outcome a pytest report stands for, or None to ignore it."""
    when, outcome = report.when, report.outcome
    if outcome == "skipped" and hasattr(report, "wasxfail"):
        return Outcome.PASSED if when in ("setup", "call") else None
    if when == "call":
        return {
            "passed": Outcome.PASSED,
            "failed": Outcome.FAILED,
            "skipped": Outcome.SKIPPED,
        }.get(outcome)
    if when == "setup":
        if outcome == "failed":
            return Outcome.ERROR
        if outcome == "skipped":
            return Outcome.SKIPPED
        return None
    if when == "teardown" and outcome == "failed":
        return Outcome.ERROR
    return None


def record_from_report(report, rootdir: str) -> Optional[TestRecord]:
    """Build a TestRecord from a pytest TestReport, or None for phases to skip."""
    outcome = _outcome_of(report)
    if outcome is None:
        return None

    suite, name = split_nodeid(report.nodeid)
    path, lineno, _ = report.location
    failure = None if outcome is Outcome.PASSED else _failure_detail(report, rootdir)
    if failure is None and outcome is Outcome.FAILED:
        failure = FailureDetail()

    return TestRecord(
        suite=suite,
        name=name,
        result_code=result_code_for(outcome),
        passed=outcome is Outcome.PASSED,
        skipped=outcome is Outcome.SKIPPED,
        error=outcome is Outcome.ERROR,
        failure=failure,
        time=max(0.0, float(getattr(report, "duration", 0.0) or 0.0)),
        file_path=_absolute(rootdir, path),
        line_number=(lineno + 1) if lineno is not None else 0,
    )


class FocusPytestPlugin:
    """Pytest plugin object; one per session."""

    def __init__(self, reporter: FocusReporter, rootdir: str) -> None:
        self.reporter = reporter
        self.rootdir = rootdir
        self._current_suite: Optional[str] = None

    def pytest_sessionstart(self, session):
        self.reporter.on_run_start()

    def pytest_runtest_logstart(self, nodeid, location):
        suite, _ = split_nodeid(nodeid)
        if suite == self._current_suite:
            return
        if self._current_suite is not None:
            self.reporter.on_suite_end(self._current_suite)
        self._current_suite = suite
        self.reporter.on_suite_start(suite)

    def pytest_runtest_logreport(self, report):
        record = record_from_report(report, self.rootdir)
        if record is not None:
            self.reporter.on_test_record(record)

    def pytest_terminal_summary(self, terminalreporter):
        if self._current_suite is not None:
            self.reporter.on_suite_end(self._current_suite)
            self._current_suite = None
        self.reporter.on_run_report()


class _TerminalWriter:
    """File-like shim writing through pytest's terminal reporter."""

    def __init__(self, terminalreporter) -> None:
        self._tr = terminalreporter

    def write(self, text: str) -> None:
        self._tr.write(text)

    def isatty(self) -> bool:
        value = getattr(self._tr, "isatty", False)
        return bool(value()) if callable(value) else bool(value)


# ---------------------------------------------------------------------------
# Module-level hooks (active when loaded with -p)
# ---------------------------------------------------------------------------
def pytest_addoption(parser):
    group = parser.getgroup("focusreport")
    group.addoption(
        "--focus-report",
        action="store_true",
        default=False,
        help="print a focus report: failures first, timing and skips only when nothing is broken",
    )


@pytest.hookimpl(trylast=True)
def pytest_configure(config):
    if not config.getoption("focus_report", default=False):
        return

    terminalreporter = config.pluginmanager.getplugin("terminalreporter")
    if terminalreporter is None:
        logger.warning("--focus-report needs the terminal reporter; focus report disabled")
        return

    io = _TerminalWriter(terminalreporter)
    options = options_from_env(os.environ)
    context = RunContext(cwd=str(config.rootpath), environ=dict(os.environ), is_tty=io.isatty())
    reporter = FocusReporter(options=options, io=io, context=context)
    config.pluginmanager.register(FocusPytestPlugin(reporter, str(config.rootpath)), _PLUGIN_NAME)
