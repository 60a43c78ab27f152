"""
Unit Tests - Location
======================
Display-path normalization and failure-site recovery from tracebacks.
"""
import sys
import traceback

import pytest

from focusreport.parser.location import (
    failure_site_from_traceback,
    normalize_location,
    relative_location,
)

CWD = "/work/app"


# ---------------------------------------------------------------------------
# 1. normalize_location()
# ---------------------------------------------------------------------------
class TestNormalizeLocation:

    def test_strips_cwd_and_tests_root(self):
        assert normalize_location("/work/app/tests/models/test_user.py", CWD) == "models/test_user.py"

    def test_strips_test_root(self):
        assert normalize_location("/work/app/test/user_test.rb", CWD) == "user_test.rb"

    def test_non_test_directory_keeps_segment(self):
        assert normalize_location("/work/app/src/billing.py", CWD) == "src/billing.py"

    def test_only_leading_test_root_collapses(self):
        assert normalize_location("/work/app/src/tests/helper.py", CWD) == "src/tests/helper.py"

    def test_outside_cwd_passes_through(self):
        path = "/usr/lib/python3/test/support.py"
        assert normalize_location(path, CWD) == path

    def test_sibling_directory_with_shared_prefix_is_outside(self):
        path = "/work/application/tests/test_a.py"
        assert normalize_location(path, CWD) == path

    def test_trailing_slash_on_cwd(self):
        assert normalize_location("/work/app/tests/test_a.py", "/work/app/") == "test_a.py"

    def test_backslashes(self):
        assert normalize_location("C:\\work\\app\\tests\\test_a.py", "C:\\work\\app") == "test_a.py"

    def test_empty_path(self):
        assert normalize_location("", CWD) == ""

    def test_empty_cwd_leaves_path_alone(self):
        assert normalize_location("/work/app/tests/test_a.py", "") == "/work/app/tests/test_a.py"

    def test_custom_test_roots(self):
        path = "/work/app/spec/models/user_spec.rb"
        assert normalize_location(path, CWD, test_roots=("spec",)) == "models/user_spec.rb"

    @pytest.mark.parametrize("path", [
        "/work/app/tests/models/test_user.py",
        "/work/app/tests/tests/test_nested.py",
        "/work/app/src/billing.py",
        "/usr/lib/python3/test/support.py",
        "models/test_user.py",
    ])
    def test_idempotent(self, path):
        once = normalize_location(path, CWD)
        assert normalize_location(once, CWD) == once


class TestRelativeLocation:

    def test_keeps_test_root(self):
        assert relative_location("/work/app/tests/test_a.py", CWD) == "tests/test_a.py"

    def test_outside_cwd(self):
        assert relative_location("/opt/other.py", CWD) == "/opt/other.py"


# ---------------------------------------------------------------------------
# 2. failure_site_from_traceback()
# ---------------------------------------------------------------------------
def assert_positive(value):
    if value <= 0:
        raise AssertionError(f"{value} is not positive")


def _code_under_test():
    assert_positive(-1)


def _bare_assert():
    assert 1 == 2


def _traceback_of(func):
    try:
        func()
    except AssertionError:
        return sys.exc_info()[2]
    raise RuntimeError("expected an AssertionError")


class TestFailureSite:

    def test_stops_before_assertion_helper(self):
        path, line = failure_site_from_traceback(_traceback_of(_code_under_test))
        assert path == __file__ or path.endswith("test_location.py")
        assert line == _code_under_test.__code__.co_firstlineno + 1

    def test_bare_assert_uses_innermost_frame(self):
        path, line = failure_site_from_traceback(_traceback_of(_bare_assert))
        assert path.endswith("test_location.py")
        assert line == _bare_assert.__code__.co_firstlineno + 1

    def test_accepts_extracted_frames(self):
        frames = traceback.extract_tb(_traceback_of(_code_under_test))
        _, line = failure_site_from_traceback(frames)
        assert line == _code_under_test.__code__.co_firstlineno + 1

    def test_none(self):
        assert failure_site_from_traceback(None) == ("", 0)

    def test_empty_frames(self):
        assert failure_site_from_traceback([]) == ("", 0)
