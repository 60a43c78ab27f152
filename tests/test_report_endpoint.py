"""
Report Endpoint Tests
======================
Tests for POST /api/report: event replay, timestamps and error mapping.
"""
import logging

from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def _record(name, **flags):
    return {"suite": "UserTest", "name": name, "assertions": 1, **flags}


def _failure(path="/work/app/lib/user.py", line=5, message="boom"):
    return {"error_class": "AssertionError", "message": message,
            "file_path": path, "line_number": line}


# ===================================================================
# Test 1: Clean run with timestamps → slow suites listed
# ===================================================================
def test_clean_run_lists_slow_suites():
    resp = client.post("/api/report", json={
        "cwd": "/work/app",
        "options": {"slow_suite_count": 2},
        "events": [
            {"event": "run_start", "at": 0.0},
            {"event": "suite_start", "suite": "UserTest", "at": 0.0},
            {"event": "record", "record": _record("test_a", passed=True, time=0.5)},
            {"event": "suite_end", "suite": "UserTest", "at": 1.5},
            {"event": "suite_start", "suite": "OrderTest", "at": 1.5},
            {"event": "record", "record": _record("test_b", passed=True, time=0.5)},
            {"event": "suite_end", "suite": "OrderTest", "at": 2.0},
            {"event": "run_report", "at": 2.0},
        ],
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "pass"
    assert data["has_big_problems"] is False
    assert data["totals"]["count"] == 2
    assert data["totals"]["total_time"] == 2.0
    assert data["output"] == (
        "\n.."
        "\n\n"
        "2 tests & 2 assertions\n"
        "2.00s (1.00 tests/s, 1.00 assertions/s)\n"
        "\n"
        "1.50s UserTest\n"
        "0.50s OrderTest\n"
        "\n"
    )


# ===================================================================
# Test 2: Failures cluster into problem areas
# ===================================================================
def test_failures_reported():
    test_file = "/work/app/tests/test_user.py"
    resp = client.post("/api/report", json={
        "cwd": "/work/app",
        "events": [
            {"event": "record", "record": _record(
                "test_one", failure=_failure(), file_path=test_file, line_number=10)},
            {"event": "record", "record": _record(
                "test_two", failure=_failure(), file_path=test_file, line_number=20)},
        ],
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "failure"
    assert data["has_big_problems"] is True
    assert data["totals"]["failures"] == 2
    assert "Problematic Tests:\n2 test_user.py [10, 20]\n" in data["output"]
    assert "Problematic Lines of Code:\n2 lib/user.py:5\nboom\n" in data["output"]


# ===================================================================
# Test 3: Stream without run_report is reported at its end
# ===================================================================
def test_missing_run_report_is_implied():
    resp = client.post("/api/report", json={
        "events": [{"event": "record", "record": _record("test_a", skipped=True)}],
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "skip"
    assert "1 skips." in data["output"]


# ===================================================================
# Test 4: Unclassifiable record → 422
# ===================================================================
def test_unclassifiable_record_returns_422():
    resp = client.post("/api/report", json={
        "events": [{"event": "record", "record": _record("test_limbo")}],
    })
    assert resp.status_code == 422
    assert "UserTest#test_limbo" in resp.json()["detail"]


# ===================================================================
# Test 5: Malformed events → 422
# ===================================================================
def test_suite_event_without_suite_returns_422():
    resp = client.post("/api/report", json={"events": [{"event": "suite_start"}]})
    assert resp.status_code == 422


def test_negative_option_returns_422():
    resp = client.post("/api/report", json={"options": {"slow_count": -1}, "events": []})
    assert resp.status_code == 422


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


# ===================================================================
# Test 6: Each request is logged once with its status
# ===================================================================
def test_request_logged_with_status(caplog):
    with caplog.at_level(logging.INFO, logger="main"):
        client.post("/api/report", json={"events": [{"event": "suite_start"}]})
    lines = [r.getMessage() for r in caplog.records if r.name == "main"]
    assert len(lines) == 1
    assert lines[0].startswith("POST /api/report -> 422")
