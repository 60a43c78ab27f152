"""
Classification
==============
Maps a single TestRecord to exactly one outcome and ranks outcomes by
severity.

Allowed Outcomes:
    PASSED, SKIPPED, ERROR, FAILED

Classification Strategy:
    1. passed flag FIRST
    2. skipped flag SECOND
    3. error flag THIRD
    4. failure detail LAST (a failed assertion)
    5. anything else is a contract violation by the host engine and raises

Severity Rank (for the run-level status):
    FAILED == ERROR  >  SKIPPED  >  PASSED
"""
from enum import Enum


class Outcome(str, Enum):
    PASSED = "passed"
    SKIPPED = "skipped"
    ERROR = "error"
    FAILED = "failed"


class UnclassifiableResultError(ValueError):
    """Raised when a record carries no outcome the classifier recognises."""


# ---------------------------------------------------------------------------
# Severity Rank
# ---------------------------------------------------------------------------
OUTCOME_RANK: dict[Outcome, int] = {
    Outcome.PASSED:  0,
    Outcome.SKIPPED: 1,
    Outcome.ERROR:   2,
    Outcome.FAILED:  2,
}

# Outcome → styler tag (see output_formatter.STYLE_CODES)
OUTCOME_TAG: dict[Outcome, str] = {
    Outcome.PASSED:  "pass",
    Outcome.SKIPPED: "skip",
    Outcome.ERROR:   "error",
    Outcome.FAILED:  "failure",
}

# Conventional progress marks
RESULT_CODES: dict[Outcome, str] = {
    Outcome.PASSED:  ".",
    Outcome.SKIPPED: "S",
    Outcome.ERROR:   "E",
    Outcome.FAILED:  "F",
}


def rank(outcome: Outcome) -> int:
    """Return severity rank for an outcome (higher = worse)."""
    return OUTCOME_RANK[outcome]


def result_code_for(outcome: Outcome) -> str:
    return RESULT_CODES[outcome]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def classify(record) -> Outcome:
    """
    Classify a result into exactly one Outcome.

    Parameters
    ----------
    record : TestRecord
        Any object exposing ``passed``, ``skipped``, ``error`` and ``failure``.

    Returns
    -------
    Outcome

    Raises
    ------
    UnclassifiableResultError
        If none of the outcome fields hold.
    """
    if record.passed:
        return Outcome.PASSED
    if record.skipped:
        return Outcome.SKIPPED
    if record.error:
        return Outcome.ERROR
    if record.failure is not None:
        return Outcome.FAILED

    raise UnclassifiableResultError(
        f"Cannot classify result '{getattr(record, 'suite', '?')}#"
        f"{getattr(record, 'name', '?')}': not passed, skipped, errored "
        f"and carries no failure detail"
    )


def run_status(failures: int, errors: int, skips: int) -> str:
    """
    Pick the worst-case status tag for the whole run.

    failure beats error beats skip beats pass.
    """
    if failures > 0:
        return OUTCOME_TAG[Outcome.FAILED]
    if errors > 0:
        return OUTCOME_TAG[Outcome.ERROR]
    if skips > 0:
        return OUTCOME_TAG[Outcome.SKIPPED]
    return OUTCOME_TAG[Outcome.PASSED]
