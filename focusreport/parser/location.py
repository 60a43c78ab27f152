"""
Location
========
Turns absolute source locations into compact, run-relative display paths and
recovers the failure site from a traceback.

Normalization:
    1. Replace backslashes with forward slashes
    2. Paths outside the working directory pass through UNCHANGED
    3. Remove the working-directory prefix
    4. Collapse a leading test-root segment ("test/", "tests/")

Contract:
    - IDEMPOTENT: normalizing an already-normalized path is a no-op.
    - Never raises on odd input; a path that cannot be shortened is returned
      as given.
    - Applied separately to the test definition and to the failure site.
"""
import re
import traceback
from typing import Iterable, Optional

DEFAULT_TEST_ROOTS: tuple[str, ...] = ("test", "tests")

# Helper frames that mark the start of assertion machinery
_ASSERTION_FRAME = re.compile(
    r"^_*(assert|refute|fail|flunk|raise|skip|must|wont)",
    re.IGNORECASE,
)


def _clean(path: str) -> str:
    return path.strip().replace("\\", "/")


def _strip_cwd(path: str, cwd: str) -> Optional[str]:
    """Return the cwd-relative remainder, or None if path is outside cwd."""
    root = _clean(cwd).rstrip("/")
    prefix = root + "/"
    if not path.startswith(prefix):
        return None
    return path[len(prefix):]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def normalize_location(
    path: str,
    cwd: str,
    test_roots: Iterable[str] = DEFAULT_TEST_ROOTS,
) -> str:
    """
    Convert an absolute path into a compact display path.

    Parameters
    ----------
    path : str
        Absolute source path reported by the engine.
    cwd : str
        Working directory of the run (injected, never read from the process).
    test_roots : Iterable[str]
        Conventional test-root directory names to collapse.

    Returns
    -------
    str
        e.g. "/work/app/tests/models/test_user.py" → "models/test_user.py"
    """
    if not path:
        return ""

    cleaned = _clean(path)
    relative = _strip_cwd(cleaned, cwd) if cwd else None
    if relative is None:
        return cleaned

    for root in test_roots:
        segment = root.strip("/") + "/"
        if relative.startswith(segment):
            return relative[len(segment):]
    return relative


def relative_location(path: str, cwd: str) -> str:
    """Strip only the working directory (used for file:line suffixes)."""
    return normalize_location(path, cwd, test_roots=())


def failure_site_from_traceback(tb) -> tuple[str, int]:
    """
    Locate where a failure actually triggered inside the test code.

    Walks the traceback from the outermost frame inwards and returns the last
    frame seen before control entered an assertion helper (assertEqual,
    fail, pytest.raises internals, ...). A bare ``assert`` statement never
    enters a helper, so the innermost frame is the site.

    Parameters
    ----------
    tb : types.TracebackType | list[traceback.FrameSummary]

    Returns
    -------
    tuple[str, int]
        (file_path, line_number), or ("", 0) for an empty traceback.
    """
    if tb is None:
        return "", 0

    frames = tb if isinstance(tb, list) else traceback.extract_tb(tb)

    site: Optional[traceback.FrameSummary] = None
    for frame in frames:
        if site is not None and _ASSERTION_FRAME.match(frame.name or ""):
            break
        site = frame

    if site is None:
        return "", 0
    return site.filename, site.lineno or 0
