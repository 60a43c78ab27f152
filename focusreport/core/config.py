"""
Configuration
=============
Reporter options and the process context they are resolved against.

Environment Variables (read by options_from_env, loaded from .env by main.py):
    FOCUS_VERBOSE                - print "Suite#name time = mark" per test (default: false)
    FOCUS_DETAILED_SKIP          - full detail blocks for skipped tests (default: true)
    FOCUS_FAST_FAIL              - print failure detail as soon as it happens (default: false)
    FOCUS_COLOR                  - force ANSI color on/off (default: auto-detect)
    FOCUS_SHOW_LOCATION          - append file:line to failure detail (default: false)
    FOCUS_SLOW_COUNT             - slowest tests listed, 0 disables (default: 0)
    FOCUS_SLOW_THRESHOLD         - minimum seconds to list a slow test (default: 0.0)
    FOCUS_SLOW_SUITE_COUNT       - slowest suites listed, 0 disables (default: 0)
    FOCUS_SLOW_SUITE_THRESHOLD   - minimum seconds to list a slow suite (default: 0.0)
    FOCUS_EXCLUDE_SINGLETON_SKIPS - hide files with a single skip from the skip summary (default: false)
    FOCUS_RERUN_COMMAND          - template appended to failure detail, e.g.
                                   "pytest {file}::{suite}::{name}" (default: unset)

Color Auto-Detection:
    An explicit color option always wins. Otherwise color is enabled only when
    the output stream is a TTY AND either TERM matches "^screen|color" or
    EMACS is set to a truthy value.

Context Injection:
    Working directory, environment and TTY-ness are captured once in a
    RunContext and handed to the reporter. Nothing below reads the process
    environment on its own.
"""
import os
import re
import sys
from dataclasses import dataclass, field
from typing import Mapping, Optional

from pydantic import BaseModel, Field


_TRUTHY = {"1", "t", "true", "yes", "on"}
_FALSY = {"0", "f", "false", "no", "off"}
_COLOR_TERM = re.compile(r"^screen|color")


class ReporterOptions(BaseModel):
    verbose: bool = False
    detailed_skip: bool = True
    fast_fail: bool = False
    color: Optional[bool] = None            # None = auto-detect
    show_location: bool = False
    slow_count: int = Field(default=0, ge=0)
    slow_threshold: float = Field(default=0.0, ge=0.0)
    slow_suite_count: int = Field(default=0, ge=0)
    slow_suite_threshold: float = Field(default=0.0, ge=0.0)
    exclude_singleton_skips: bool = False
    rerun_command: Optional[str] = None
    test_roots: tuple[str, ...] = ("test", "tests")


@dataclass
class RunContext:
    cwd: str = ""
    environ: Mapping[str, str] = field(default_factory=dict)
    is_tty: bool = False

    @classmethod
    def from_process(cls, stream=None) -> "RunContext":
        """Capture cwd, environment and TTY-ness of the current process."""
        stream = stream if stream is not None else sys.stdout
        isatty = getattr(stream, "isatty", None)
        return cls(
            cwd=os.getcwd(),
            environ=dict(os.environ),
            is_tty=bool(isatty()) if callable(isatty) else False,
        )


# ---------------------------------------------------------------------------
# Parsing Helpers
# ---------------------------------------------------------------------------
def parse_bool(value: Optional[str], default: Optional[bool] = None) -> Optional[bool]:
    """Interpret an env-style flag; unknown or missing values give ``default``."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return default


def options_from_env(environ: Mapping[str, str]) -> ReporterOptions:
    """
    Build ReporterOptions from FOCUS_* variables in ``environ``.

    Raises pydantic.ValidationError for negative counts / thresholds and
    ValueError for non-numeric ones.
    """
    defaults = ReporterOptions()
    return ReporterOptions(
        verbose=parse_bool(environ.get("FOCUS_VERBOSE"), defaults.verbose),
        detailed_skip=parse_bool(environ.get("FOCUS_DETAILED_SKIP"), defaults.detailed_skip),
        fast_fail=parse_bool(environ.get("FOCUS_FAST_FAIL"), defaults.fast_fail),
        color=parse_bool(environ.get("FOCUS_COLOR"), None),
        show_location=parse_bool(environ.get("FOCUS_SHOW_LOCATION"), defaults.show_location),
        slow_count=int(environ.get("FOCUS_SLOW_COUNT", defaults.slow_count)),
        slow_threshold=float(environ.get("FOCUS_SLOW_THRESHOLD", defaults.slow_threshold)),
        slow_suite_count=int(environ.get("FOCUS_SLOW_SUITE_COUNT", defaults.slow_suite_count)),
        slow_suite_threshold=float(
            environ.get("FOCUS_SLOW_SUITE_THRESHOLD", defaults.slow_suite_threshold)
        ),
        exclude_singleton_skips=parse_bool(
            environ.get("FOCUS_EXCLUDE_SINGLETON_SKIPS"), defaults.exclude_singleton_skips
        ),
        rerun_command=environ.get("FOCUS_RERUN_COMMAND") or None,
    )


def color_enabled(options: ReporterOptions, context: RunContext) -> bool:
    """Resolve whether ANSI styling should be applied."""
    if options.color is not None:
        return options.color
    if not context.is_tty:
        return False

    term = context.environ.get("TERM", "")
    if _COLOR_TERM.search(term):
        return True
    return bool(parse_bool(context.environ.get("EMACS"), False))
