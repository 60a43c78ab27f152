"""
Output Formatter
================
THE SINGLE SOURCE OF TRUTH for styling report strings.

STRICT PURITY CONTRACT:
  - This module NEVER reads environment variables (see config.color_enabled).
  - This module NEVER writes to a stream.
  - Given the same (tag, text) it ALWAYS returns the same string.

INTEGRATION CONTRACT:
  The report composer and the live reporter depend on the Styler protocol
  only. Callers supply:
    tag  : str - one of STYLE_CODES (severity tags or plain color names)
    text : str - the string to wrap

  AnsiStyler outputs exactly:
    ESC[{code}m{text}ESC[0m

  PlainStyler returns ``text`` unchanged, so tests can assert on plain text.
"""
from typing import Protocol

ESCAPE = "\x1b"
END_CODE = f"{ESCAPE}[0m"


# ---------------------------------------------------------------------------
# Color Codes
# ---------------------------------------------------------------------------
class Color:
    BLACK        = "0;30"
    RED          = "0;31"
    GREEN        = "0;32"
    BROWN        = "0;33"
    BLUE         = "0;34"
    PURPLE       = "0;35"
    CYAN         = "0;36"
    GRAY         = "0;37"
    DARK_GRAY    = "1;30"
    LIGHT_RED    = "1;31"
    LIGHT_GREEN  = "1;32"
    YELLOW       = "1;33"
    LIGHT_BLUE   = "1;34"
    LIGHT_PURPLE = "1;35"
    LIGHT_CYAN   = "1;36"
    WHITE        = "1;37"
    BOLD         = "1"


# ---------------------------------------------------------------------------
# Tag Table
# ---------------------------------------------------------------------------
# Severity tags first, then the plain palette used for secondary text.
STYLE_CODES: dict[str, str] = {
    # severities
    "failure":   Color.RED,
    "error":     Color.LIGHT_RED,
    "skip":      Color.YELLOW,
    "pass":      Color.LIGHT_GREEN,
    # palette
    "bold":      Color.BOLD,
    "white":     Color.WHITE,
    "gray":      Color.GRAY,
    "dark_gray": Color.DARK_GRAY,
    "red":       Color.RED,
    "green":     Color.GREEN,
    "yellow":    Color.YELLOW,
    "blue":      Color.BLUE,
    "cyan":      Color.CYAN,
    "purple":    Color.PURPLE,
}


def validate_tag(tag: str) -> None:
    """
    Raises ValueError if tag is not a recognised STYLE_CODES member.
    """
    if not isinstance(tag, str):
        raise TypeError(f"tag must be str, got {type(tag).__name__}")
    if tag not in STYLE_CODES:
        raise ValueError(
            f"Unknown style tag '{tag}'. "
            f"Allowed values: {sorted(STYLE_CODES)}"
        )


# ---------------------------------------------------------------------------
# Stylers
# ---------------------------------------------------------------------------
class Styler(Protocol):
    def style(self, tag: str, text: str) -> str:
        ...


class AnsiStyler:
    """Wraps text in the ANSI escape sequence registered for ``tag``."""

    def style(self, tag: str, text: str) -> str:
        validate_tag(tag)
        return f"{ESCAPE}[{STYLE_CODES[tag]}m{text}{END_CODE}"


class PlainStyler:
    """No-op styler: validates the tag, returns the text untouched."""

    def style(self, tag: str, text: str) -> str:
        validate_tag(tag)
        return text


def make_styler(color: bool) -> Styler:
    return AnsiStyler() if color else PlainStyler()
