"""
Unit Tests - Output Formatter
==============================
Validates:
  - exact ANSI escape format for severity tags and palette colors
  - PlainStyler leaves text untouched
  - tag validation (unknown tag → ValueError, non-str → TypeError)
"""
import pytest

from focusreport.core.output_formatter import (
    STYLE_CODES,
    AnsiStyler,
    PlainStyler,
    make_styler,
    validate_tag,
)


# ---------------------------------------------------------------------------
# 1. AnsiStyler
# ---------------------------------------------------------------------------
class TestAnsiStyler:

    @pytest.mark.parametrize("tag,expected", [
        ("failure",   "\x1b[0;31mboom\x1b[0m"),
        ("error",     "\x1b[1;31mboom\x1b[0m"),
        ("skip",      "\x1b[1;33mboom\x1b[0m"),
        ("pass",      "\x1b[1;32mboom\x1b[0m"),
        ("white",     "\x1b[1;37mboom\x1b[0m"),
        ("gray",      "\x1b[0;37mboom\x1b[0m"),
        ("dark_gray", "\x1b[1;30mboom\x1b[0m"),
    ])
    def test_exact_escape(self, tag, expected):
        assert AnsiStyler().style(tag, "boom") == expected

    def test_empty_text_still_wrapped(self):
        assert AnsiStyler().style("pass", "") == "\x1b[1;32m\x1b[0m"


# ---------------------------------------------------------------------------
# 2. PlainStyler
# ---------------------------------------------------------------------------
class TestPlainStyler:

    @pytest.mark.parametrize("tag", sorted(STYLE_CODES))
    def test_identity(self, tag):
        assert PlainStyler().style(tag, "boom") == "boom"

    def test_still_validates(self):
        with pytest.raises(ValueError):
            PlainStyler().style("loud", "boom")


# ---------------------------------------------------------------------------
# 3. Validation / factory
# ---------------------------------------------------------------------------
class TestValidation:

    def test_unknown_tag(self):
        with pytest.raises(ValueError, match="Unknown style tag 'loud'"):
            validate_tag("loud")

    def test_non_string_tag(self):
        with pytest.raises(TypeError):
            validate_tag(None)

    def test_make_styler(self):
        assert isinstance(make_styler(True), AnsiStyler)
        assert isinstance(make_styler(False), PlainStyler)
