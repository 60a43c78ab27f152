"""
Logging Config
==============
Diagnostics for the reporter itself (lifecycle anomalies, run summaries,
API requests). The test report never goes through logging.
"""
import logging
import sys
import os
from datetime import datetime
from typing import Optional

from focusreport.core.output_formatter import Color, END_CODE, ESCAPE


def _ansi(code: str) -> str:
    return f"{ESCAPE}[{code}m"


class ColoredFormatter(logging.Formatter):
    """Colors console log lines with the same palette as the report."""

    format_str = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"

    FORMATS = {
        logging.DEBUG: _ansi(Color.CYAN) + format_str + END_CODE,
        logging.INFO: _ansi(Color.GREEN) + format_str + END_CODE,
        logging.WARNING: _ansi(Color.YELLOW) + format_str + END_CODE,
        logging.ERROR: _ansi(Color.RED) + format_str + END_CODE,
        logging.CRITICAL: _ansi(Color.LIGHT_RED) + format_str + END_CODE,
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        # Levels outside the standard range
        if not log_fmt:
            log_fmt = self.format_str
        formatter = logging.Formatter(log_fmt, datefmt="%Y-%m-%d %H:%M:%S")
        return formatter.format(record)

def setup_logging(level=logging.INFO, log_dir: Optional[str] = None):
    """
    Setup centralized logging configuration.

    Logs go to stderr so they never interleave with the report on stdout.
    A daily log file is added only when ``log_dir`` is given.
    """
    root_logger = logging.getLogger()

    # Clear existing handlers to prevent duplicate logs
    if root_logger.handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    # 1. Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter())
    root_logger.addHandler(console_handler)

    # 2. Optional file handler
    if log_dir:
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(
            os.path.join(log_dir, f"focusreport_{datetime.now().strftime('%Y%m%d')}.log")
        )
        file_fmt = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_fmt)
        root_logger.addHandler(file_handler)

    for logger_name in ["focusreport", "uvicorn", "uvicorn.error", "uvicorn.access", "main"]:
        l = logging.getLogger(logger_name)
        l.setLevel(level)
        l.propagate = True

    root_logger.debug("Logging initialized (console%s).", " + file" if log_dir else "")
