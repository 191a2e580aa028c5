"""Formatter and context objects behind :mod:`crux_claude.base.logging`.

Split out so the formatter can be attached to handlers (file, console) without
importing the logger bootstrap.
"""

from .json_formatter import JsonFormatter, ISO
from .logging_context import LogContext

__all__ = ["JsonFormatter", "ISO", "LogContext"]
