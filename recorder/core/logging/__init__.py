# recorder/core/logging/__init__.py
from __future__ import annotations

from .context import setLogContext, clearLogContext, getLogContext
from .filters import RecurringSuppressFilter
from .formatters import DevFormatter, JsonFormatter, RedactingFormatter
from .setup import configureLogging

__all__ = [
    "configureLogging",
    "setLogContext",
    "clearLogContext",
    "getLogContext",
    "RecurringSuppressFilter",
    "DevFormatter",
    "JsonFormatter",
    "RedactingFormatter",
]
