# recorder/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers

from recorder.app.globals import config, configBool
from .formatters import DevFormatter, JsonFormatter, RedactingFormatter
from .filters import RecurringSuppressFilter

__all__ = ["NO_PROPAGATE", "configureLogging"]



# Disable propagation from common libraries
NO_PROPAGATE = [
    "uvicorn.access",
    "httpcore.connection", "httpcore.http11",
]



def configureLogging() -> None:
    """
    Initiate the global logging configuration.

    Dev:
      - Console pretty logs (DEBUG)
      - JSON file log (DEBUG), when `logging.file` is set

    Prod:
      - Console INFO
      - JSON file logs INFO with rotation
      - Credential scrubbing is always active
      - Optional recurring suppression (toggle)
    """
    devMode = configBool("debug.devModeEnabled", False)
    rootLevel = logging.DEBUG if devMode else logging.INFO

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(rootLevel)

    for name in NO_PROPAGATE:
        logging.getLogger(name).propagate = False

    devFmt = RedactingFormatter(DevFormatter())
    jsonFmt = RedactingFormatter(JsonFormatter())

    handlers: list[logging.Handler] = []

    consoleHandler = logging.StreamHandler()
    consoleHandler.setLevel(rootLevel)
    consoleHandler.setFormatter(devFmt)
    handlers.append(consoleHandler)

    logFile = config("logging.file", None)
    if logFile:
        fileHandler = logging.handlers.RotatingFileHandler(
            str(logFile),
            maxBytes=int(config("logging.maxBytes", 10 * 1024 * 1024)),
            backupCount=int(config("logging.backupCount", 5)),
            encoding="utf-8",
        )
        fileHandler.setLevel(rootLevel)
        fileHandler.setFormatter(jsonFmt)
        handlers.append(fileHandler)

    if configBool("debug.suppressRecurringMessages.enabled", False):
        levelName = str(config("debug.suppressRecurringMessages.summaryLevel", "INFO")).upper()
        suppressFilter = RecurringSuppressFilter(
            windowSeconds=int(config("debug.suppressRecurringMessages.windowSeconds", 60)),
            maxPerWindow=int(config("debug.suppressRecurringMessages.maxPerWindow", 5)),
            summaryLevel=getattr(logging, levelName, logging.INFO),
        )
        for handler in handlers:
            handler.addFilter(suppressFilter)

    for handler in handlers:
        root.addHandler(handler)

    # Per-logger tweaks (reduce noise)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
