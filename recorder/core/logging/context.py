# recorder/core/logging/context.py
from __future__ import annotations
import contextvars

# Per-request log context. Web handlers set requestId; the capture log adds sequence numbers.
_logContextVar: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar("recorder.logctx", default=None)

def setLogContext(**kvs):
    """Set or update per-log context values (requestId, slug, sequence, etc.)."""
    current = dict(_logContextVar.get() or {})
    for key, value in kvs.items():
        if value is not None:
            current[key] = value
    _logContextVar.set(current)

def clearLogContext():
    """Clear context after a request is fully handled."""
    _logContextVar.set(None)

def getLogContext():
    """Return current context dict or None."""
    return _logContextVar.get()
