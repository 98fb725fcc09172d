# recorder/core/time.py
from __future__ import annotations
import time
from datetime import datetime, timezone

__all__ = ["nowSeconds", "utcNow"]



def nowSeconds() -> float:
    """Wall-clock seconds. Cache expiry is compared against this."""
    return time.time()



def utcNow() -> datetime:
    return datetime.now(timezone.utc)
