# recorder/capture/models.py
from __future__ import annotations
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["CapturedMutation", "CaptureState", "ClearOutcome"]



class CapturedMutation(BaseModel):
    """One recorded INSERT/UPDATE statement. Never changed after capture."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    sequence: int = Field(ge=1)
    timestamp: datetime
    statementText: str



class CaptureState(str, Enum):
    DISABLED = "disabled"
    IDLE = "idle"
    # Held only while a captured statement is being persisted
    RECORDING = "recording"



class ClearOutcome(str, Enum):
    SUCCESS = "success"
    DENIED = "denied"
