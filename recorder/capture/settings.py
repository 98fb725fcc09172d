# recorder/capture/settings.py
from __future__ import annotations
import logging

from recorder.config.store import ConfigStore

logger = logging.getLogger(__name__)

__all__ = ["InMemoryRecordingSettings", "ConfigRecordingSettings"]

RECORDING_KEY = "capture.recordingEnabled"



class InMemoryRecordingSettings:
    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled

    def isRecordingEnabled(self) -> bool:
        return self._enabled

    def setRecordingEnabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)



class ConfigRecordingSettings:
    """
    Recording switch stored in the config store, so "stop recording"
    survives for as long as the target layer does (runtime by default,
    the site file when `target="site"`).
    """

    def __init__(self, store: ConfigStore, *, target: str = "runtime") -> None:
        self._store = store
        self._target = target

    def isRecordingEnabled(self) -> bool:
        value = self._store.get(RECORDING_KEY)
        return True if value is None else bool(value)

    def setRecordingEnabled(self, enabled: bool) -> None:
        self._store.set(RECORDING_KEY, bool(enabled), target=self._target, actor="recordingSettings") # type: ignore[arg-type]
        if self._target == "site":
            self._store.saveAll()
        logger.info("Recording %s", "resumed" if enabled else "stopped")
