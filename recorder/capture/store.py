# recorder/capture/store.py
from __future__ import annotations
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any

import json5

from recorder.capture.models import CapturedMutation

logger = logging.getLogger(__name__)

__all__ = ["InMemoryMutationStore", "Json5FileMutationStore"]



class InMemoryMutationStore:
    """MutationRecordStore kept in a list. Used by tests and the CLI."""

    def __init__(self) -> None:
        self._records: list[CapturedMutation] = []

    def append(self, sequence: int, timestamp: datetime, text: str) -> None:
        self._records.append(CapturedMutation(sequence=sequence, timestamp=timestamp, statementText=text))

    def listAll(self) -> list[CapturedMutation]:
        return sorted(self._records, key=lambda record: record.sequence)

    def deleteAll(self) -> int:
        count = len(self._records)
        self._records.clear()
        return count



class Json5FileMutationStore:
    """
    MutationRecordStore persisted as a single JSON5 document:

        { version: 1, records: [ {sequence, timestamp, statementText}, ... ] }

    The whole file is rewritten atomically on every append. Recording
    sessions are short and operator driven, so the log stays small.
    """

    VERSION = 1

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._records: list[CapturedMutation] = self._load()

    def _load(self) -> list[CapturedMutation]:
        if not self.path.exists():
            return []
        try:
            data: Any = json5.loads(self.path.read_text(encoding="utf-8"))
        except Exception as err:
            raise ValueError(f"{type(self).__name__}: failed to parse '{self.path}': {err}") from err

        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise ValueError(f"{type(self).__name__}: '{self.path}' has no 'records' list")

        records = [CapturedMutation.model_validate(item) for item in data["records"]]
        logger.debug("Loaded %d captured mutations from '%s'", len(records), self.path)
        return sorted(records, key=lambda record: record.sequence)

    def _save(self, records: list[CapturedMutation]) -> None:
        """Writes `records` to disk. Raises without touching `self._records` when the write fails."""
        payload = {
            "version": self.VERSION,
            "records": [record.model_dump(mode="json") for record in records],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmpPath = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmpPath.write_text(json5.dumps(payload, indent=2, ensure_ascii=False, quote_keys=True) + "\n", encoding="utf-8")
            os.replace(tmpPath, self.path)
        except BaseException:
            tmpPath.unlink(missing_ok=True)
            raise

    def append(self, sequence: int, timestamp: datetime, text: str) -> None:
        record = CapturedMutation(sequence=sequence, timestamp=timestamp, statementText=text)
        records = [*self._records, record]
        self._save(records)
        self._records = records

    def listAll(self) -> list[CapturedMutation]:
        return list(self._records)

    def deleteAll(self) -> int:
        count = len(self._records)
        self._save([])
        self._records = []
        return count
