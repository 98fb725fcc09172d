# recorder/capture/log.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from recorder.capture.classify import CaptureFilter
from recorder.capture.models import CapturedMutation, CaptureState, ClearOutcome
from recorder.core.logging import setLogContext
from recorder.core.time import utcNow
from recorder.host.types import MutationRecordStore, RecordingSettings

logger = logging.getLogger(__name__)

__all__ = ["STATEMENT_TERMINATOR", "MutationCaptureLog"]

STATEMENT_TERMINATOR = ";\n"



class MutationCaptureLog:
    """
    Records INSERT/UPDATE statements seen by the host's query hook so they
    can be replayed in a fresh Playground instance.

    States:
        DISABLED   recording switched off in `settings`
        IDLE       waiting for the next statement
        RECORDING  a captured statement is being persisted

    Persisting a record is itself a write on the host, which runs through
    the same hook again. While RECORDING, observe() passes statements
    through untouched, so a capture never captures itself.
    """

    def __init__(
        self,
        *,
        store: MutationRecordStore,
        settings: RecordingSettings,
        captureFilter: CaptureFilter | None = None,
        clock: Callable[[], datetime] = utcNow,
    ) -> None:
        self.store = store
        self.settings = settings
        self.captureFilter = captureFilter or CaptureFilter()
        self._clock = clock
        self._recording = False
        self._nextSequence: int | None = None

    @property
    def state(self) -> CaptureState:
        if not self.settings.isRecordingEnabled():
            return CaptureState.DISABLED
        if self._recording:
            return CaptureState.RECORDING
        return CaptureState.IDLE

    def _allocateSequence(self) -> int:
        if self._nextSequence is None:
            existing = self.store.listAll()
            self._nextSequence = max((record.sequence for record in existing), default=0) + 1
        sequence = self._nextSequence
        self._nextSequence += 1
        return sequence

    def observe(self, statementText: str, *, background: bool = False) -> str:
        """
        Query filter: always returns `statementText` unchanged; records it
        as a side effect when capture is IDLE and the filter accepts it.
        """
        if self.state is not CaptureState.IDLE:
            return statementText

        reason = self.captureFilter.rejectReason(statementText, background=background)
        if reason is not None:
            return statementText

        self._recording = True
        try:
            sequence = self._allocateSequence()
            self.store.append(sequence, self._clock(), statementText)
        except Exception:
            # The host's query must still run
            logger.exception("Failed to persist captured mutation")
            return statementText
        finally:
            self._recording = False

        setLogContext(sequence=sequence)
        logger.debug("Captured mutation #%d: %s", sequence, statementText[:200])
        return statementText

    def listCaptured(self) -> list[CapturedMutation]:
        return sorted(self.store.listAll(), key=lambda record: record.sequence)

    def exportReplayScript(self, selectedSequences: Iterable[int] | None = None) -> str:
        """
        Concatenates the selected statements in ascending sequence order,
        each terminated by ";\\n". None selects every captured statement.
        Unknown sequence numbers are skipped. Statement text is not validated.
        """
        records = self.listCaptured()
        if selectedSequences is not None:
            wanted = {int(sequence) for sequence in selectedSequences}
            records = [record for record in records if record.sequence in wanted]
            missing = wanted - {record.sequence for record in records}
            if missing:
                logger.debug("Replay selection references unknown sequences: %s", sorted(missing))

        parts: list[str] = []
        for record in records:
            text = record.statementText.rstrip().rstrip(";").rstrip()
            if text:
                parts.append(text + STATEMENT_TERMINATOR)
        return "".join(parts)

    def clear(self, callerIsAuthorized: bool) -> ClearOutcome:
        if not callerIsAuthorized:
            logger.warning("Refusing to clear captured mutations: caller is not authorized")
            return ClearOutcome.DENIED

        # Deleting records is a write too; keep it out of the log.
        self._recording = True
        try:
            removed = self.store.deleteAll()
        finally:
            self._recording = False
        logger.info("Cleared %d captured mutations", removed)
        return ClearOutcome.SUCCESS
