# tests/capture/test_capture_log.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from recorder.capture.log import MutationCaptureLog
from recorder.capture.models import CaptureState, ClearOutcome
from recorder.capture.settings import InMemoryRecordingSettings
from recorder.capture.store import InMemoryMutationStore

INSERT_POST = "INSERT INTO `wp_posts` (`post_title`) VALUES ('Hello')"
UPDATE_POST = "UPDATE `wp_posts` SET `post_title` = 'Hi' WHERE `ID` = 1"
UPDATE_OPTION = "UPDATE `wp_options` SET `option_value` = 'x' WHERE `option_name` = 'blogname'"


# -------- observe --------

def test_observe_returns_text_unchanged_and_records(captureLog):
    assert captureLog.observe(INSERT_POST) == INSERT_POST
    records = captureLog.listCaptured()
    assert [record.sequence for record in records] == [1]
    assert records[0].statementText == INSERT_POST


def test_sequences_are_strictly_increasing(captureLog):
    captureLog.observe(INSERT_POST)
    captureLog.observe(UPDATE_POST)
    captureLog.observe("SELECT * FROM wp_posts")
    captureLog.observe(INSERT_POST)
    assert [record.sequence for record in captureLog.listCaptured()] == [1, 2, 3]


def test_options_table_is_never_captured(captureLog):
    assert captureLog.observe(UPDATE_OPTION) == UPDATE_OPTION
    assert captureLog.listCaptured() == []


def test_reads_and_deletes_are_not_captured(captureLog):
    captureLog.observe("SELECT ID FROM wp_posts")
    captureLog.observe("DELETE FROM wp_posts WHERE ID = 3")
    assert captureLog.listCaptured() == []


def test_background_context_is_not_captured(captureLog):
    captureLog.observe(INSERT_POST, background=True)
    assert captureLog.listCaptured() == []


def test_disabled_recording_passes_through(mutationStore):
    log = MutationCaptureLog(store=mutationStore, settings=InMemoryRecordingSettings(enabled=False))
    assert log.state is CaptureState.DISABLED
    assert log.observe(INSERT_POST) == INSERT_POST
    assert mutationStore.listAll() == []


def test_recording_can_be_toggled(captureLog, recordingSettings):
    recordingSettings.setRecordingEnabled(False)
    captureLog.observe(INSERT_POST)
    recordingSettings.setRecordingEnabled(True)
    captureLog.observe(UPDATE_POST)
    assert [record.statementText for record in captureLog.listCaptured()] == [UPDATE_POST]


# -------- reentrancy --------

class _EchoingStore(InMemoryMutationStore):
    """Persisting a record runs through the query hook again, like a real database write."""

    def __init__(self):
        super().__init__()
        self.log = None
        self.statesDuringAppend = []

    def append(self, sequence, timestamp, text):
        self.statesDuringAppend.append(self.log.state)
        self.log.observe(f"INSERT INTO wp_blueprint_recorder_log (sql) VALUES ('{sequence}')")
        super().append(sequence, timestamp, text)


def test_persisting_a_record_never_captures_itself(recordingSettings):
    store = _EchoingStore()
    log = MutationCaptureLog(store=store, settings=recordingSettings)
    store.log = log

    log.observe(INSERT_POST)
    log.observe(UPDATE_POST)

    assert [record.statementText for record in log.listCaptured()] == [INSERT_POST, UPDATE_POST]
    assert store.statesDuringAppend == [CaptureState.RECORDING, CaptureState.RECORDING]
    assert log.state is CaptureState.IDLE


class _BrokenStore(InMemoryMutationStore):
    def append(self, sequence, timestamp, text):
        raise OSError("disk full")


def test_persistence_failure_is_logged_and_query_still_runs(recordingSettings, caplog):
    log = MutationCaptureLog(store=_BrokenStore(), settings=recordingSettings)
    with caplog.at_level(logging.ERROR, logger="recorder.capture.log"):
        assert log.observe(INSERT_POST) == INSERT_POST
    assert "Failed to persist captured mutation" in caplog.text
    assert log.state is CaptureState.IDLE


def test_sequence_continues_from_existing_records(recordingSettings):
    store = InMemoryMutationStore()
    store.append(7, datetime(2024, 1, 1, tzinfo=timezone.utc), INSERT_POST)
    log = MutationCaptureLog(store=store, settings=recordingSettings)
    log.observe(UPDATE_POST)
    assert [record.sequence for record in log.listCaptured()] == [7, 8]


# -------- replay script --------

def _storeWith(*pairs):
    store = InMemoryMutationStore()
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for sequence, text in pairs:
        store.append(sequence, stamp, text)
    return store


def test_replay_script_is_in_ascending_sequence_order():
    store = _storeWith((3, "UPDATE wp_posts SET a=3"), (1, "INSERT INTO wp_posts VALUES (1)"), (2, "UPDATE wp_posts SET a=2"))
    log = MutationCaptureLog(store=store, settings=InMemoryRecordingSettings())
    assert log.exportReplayScript() == (
        "INSERT INTO wp_posts VALUES (1);\n"
        "UPDATE wp_posts SET a=2;\n"
        "UPDATE wp_posts SET a=3;\n"
    )


def test_replay_selection_ignores_selection_order_and_unknown_sequences():
    store = _storeWith((1, "INSERT INTO wp_posts VALUES (1)"), (2, "UPDATE wp_posts SET a=2"), (3, "UPDATE wp_posts SET a=3"))
    log = MutationCaptureLog(store=store, settings=InMemoryRecordingSettings())
    assert log.exportReplayScript([3, 1, 99]) == "INSERT INTO wp_posts VALUES (1);\nUPDATE wp_posts SET a=3;\n"


def test_replay_does_not_double_terminate():
    store = _storeWith((1, "INSERT INTO wp_posts VALUES (1);  \n"))
    log = MutationCaptureLog(store=store, settings=InMemoryRecordingSettings())
    assert log.exportReplayScript() == "INSERT INTO wp_posts VALUES (1);\n"


def test_empty_selection_gives_empty_script(captureLog):
    captureLog.observe(INSERT_POST)
    assert captureLog.exportReplayScript([]) == ""


# -------- clear --------

def test_clear_denied_keeps_records(captureLog, caplog):
    captureLog.observe(INSERT_POST)
    with caplog.at_level(logging.WARNING, logger="recorder.capture.log"):
        assert captureLog.clear(False) is ClearOutcome.DENIED
    assert len(captureLog.listCaptured()) == 1
    assert "not authorized" in caplog.text


def test_clear_authorized_removes_everything(captureLog):
    captureLog.observe(INSERT_POST)
    captureLog.observe(UPDATE_POST)
    assert captureLog.clear(True) is ClearOutcome.SUCCESS
    assert captureLog.listCaptured() == []
    assert captureLog.state is CaptureState.IDLE


def test_sequence_numbers_are_not_reused_after_clear(captureLog):
    captureLog.observe(INSERT_POST)
    captureLog.clear(True)
    captureLog.observe(UPDATE_POST)
    assert [record.sequence for record in captureLog.listCaptured()] == [2]
