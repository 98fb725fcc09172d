# recorder/capture/classify.py
from __future__ import annotations
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

__all__ = ["StatementInfo", "classifyStatement", "CaptureFilter"]

# Textual heuristics on purpose: this mirrors how the host decides what to
# record, not what the SQL would actually do.

_LEADING_RE = re.compile(r"^\s*(INSERT|UPDATE)\s", re.IGNORECASE)
_INSERT_TARGET_RE = re.compile(
    r"^\s*INSERT\s+(?:(?:LOW_PRIORITY|DELAYED|HIGH_PRIORITY|IGNORE)\s+)*(?:INTO\s+)?`?([A-Za-z0-9_$]+)`?",
    re.IGNORECASE,
)
_UPDATE_TARGET_RE = re.compile(
    r"^\s*UPDATE\s+(?:(?:LOW_PRIORITY|IGNORE)\s+)*`?([A-Za-z0-9_$]+)`?",
    re.IGNORECASE,
)

StatementKind = Literal["insert", "update", "other"]



@dataclass(frozen=True, slots=True)
class StatementInfo:
    kind: StatementKind
    targetTable: str | None = None



def classifyStatement(text: str) -> StatementInfo:
    """
    "INSERT INTO `wp_posts` ..." → StatementInfo("insert", "wp_posts")
    "  update wp_postmeta SET .." → StatementInfo("update", "wp_postmeta")
    "SELECT ..."                  → StatementInfo("other")
    """
    match = _LEADING_RE.match(text or "")
    if match is None:
        return StatementInfo(kind="other")

    if match.group(1).upper() == "INSERT":
        target = _INSERT_TARGET_RE.match(text)
        return StatementInfo(kind="insert", targetTable=target.group(1) if target else None)

    target = _UPDATE_TARGET_RE.match(text)
    return StatementInfo(kind="update", targetTable=target.group(1) if target else None)



class CaptureFilter:
    """
    Decides whether an observed statement is worth replaying.

    Rejected:
      - anything running in a background context (cron, installer)
      - statements that are not INSERT/UPDATE
      - statements writing to or mentioning a noise table
        (options, session tables; names get `tablePrefix` prepended)
      - statements containing a noise marker (auto-draft placeholders,
        transients, edit locks)
    """

    def __init__(
        self,
        *,
        tablePrefix: str = "wp_",
        ignoredTables: Iterable[str] = ("options", "sessions", "woocommerce_sessions"),
        ignoredMarkers: Iterable[str] = ("auto-draft", "_transient_", "_edit_lock"),
    ) -> None:
        self.tablePrefix = tablePrefix
        self.ignoredTables = tuple(f"{tablePrefix}{name}" for name in ignoredTables)
        self.ignoredMarkers = tuple(ignoredMarkers)

    @classmethod
    def fromConfig(cls) -> "CaptureFilter":
        from recorder.app.globals import config
        return cls(
            tablePrefix=str(config("capture.tablePrefix", "wp_")),
            ignoredTables=list(config("capture.ignoredTables", ["options", "sessions", "woocommerce_sessions"])),
            ignoredMarkers=list(config("capture.ignoredMarkers", ["auto-draft", "_transient_", "_edit_lock"])),
        )

    def rejectReason(self, text: str, *, background: bool = False) -> str | None:
        """Returns why `text` is not captured, or None when it should be."""
        if background:
            return "background"
        info = classifyStatement(text)
        if info.kind == "other":
            return "notMutation"
        if info.targetTable is not None:
            target = info.targetTable.lower()
            for table in self.ignoredTables:
                if target == table.lower():
                    return f"table:{table}"
        for table in self.ignoredTables:
            if table in text:
                return f"table:{table}"
        for marker in self.ignoredMarkers:
            if marker in text:
                return f"marker:{marker}"
        return None

    def accepts(self, text: str, *, background: bool = False) -> bool:
        return self.rejectReason(text, background=background) is None
