# recorder/host/types.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from recorder.capture.models import CapturedMutation
    from recorder.planning.units import InstallableUnit

__all__ = [
    "CatalogEntry",
    "CatalogLookup",
    "TtlCache",
    "MutationRecordStore",
    "Authorizer",
    "SiteHost",
    "RecordingSettings",
]

# Collaborators the core consumes. The WordPress side (or a test double)
# provides implementations; nothing here talks to the network by itself.



@dataclass(frozen=True, slots=True)
class CatalogEntry:
    found: bool
    downloadUrl: str | None = None



class CatalogLookup(Protocol):
    def lookupExtension(self, slug: str) -> CatalogEntry: ...
    def lookupTheme(self, slug: str) -> CatalogEntry: ...



class TtlCache(Protocol):
    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any, ttlSeconds: int) -> None: ...
    def delete(self, key: str) -> None: ...



class MutationRecordStore(Protocol):
    def append(self, sequence: int, timestamp: datetime, text: str) -> None: ...
    def listAll(self) -> list[CapturedMutation]: ...
    def deleteAll(self) -> int: ...



class Authorizer(Protocol):
    def isAuthorizedToClear(self) -> bool: ...



class SiteHost(Protocol):
    """Read-only view of the running site."""
    def activeUnits(self) -> list[InstallableUnit]: ...
    def themeSlug(self) -> str: ...
    def platformVersions(self) -> dict[str, str]: ...
    def getOption(self, name: str) -> Any: ...



class RecordingSettings(Protocol):
    def isRecordingEnabled(self) -> bool: ...
    def setRecordingEnabled(self, enabled: bool) -> None: ...
