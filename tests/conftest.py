import sys
from datetime import datetime, timedelta, timezone

import pytest

from recorder.app.context import PROCESS_REGISTRY
from recorder.capture.log import MutationCaptureLog
from recorder.capture.settings import InMemoryRecordingSettings
from recorder.capture.store import InMemoryMutationStore
from recorder.core.errors import CatalogError
from recorder.core.logging import clearLogContext
from recorder.host.types import CatalogEntry
from recorder.resources.cache import MemoryTtlCache
from recorder.resources.resolver import ResourceResolver



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



class FakeCatalog:
    """CatalogLookup double that records every query."""

    def __init__(self, plugins=None, themes=(), failing=()):
        self.plugins = dict(plugins or {})
        self.themes = set(themes)
        self.failing = set(failing)
        self.calls: list[tuple[str, str]] = []

    def lookupExtension(self, slug):
        self.calls.append(("plugin", slug))
        if slug in self.failing:
            raise CatalogError("catalog is down", slug=slug)
        if slug not in self.plugins:
            return CatalogEntry(found=False)
        return CatalogEntry(found=True, downloadUrl=self.plugins[slug])

    def lookupTheme(self, slug):
        self.calls.append(("theme", slug))
        if slug in self.failing:
            raise CatalogError("catalog is down", slug=slug)
        return CatalogEntry(found=slug in self.themes)

    def pluginCalls(self, slug):
        return [call for call in self.calls if call == ("plugin", slug)]



class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds



class SteppingUtcClock:
    """Returns a new timestamp one second apart on every call."""

    def __init__(self):
        self.current = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value



@pytest.fixture(autouse=True)
def _isolateProcessState():
    PROCESS_REGISTRY.unregister("config.service")
    clearLogContext()
    yield
    PROCESS_REGISTRY.unregister("config.service")
    clearLogContext()



@pytest.fixture()
def catalog():
    return FakeCatalog(
        plugins={
            "akismet": "https://downloads.wordpress.org/plugin/akismet.5.3.zip",
            "woocommerce": "https://downloads.wordpress.org/plugin/woocommerce.8.9.1.zip",
            "woo-addon": "https://downloads.wordpress.org/plugin/woo-addon.1.0.zip",
            "gh-plugin": "https://github.com/acme/gh-plugin/archive/refs/tags/v1.2.0.zip",
            "gh-branch": "https://github.com/acme/gh-branch/archive/refs/heads/trunk.zip",
            "weird-host": "https://example.com/downloads/weird-host.zip",
        },
        themes={"twentytwentyfour"},
        failing={"flaky"},
    )



@pytest.fixture()
def clock():
    return FakeClock()



@pytest.fixture()
def cache(clock):
    return MemoryTtlCache(clock=clock)



@pytest.fixture()
def resolver(catalog, cache):
    return ResourceResolver(catalog=catalog, cache=cache)



@pytest.fixture()
def recordingSettings():
    return InMemoryRecordingSettings(enabled=True)



@pytest.fixture()
def mutationStore():
    return InMemoryMutationStore()



@pytest.fixture()
def captureLog(mutationStore, recordingSettings):
    return MutationCaptureLog(store=mutationStore, settings=recordingSettings, clock=SteppingUtcClock())
