# tests/core/test_config_store.py
from __future__ import annotations

import logging

import json5
import pytest

from recorder.app.globals import config, configBool, getConfigService, initConfig
from recorder.config.providers import DefaultsProvider, FileProvider, OverrideProvider
from recorder.config.schema import validateConfig
from recorder.config.service import ConfigService
from recorder.config.store import ConfigStore
from recorder.core.errors import ConfigValidationError, RecorderError


def _store(tmp_path=None, defaults=None):
    providers = [DefaultsProvider(defaults or {"resolver": {"cacheTtlSeconds": 86400, "selfSlug": "blueprint-recorder"}})]
    if tmp_path is not None:
        providers.append(FileProvider(tmp_path / "site.json5"))
    providers.append(OverrideProvider())
    return ConfigStore(namespace="test", validator=validateConfig, providers=providers)


def test_topmost_layer_wins(tmp_path):
    store = _store(tmp_path)
    store.set("resolver.cacheTtlSeconds", 60, target="site")
    assert store.get("resolver.cacheTtlSeconds") == 60
    store.set("resolver.cacheTtlSeconds", 5, target="runtime")
    assert store.get("resolver.cacheTtlSeconds") == 5
    assert store.snapshot()["values"]["resolver"] == {"cacheTtlSeconds": 5, "selfSlug": "blueprint-recorder"}


def test_invalid_write_is_rolled_back():
    store = _store()
    with pytest.raises(ConfigValidationError):
        store.set("resolver.cacheTtlSeconds", 0)
    assert store.get("resolver.cacheTtlSeconds") == 86400


def test_defaults_layer_is_read_only():
    store = _store()
    with pytest.raises(RuntimeError):
        store.set("resolver.selfSlug", "other", target="defaults")


def test_missing_target_layer():
    with pytest.raises(KeyError):
        _store().set("resolver.cacheTtlSeconds", 10, target="site")


def test_only_effective_changes_are_logged(caplog):
    store = _store()
    with caplog.at_level(logging.DEBUG, logger="recorder.config.store"):
        store.set("resolver.cacheTtlSeconds", 10, actor="cli")
        store.set("resolver.cacheTtlSeconds", 10, actor="cli")

    changes = [record for record in caplog.records if "changed by" in record.getMessage()]
    assert [record.getMessage() for record in changes] == ["Config 'resolver.cacheTtlSeconds' changed by cli on runtime layer"]


def test_site_file_is_saved_atomically(tmp_path):
    store = _store(tmp_path)
    store.set("capture.recordingEnabled", False, target="site")
    store.saveAll()

    assert json5.loads((tmp_path / "site.json5").read_text(encoding="utf-8")) == {"capture": {"recordingEnabled": False}}
    assert FileProvider(tmp_path / "site.json5").get("capture.recordingEnabled") is False


def test_file_provider_tolerates_broken_json(tmp_path):
    path = tmp_path / "site.json5"
    path.write_text("{ nope", encoding="utf-8")
    assert FileProvider(path).to_dict() == {}


def test_file_provider_rejects_non_object(tmp_path):
    path = tmp_path / "site.json5"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(TypeError):
        FileProvider(path)


def test_shipped_defaults_are_valid_and_complete():
    service = ConfigService.bootstrap()
    store = service.globalStore
    assert store.get("resolver.cacheTtlSeconds") == 86400
    assert store.get("resolver.proxyEndpoint") == "https://github-proxy.com/proxy/"
    assert store.get("capture.ignoredTables") == ["options", "sessions", "woocommerce_sessions"]
    assert "blogname" in store.get("blueprint.siteOptions")
    assert store.get("http.cors.allowOrigins") == ["https://playground.wordpress.net"]


def test_bootstrap_rejects_invalid_overrides():
    with pytest.raises(ConfigValidationError):
        ConfigService.bootstrap(overrides={"blueprint": {"landingPage": "wp-admin"}})


def test_globals_bootstrap_lazily():
    with pytest.raises(RecorderError):
        getConfigService()
    assert config("resolver.selfSlug") == "blueprint-recorder"
    assert config("no.such.key", 42) == 42
    assert configBool("capture.recordingEnabled") is True
    assert getConfigService() is initConfig()
