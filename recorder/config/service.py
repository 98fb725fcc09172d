# recorder/config/service.py
from __future__ import annotations
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from recorder.config.providers import DefaultsProvider, FileProvider, OverrideProvider
from recorder.config.schema import validateConfig
from recorder.config.store import ConfigStore
from recorder.config.types import ConfigProvider

logger = logging.getLogger(__name__)

__all__ = ["DEFAULTS_FILE", "ConfigService"]

DEFAULTS_FILE = Path(__file__).with_name("defaults.json5")



@dataclass
class ConfigService:
    globalStore: ConfigStore

    @classmethod
    def bootstrap(
        cls,
        *,
        siteConfigPath: Path | str | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> "ConfigService":
        """
        Builds the layered store:
            defaults.json5 → site file (optional) → runtime overrides
        and validates the merged result once.
        """
        providers: list[ConfigProvider] = [DefaultsProvider(path=DEFAULTS_FILE)]
        if siteConfigPath is not None:
            providers.append(FileProvider(path=siteConfigPath))
        providers.append(OverrideProvider(overrides))

        store = ConfigStore(namespace="config:recorder", validator=validateConfig, providers=providers)
        store.validate()
        logger.debug("Config bootstrapped with layers: %s", store.snapshot()["layers"])
        return cls(globalStore=store)
