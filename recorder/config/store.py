# recorder/config/store.py
from __future__ import annotations

import logging
from typing import Any, Callable, Literal

from recorder.core.jsonutils import deepMerge
from .types import ConfigProvider

logger = logging.getLogger(__name__)

__all__ = ["ConfigStore"]

Target = Literal["runtime", "site", "defaults"]



class ConfigStore:
    """
    Minimal layered config store:
      - read: first-hit from the topmost provider down
      - write: dispatch to a target provider (runtime/site)
      - validate: on set(), validate the *effective* merged document
    """

    def __init__(
        self,
        *,
        namespace: str,
        validator: Callable[[Any], Any] | None,
        providers: list[ConfigProvider],
    ) -> None:
        if not providers:
            raise ValueError("ConfigStore needs at least one provider")
        self.namespace = namespace
        self._validator = validator
        self._providers = providers

        # Index providers by role from their class names
        self._roleIdx: dict[str, int] = {}
        for idx, provider in enumerate(self._providers):
            name = provider.__class__.__name__.lower()
            if "override" in name:
                self._roleIdx.setdefault("runtime", idx)
            elif "file" in name:
                self._roleIdx.setdefault("site", idx)
            elif "defaults" in name:
                self._roleIdx.setdefault("defaults", idx)

    # ----- Helpers -----

    def _resolveTargetIdx(self, target: Target) -> int:
        if target not in self._roleIdx:
            raise KeyError(f"No provider mapped for target '{target}' in {self.namespace}")
        return self._roleIdx[target]

    def _merged(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        # We merge from bottom to top
        for provider in self._providers:
            merged = deepMerge(merged, provider.to_dict())
        return merged

    def validate(self) -> None:
        if self._validator is not None:
            self._validator(self._merged())

    # ----- Public API -----

    def get(self, key: str, default: Any = None) -> Any:
        for provider in reversed(self._providers): # Topmost first precedence
            value = provider.get(key)
            if value is not None:
                return value
        return default

    def set(
        self,
        key: str,
        value: Any,
        *,
        target: Target = "runtime",
        actor: str = "system",
    ) -> None:
        idx = self._resolveTargetIdx(target)
        provider = self._providers[idx]
        oldValue = self.get(key)
        oldLayerValue = provider.get(key)
        provider.set(key, value)

        # Validate whole effective config after the write
        try:
            self.validate()
        except Exception:
            # rollback
            provider.set(key, oldLayerValue)
            raise

        newValue = self.get(key)
        if oldValue != newValue:
            logger.debug("Config '%s' changed by %s on %s layer", key, actor, target)

    def snapshot(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "values": self._merged(),
            "layers": [provider.__class__.__name__ for provider in self._providers],
        }

    def saveAll(self) -> None:
        for provider in self._providers:
            provider.save()
