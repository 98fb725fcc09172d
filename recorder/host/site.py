# recorder/host/site.py
from __future__ import annotations
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import json5

from recorder.planning.units import InstallableUnit, unitFromPluginFile

logger = logging.getLogger(__name__)

__all__ = ["StaticSiteHost", "StaticAuthorizer"]



class StaticSiteHost:
    """
    SiteHost backed by a snapshot document instead of a live WordPress:

        {
          plugins: [
            "akismet/akismet.php",
            { file: "woo-addon/woo-addon.php", name: "Woo Addon", requires: "woocommerce" },
          ],
          theme: "twentytwentyfour",
          versions: { php: "8.2", wp: "6.6" },
          options: { blogname: "My Site", ... },
        }

    `requires` takes the `Requires Plugins` header string or a list of slugs.
    """

    def __init__(
        self,
        *,
        units: list[InstallableUnit] | None = None,
        theme: str = "",
        versions: Mapping[str, str] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        self._units = list(units or [])
        self._theme = theme
        self._versions = {str(key): str(value) for key, value in (versions or {}).items()}
        self._options = dict(options or {})

    @classmethod
    def fromSnapshot(cls, data: Mapping[str, Any]) -> "StaticSiteHost":
        units: list[InstallableUnit] = []
        for entry in data.get("plugins") or []:
            if isinstance(entry, str):
                units.append(unitFromPluginFile(entry))
            elif isinstance(entry, Mapping) and entry.get("file"):
                units.append(unitFromPluginFile(
                    str(entry["file"]),
                    name=entry.get("name"),
                    requiresPlugins=entry.get("requires"),
                ))
            else:
                logger.warning("Ignoring malformed plugin entry in site snapshot: %r", entry)

        return cls(
            units=units,
            theme=str(data.get("theme") or ""),
            versions=data.get("versions") or {},
            options=data.get("options") or {},
        )

    @classmethod
    def fromFile(cls, path: Path | str) -> "StaticSiteHost":
        path = Path(path)
        data = json5.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise TypeError(f"Site snapshot '{path}' must hold a JSON object, not '{type(data).__name__}'")
        return cls.fromSnapshot(data)

    def activeUnits(self) -> list[InstallableUnit]:
        return list(self._units)

    def themeSlug(self) -> str:
        return self._theme

    def platformVersions(self) -> dict[str, str]:
        return dict(self._versions)

    def getOption(self, name: str) -> Any:
        # get_option() answers false for unknown options
        return self._options.get(name, False)



class StaticAuthorizer:
    def __init__(self, allowed: bool = False) -> None:
        self.allowed = allowed

    def isAuthorizedToClear(self) -> bool:
        return self.allowed
