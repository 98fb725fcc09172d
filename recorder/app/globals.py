# recorder/app/globals.py
from __future__ import annotations
from typing import Any, cast, TYPE_CHECKING

from recorder.app.context import PROCESS_REGISTRY
from recorder.core.dictpath import getByPath
from recorder.core.errors import RecorderError

if TYPE_CHECKING:
    from recorder.config.service import ConfigService



def initConfig(service: ConfigService | None = None) -> ConfigService:
    """
    Registers the process-wide ConfigService. Bootstraps one from the shipped
    defaults when none is given. Safe to call more than once.
    """
    if service is None:
        existing = PROCESS_REGISTRY.get("config.service")
        if existing is not None:
            return cast("ConfigService", existing)
        from recorder.config.service import ConfigService
        service = ConfigService.bootstrap()
    PROCESS_REGISTRY.register("config.service", service, overwrite=True)
    return service



def getConfigService() -> ConfigService:
    cfg = PROCESS_REGISTRY.get("config.service")
    if cfg is None:
        raise RecorderError(
            "ConfigService is not registered. "
            "Call recorder.app.globals.initConfig() before reading configuration."
        )
    return cast("ConfigService", cfg)



def config(path: str, default: Any = None) -> Any:
    """
    Read a dotted path from the merged global configuration.
    Returns `default` when the path is not found.

    Before initConfig() runs, the shipped defaults are used.

    Example:
      value = config("resolver.cacheTtlSeconds")   # returns 86400
      value = config("non.existing.path", 300)     # returns 300
    """
    store = initConfig().globalStore
    val = getByPath(store.snapshot()["values"], path)
    return default if val is None else val



def configBool(path: str, default: bool = False) -> bool:
    """
    Read a boolean from the merged global configuration.
    """
    val = config(path, None)
    if isinstance(val, bool):
        return val
    if val is None:
        return default
    return bool(val)
