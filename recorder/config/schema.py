# recorder/config/schema.py
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, cast

import fastjsonschema
import json5

from recorder.core.errors import ConfigValidationError

logger = logging.getLogger(__name__)

__all__ = ["SCHEMA_FILE", "ValidatorFn", "getConfigValidator", "validateConfig"]

SCHEMA_FILE = Path(__file__).with_name("config.schema.json5")

ValidatorFn = Callable[[Any], Any]



@lru_cache(maxsize=1)
def getConfigValidator() -> ValidatorFn:
    """Compiles the config schema once per process."""
    schema = json5.loads(SCHEMA_FILE.read_text(encoding="utf-8"))
    # fastjsonschema.compile returns an untyped callable → cast it
    return cast(ValidatorFn, fastjsonschema.compile(schema))



def validateConfig(document: Any) -> None:
    try:
        getConfigValidator()(document)
    except fastjsonschema.JsonSchemaValueException as err:
        raise ConfigValidationError(f"config validation failed: {err.message}") from err
