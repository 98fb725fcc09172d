# recorder/core/jsonutils.py
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = ["safeJsonDumps", "tryJSONify", "deepMerge"]



def safeJsonDumps(obj: Any, *, pretty: bool = False) -> str:
    """
    Serializes `obj` to JSON. Compact separators by default, UTF-8 kept as-is,
    slashes are not escaped (URLs inside blueprints stay readable).
    If direct encoding fails, falls back to tryJSONify and retries.
    """
    kwargs: dict[str, Any] = {"ensure_ascii": False, "allow_nan": False}
    if pretty:
        kwargs["indent"] = 4
    else:
        kwargs["separators"] = (",", ":")

    try:
        return json.dumps(obj, **kwargs)
    except (TypeError, ValueError):
        return json.dumps(tryJSONify(obj), **kwargs)



def tryJSONify(value: Any, *, _maxDepth: int = 64, _depth: int = 0) -> Any:
    """
    Best-effort conversion of arbitrary values into JSON-compatible data.
    Pydantic models dump by alias; dataclasses become dicts; sets become
    sorted lists when possible; unknown objects fall back to repr().
    """
    if _depth > _maxDepth:
        return "[MAX_DEPTH]"

    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return value
    if isinstance(value, Enum):
        return tryJSONify(value.value, _maxDepth=_maxDepth, _depth=_depth + 1)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if hasattr(value, "model_dump"):
        try:
            return value.model_dump(mode="json", by_alias=True)
        except Exception:
            return repr(value)
    if is_dataclass(value) and not isinstance(value, type):
        return tryJSONify(asdict(value), _maxDepth=_maxDepth, _depth=_depth + 1)
    if isinstance(value, Mapping):
        return {
            str(key): tryJSONify(item, _maxDepth=_maxDepth, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (set, frozenset)):
        items = [tryJSONify(item, _maxDepth=_maxDepth, _depth=_depth + 1) for item in value]
        try:
            return sorted(items)
        except TypeError:
            return items
    if isinstance(value, (list, tuple)):
        return [tryJSONify(item, _maxDepth=_maxDepth, _depth=_depth + 1) for item in value]
    return repr(value)



def deepMerge(left: Mapping[str, Any], right: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursively merges `right` over `left`. Dicts merge, everything else
    (lists included) is replaced. Neither input is mutated.
    """
    out: dict[str, Any] = dict(left)
    for key, rightValue in right.items():
        leftValue = out.get(key)
        if isinstance(leftValue, Mapping) and isinstance(rightValue, Mapping):
            out[key] = deepMerge(leftValue, rightValue)
        elif isinstance(rightValue, list):
            out[key] = list(rightValue)
        else:
            out[key] = rightValue
    return out
