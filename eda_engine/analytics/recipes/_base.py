from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import duckdb

from eda_engine.config import Settings
from eda_engine.errors import InvalidParameterError


@dataclass(frozen=True)
class RecipeMeta:
    slug: str
    title: str
    section: str
    order: int
    description: str
    params: Dict[str, str] = field(default_factory=dict)


@dataclass
class RecipeContext:
    con: duckdb.DuckDBPyConnection
    settings: Settings


# Parameters arrive as strings from the CLI and as native values from code.

def param_str(params: Dict[str, Any], key: str, default: Optional[str] = None) -> str:
    value = params.get(key, default)
    if value is None or str(value).strip() == "":
        raise InvalidParameterError(f"Missing required parameter '{key}'")
    return str(value).strip()


def param_float(params: Dict[str, Any], key: str, default: Optional[float] = None) -> Optional[float]:
    value = params.get(key, default)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Parameter '{key}' must be a number (got {value!r})")


def param_int(params: Dict[str, Any], key: str, default: int) -> int:
    value = param_float(params, key, default)
    return int(value)


def param_list(params: Dict[str, Any], key: str) -> List[str]:
    value = params.get(key)
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [v.strip() for v in str(value).split(",") if v.strip()]


def param_bool(params: Dict[str, Any], key: str, default: bool) -> bool:
    value = params.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")
