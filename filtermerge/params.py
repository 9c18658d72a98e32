from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from filtermerge.utils import ConfigError, get_logger, validate_params

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChildFilterSpec:
    name: str
    limit: int = 0
    weight: float = 1.0


@dataclass(frozen=True)
class MergeConfig:
    filters: Tuple[ChildFilterSpec, ...] = ()
    unique: bool = True


def default_params() -> Dict[str, Any]:
    return {"filters": [], "unique": True}


def _child_spec(raw: Any) -> ChildFilterSpec:
    if isinstance(raw, str):
        raw = {"name": raw}
    limit = raw.get("limit", 0)
    weight = raw.get("weight", 1.0)
    if not weight > 0:
        raise ConfigError(f"Invalid parameter: 'weight' must be greater than 0, but {weight}")
    # fractional limits truncate toward zero; non-positive, NaN and infinite mean unlimited
    limit = int(limit) if math.isfinite(limit) else 0
    return ChildFilterSpec(name=raw["name"], limit=limit, weight=float(weight))


def normalize_params(params: Any) -> MergeConfig:
    """Validate raw merge parameters and return a fully defaulted config.

    Raises ``ConfigError`` when ``filters`` is not a list, a child entry is
    neither a name nor a mapping with a string ``name``, ``limit``/``weight``
    are not numbers, ``weight <= 0``, or a present ``unique`` is not a bool.
    """
    validate_params(params)
    filters = tuple(_child_spec(p) for p in params["filters"])
    unique = params.get("unique", True)
    logger.debug("params normalized filters=%s unique=%s", [f.name for f in filters], unique)
    return MergeConfig(filters=filters, unique=unique)
