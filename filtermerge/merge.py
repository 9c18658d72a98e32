from __future__ import annotations

import time
import typing as t

import yaml

from filtermerge.base import BaseFilter, FilterDirectory, FilterOptions, FilterParams, Item
from filtermerge.directory import StaticFilterDirectory
from filtermerge.params import default_params, normalize_params
from filtermerge.registry import FilterRegistry
from filtermerge.stages.dedup import dedup_identity
from filtermerge.stages.fanout import run_children
from filtermerge.stages.scoring import merge_ranked
from filtermerge.utils import get_logger, validate_params

logger = get_logger(__name__)


class MergeFilter(BaseFilter):
    """Runs several child filters on the same items and merges their rankings.

    Child filters are resolved through ``directory`` and cached for the
    lifetime of this instance.
    """

    def __init__(self, directory: FilterDirectory):
        self.registry = FilterRegistry(directory)

    def params(self) -> FilterParams:
        return default_params()

    async def filter(
        self,
        *,
        context: t.Any = None,
        items: t.List[Item],
        options: t.Optional[t.Mapping[str, t.Any]] = None,
        source_options: t.Optional[t.Mapping[str, t.Any]] = None,
        filter_options: t.Optional[FilterOptions] = None,
        filter_params: t.Any = None,
        **kwargs: t.Any,
    ) -> t.List[Item]:
        options = options or {}
        source_options = source_options or {}
        cfg = normalize_params(self.params() if filter_params is None else filter_params)

        t0 = time.monotonic()
        resolved = await self.registry.resolve_all(context, options, cfg.filters)
        if not resolved:
            logger.debug("merge: no child filter available, items passed through")
            return items

        outputs = await run_children(
            resolved,
            items,
            **kwargs,
            context=context,
            options=options,
            source_options=source_options,
        )
        merged = merge_ranked(outputs, [r.spec for r in resolved])
        result = dedup_identity(merged, unique=cfg.unique)
        logger.info(
            "merge: children=%d in=%d out=%d took_ms=%d",
            len(resolved),
            len(items),
            len(result),
            int((time.monotonic() - t0) * 1000),
        )
        return result


def load_config(config_path: str) -> t.Dict[str, t.Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    validate_params(cfg, "config.schema.json")
    return cfg


def build_directory(cfg: t.Mapping[str, t.Any]) -> StaticFilterDirectory:
    return StaticFilterDirectory(cfg.get("filters") or {}, cfg.get("contexts") or {})


async def run_once(
    config_path: str,
    items: t.List[Item],
    *,
    unique: t.Optional[bool] = None,
    context: t.Any = None,
    **kwargs: t.Any,
) -> t.List[Item]:
    """Merge ``items`` once with the directory and params from a YAML config file."""
    cfg = load_config(config_path)
    params = dict(cfg.get("params") or {})
    if unique is not None:
        params["unique"] = unique
    name = cfg.get("name", "default")
    logger.info("config loaded name=%s path=%s", name, config_path)

    merge = MergeFilter(build_directory(cfg))
    return await merge.filter(
        context=context,
        items=items,
        options={"name": name},
        source_options=cfg.get("source_options") or {},
        filter_options=cfg.get("options") or {},
        filter_params=params,
        **kwargs,
    )
