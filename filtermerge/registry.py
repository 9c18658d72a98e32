from __future__ import annotations

import asyncio
import typing as t
from dataclasses import dataclass, field

from filtermerge.base import BaseFilter, FilterDirectory, FilterOptions, FilterParams
from filtermerge.directory import load_unit
from filtermerge.params import ChildFilterSpec
from filtermerge.utils import call_maybe_async, get_logger

logger = get_logger(__name__)


@dataclass
class ResolvedFilter:
    spec: ChildFilterSpec
    filter: t.Optional[BaseFilter]
    filter_options: FilterOptions = field(default_factory=dict)
    filter_params: FilterParams = field(default_factory=dict)

    @property
    def available(self) -> bool:
        return self.filter is not None


class FilterRegistry:
    """Lazily loads child filters by name and initializes each one once.

    The cache lives as long as the registry. Loading and initialization of a
    name are serialized through a per-name lock; different names proceed
    concurrently.
    """

    def __init__(self, directory: FilterDirectory):
        self.directory = directory
        self._filters: t.Dict[str, BaseFilter] = {}
        self._locks: t.Dict[str, asyncio.Lock] = {}

    def cached_names(self) -> t.List[str]:
        return list(self._filters)

    def get_cached(self, name: str) -> t.Optional[BaseFilter]:
        return self._filters.get(name)

    def _load(self, name: str, ref: t.Any) -> BaseFilter:
        instance = self._filters.get(name)
        if instance is None:
            instance = load_unit(name, ref)
            self._filters[name] = instance
        return instance

    async def resolve(self, context: t.Any, options: t.Mapping[str, t.Any], spec: ChildFilterSpec) -> ResolvedFilter:
        name = spec.name
        ref, filter_options, filter_params = await call_maybe_async(
            self.directory.lookup, str(options.get("name") or ""), name
        )
        filter_options = dict(filter_options or {})
        filter_params = dict(filter_params or {})

        if not ref:
            logger.error("invalid filter: %s", name)
            return ResolvedFilter(spec, None, filter_options, filter_params)

        lock = self._locks.setdefault(name, asyncio.Lock())
        async with lock:
            instance = self._load(name, ref)
            if not getattr(instance, "is_initialized", False):
                try:
                    await call_maybe_async(
                        instance.on_init,
                        context=context,
                        filter_options=filter_options,
                        filter_params=filter_params,
                    )
                except Exception as e:
                    # left cached and uninitialized, the next call retries
                    logger.error("filter init failed name=%s: %s", name, e)
                    return ResolvedFilter(spec, None, filter_options, filter_params)
                instance.is_initialized = True
                logger.info("filter initialized name=%s", name)

        return ResolvedFilter(spec, instance, filter_options, filter_params)

    async def resolve_all(
        self, context: t.Any, options: t.Mapping[str, t.Any], specs: t.Sequence[ChildFilterSpec]
    ) -> t.List[ResolvedFilter]:
        """Resolve every child concurrently and keep the available ones in configuration order."""
        resolved = await asyncio.gather(*(self.resolve(context, options, s) for s in specs))
        return [r for r in resolved if r.available]
