from __future__ import annotations

import hashlib
import importlib
import importlib.util
import os
import sys
import typing as t

from filtermerge.base import BaseFilter, FilterOptions, FilterParams, LookupResult
from filtermerge.utils import get_logger

logger = get_logger(__name__)

DEFAULT_ATTR = "Filter"


class StaticFilterDirectory:
    """In-process filter directory backed by plain mappings.

    ``entries`` maps a filter name to ``{"ref": ..., "options": {...}, "params": {...}}``.
    ``contexts`` optionally overrides entries per host context name; names
    missing from a context fall back to ``entries``.
    """

    def __init__(
        self,
        entries: t.Optional[t.Mapping[str, t.Mapping[str, t.Any]]] = None,
        contexts: t.Optional[t.Mapping[str, t.Mapping[str, t.Mapping[str, t.Any]]]] = None,
    ):
        self.entries: t.Dict[str, t.Mapping[str, t.Any]] = dict(entries or {})
        self.contexts: t.Dict[str, t.Dict[str, t.Mapping[str, t.Any]]] = {
            k: dict(v) for k, v in (contexts or {}).items()
        }

    def register(self, name: str, ref: t.Any, *, options: FilterOptions = None, params: FilterParams = None, context_name: str = None) -> None:
        entry = {"ref": ref, "options": dict(options or {}), "params": dict(params or {})}
        if context_name is None:
            self.entries[name] = entry
        else:
            self.contexts.setdefault(context_name, {})[name] = entry

    async def lookup(self, context_name: str, filter_name: str) -> LookupResult:
        entry = self.contexts.get(context_name, {}).get(filter_name) or self.entries.get(filter_name)
        if not entry:
            return None, {}, {}
        # callers get private copies of options and params
        return entry.get("ref"), dict(entry.get("options") or {}), dict(entry.get("params") or {})


def _import_target(ref: str) -> t.Any:
    if ref.endswith(".py") or os.sep in ref:
        path = os.path.abspath(ref)
        stem = os.path.splitext(os.path.basename(path))[0]
        # module name is unique per file path
        mod_name = f"filtermerge_unit_{stem}_{hashlib.md5(path.encode('utf-8')).hexdigest()[:8]}"
        spec = importlib.util.spec_from_file_location(mod_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load filter module from {path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[mod_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(mod_name, None)
            raise
        return getattr(module, DEFAULT_ATTR)

    module_name, _, attr = ref.partition(":")
    module = importlib.import_module(module_name)
    target: t.Any = module
    for part in (attr or DEFAULT_ATTR).split("."):
        target = getattr(target, part)
    return target


def load_unit(name: str, ref: t.Any) -> BaseFilter:
    """Instantiate the filter unit that ``ref`` points at and tag it with ``name``.

    ``ref`` is a filter class (or any zero-argument factory), an existing
    instance, a ``"package.module[:Attr]"`` string, or a path to a ``.py``
    file exporting ``Filter``.
    """
    target = _import_target(ref) if isinstance(ref, str) else ref
    instance = target() if callable(target) and not isinstance(target, BaseFilter) else target
    instance.name = name
    logger.debug("filter loaded name=%s unit=%s", name, type(instance).__name__)
    return instance
