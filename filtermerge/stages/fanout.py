from __future__ import annotations

import asyncio
import typing as t

from filtermerge.base import Item, extract_items
from filtermerge.registry import ResolvedFilter
from filtermerge.utils import call_maybe_async, get_logger

logger = get_logger(__name__)


async def _run_child(resolved: ResolvedFilter, items: t.List[Item], call_args: t.Dict[str, t.Any]) -> t.List[Item]:
    result = await call_maybe_async(
        resolved.filter.filter,
        **call_args,
        # shallow copy: nested values stay shared between children
        items=[dict(it) for it in items],
        filter_options=resolved.filter_options,
        filter_params=resolved.filter_params,
    )
    sub_items = extract_items(result)
    logger.debug("fanout.child: name=%s in=%d out=%d", resolved.spec.name, len(items), len(sub_items))
    return sub_items


async def run_children(
    resolved: t.Sequence[ResolvedFilter],
    items: t.List[Item],
    **call_args: t.Any,
) -> t.List[t.List[Item]]:
    """Invoke every resolved child concurrently on its own copy of ``items``.

    Results come back in the order of ``resolved``. An exception raised by a
    child propagates to the caller.
    """
    if not resolved:
        return []
    outputs = await asyncio.gather(*(_run_child(r, items, call_args) for r in resolved))
    logger.debug("fanout: children=%d items=%d", len(resolved), len(items))
    return list(outputs)
