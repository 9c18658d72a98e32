"""Collaborator interfaces: the filter unit and the filter directory.

A filter unit reorders or drops items. Units are looked up by name through a
``FilterDirectory`` and loaded lazily by the registry. Both ``on_init`` and
``filter`` may be coroutine functions or plain functions.
"""

from __future__ import annotations

import typing as t

Item = t.Dict[str, t.Any]
FilterOptions = t.Dict[str, t.Any]
FilterParams = t.Dict[str, t.Any]
# ``filter`` returns either the ordered items or a mapping carrying them under "items"
FilterItems = t.Union[t.List[Item], t.Mapping[str, t.Any]]
LookupResult = t.Tuple[t.Any, FilterOptions, FilterParams]


class BaseFilter:
    name: str = ""
    is_initialized: bool = False

    def params(self) -> FilterParams:
        return {}

    async def on_init(self, *, context: t.Any, filter_options: FilterOptions, filter_params: FilterParams) -> None:
        return None

    async def filter(
        self,
        *,
        context: t.Any,
        items: t.List[Item],
        options: t.Mapping[str, t.Any],
        source_options: t.Mapping[str, t.Any],
        filter_options: FilterOptions,
        filter_params: FilterParams,
        **kwargs: t.Any,
    ) -> FilterItems:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} initialized={self.is_initialized}>"


@t.runtime_checkable
class FilterDirectory(t.Protocol):
    """Maps a filter name to ``(unit_ref, filter_options, filter_params)``.

    ``unit_ref`` is ``None`` (or empty) when the name is unknown.
    """

    def lookup(self, context_name: str, filter_name: str) -> LookupResult | t.Awaitable[LookupResult]:
        ...


def extract_items(result: FilterItems) -> t.List[Item]:
    """Drop the optional side-channel fields of a filter result."""
    if isinstance(result, list):
        return result
    if isinstance(result, t.Mapping):
        return list(result.get("items") or [])
    items = getattr(result, "items", None)
    if isinstance(items, list):
        return items
    return list(result)
