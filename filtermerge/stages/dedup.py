from __future__ import annotations

from typing import Iterable, List

from filtermerge.base import Item
from filtermerge.utils import get_logger

logger = get_logger(__name__)

SIGNATURE_FIELDS = ("kind", "level", "word", "display")
SIGNATURE_SEP = "\0"


def _field_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def item_signature(item: Item) -> str:
    return SIGNATURE_SEP.join(_field_text(item.get(k)) for k in SIGNATURE_FIELDS)


def dedup_identity(items: Iterable[Item], *, unique: bool = True) -> List[Item]:
    """Keep the first item of every identity signature, preserving order."""
    items = list(items)
    if not unique:
        return items

    seen = set()
    out: List[Item] = []
    for it in items:
        sig = item_signature(it)
        if sig in seen:
            continue
        seen.add(sig)
        out.append(it)

    logger.debug("dedup.identity: kept=%d from=%d", len(out), len(items))
    return out
