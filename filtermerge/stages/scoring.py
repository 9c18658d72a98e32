from __future__ import annotations

import typing as t
from dataclasses import dataclass

import numpy as np

from filtermerge.base import Item
from filtermerge.params import ChildFilterSpec
from filtermerge.utils import get_logger

logger = get_logger(__name__)


@dataclass
class ScoredItem:
    # lower scores sort earlier
    score: float
    item: Item


def score_items(items: t.Sequence[Item], spec: ChildFilterSpec) -> t.List[ScoredItem]:
    if spec.limit > 0:
        items = items[: spec.limit]
    inv_weight = 1.0 / spec.weight
    return [ScoredItem(score=index * inv_weight, item=item) for index, item in enumerate(items)]


def merge_scored(groups: t.Iterable[t.Sequence[ScoredItem]]) -> t.List[ScoredItem]:
    """Concatenate scored groups and sort them by ascending score.

    The sort is stable, so ties keep concatenation order and earlier groups
    win.
    """
    merged = [s for group in groups for s in group]
    if not merged:
        return []
    scores = np.fromiter((s.score for s in merged), dtype=float, count=len(merged))
    order = np.argsort(scores, kind="stable")
    return [merged[i] for i in order.tolist()]


def merge_ranked(outputs: t.Sequence[t.Sequence[Item]], specs: t.Sequence[ChildFilterSpec]) -> t.List[Item]:
    if len(outputs) != len(specs):
        raise ValueError("outputs/specs length mismatch for rank merge")
    ranked = merge_scored(score_items(items, spec) for items, spec in zip(outputs, specs))
    logger.debug("scoring.merge: groups=%d items=%d", len(specs), len(ranked))
    return [s.item for s in ranked]
