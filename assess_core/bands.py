from __future__ import annotations
import math
from typing import Dict, Iterable, List, Mapping

from . import config
from .types import DifficultyDistribution, Item


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def difficulty_band(score: float) -> str:
    if score <= config.EASY_MAX:
        return "easy"
    if score <= config.MEDIUM_MAX:
        return "medium"
    return "hard"


def group_by_type(items: Iterable[Item]) -> Dict[str, List[Item]]:
    out: Dict[str, List[Item]] = {}
    for it in items:
        out.setdefault(it.type, []).append(it)
    return out


def group_by_difficulty(items: Iterable[Item]) -> Dict[str, List[Item]]:
    out: Dict[str, List[Item]] = {"easy": [], "medium": [], "hard": []}
    for it in items:
        out[difficulty_band(it.difficulty_score)].append(it)
    return out


def band_quotas(n: int, dist: DifficultyDistribution) -> Dict[str, int]:
    """Split ``n`` into easy/medium/hard; hard absorbs the rounding remainder.

    Parts are never negative and always sum to ``n``, even when the fractions
    do not add up to one.
    """
    n = max(0, int(n))
    easy = min(n, max(0, round_half_up(n * dist.easy)))
    medium = min(n - easy, max(0, round_half_up(n * dist.medium)))
    return {"easy": easy, "medium": medium, "hard": n - easy - medium}


def rescale_distribution(
    distribution: Mapping[str, int], total: int, base: int | None = None
) -> Dict[str, int]:
    """Scale type counts by total/base (base defaults to their sum).

    Each count is floored, then the largest bucket is topped up so the counts
    add up to ``total``.
    """
    if base is None:
        base = sum(distribution.values())
    if base <= 0:
        return dict(distribution)
    out = {k: (v * total) // base for k, v in distribution.items()}
    short = total - sum(out.values())
    if short > 0 and out:
        largest = max(out, key=lambda k: out[k])
        out[largest] += short
    return out
