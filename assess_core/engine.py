# assess_core/engine.py
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from . import config
from .bands import (
    band_quotas,
    group_by_difficulty,
    group_by_type,
    rescale_distribution,
    round_half_up,
)
from .types import AssemblyConfig, DifficultyDistribution, FallbackResult, Item

log = logging.getLogger(__name__)

DIFFICULTY_RELAXED = "difficulty_distribution_relaxed"
TYPES_SUBSTITUTED = "item_types_substituted"
TOTAL_REDUCED = "total_items_reduced"
EMERGENCY = "emergency_fallback"

# first substitute with spare inventory wins; order matters
SUBSTITUTIONS: Dict[str, Tuple[str, ...]] = {
    "mcq": ("cloze", "matching"),
    "cloze": ("mcq", "error_correction"),
    "error_correction": ("cloze", "mcq"),
    "matching": ("mcq", "cloze"),
    "reading_q": ("writing_task",),
    "writing_task": ("reading_q",),
}

ConfigLike = Union[AssemblyConfig, Mapping[str, Any]]


def _as_config(cfg: ConfigLike) -> AssemblyConfig:
    if isinstance(cfg, AssemblyConfig):
        return cfg
    return AssemblyConfig.model_validate(cfg)


def reconcile_config(cfg: AssemblyConfig) -> AssemblyConfig:
    """Bring the type counts in line with total_items when they disagree."""
    requested = cfg.requested
    if requested <= 0 or requested == cfg.total_items:
        return cfg
    return cfg.model_copy(
        update={"item_distribution": rescale_distribution(cfg.item_distribution, cfg.total_items)}
    )


def _filled(selected: Sequence[Item], cfg: AssemblyConfig) -> bool:
    return cfg.total_items > 0 and len(selected) >= cfg.total_items


class PaperAssembler:
    """Picks a paper from a pool, relaxing the request step by step when the pool falls short."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else config.make_rng()

    # ---- selection primitive ----
    def _sample(self, items: List[Item], count: int) -> List[Item]:
        if count <= 0 or not items:
            return []
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        return shuffled[:count]

    def attempt(self, pool: Sequence[Item], cfg: AssemblyConfig) -> List[Item]:
        selected: List[Item] = []
        by_type = group_by_type(pool)
        for item_type, count in cfg.item_distribution.items():
            if count <= 0:
                continue
            bands = group_by_difficulty(by_type.get(item_type, []))
            quotas = band_quotas(count, cfg.difficulty_distribution)
            for band, quota in quotas.items():
                selected.extend(self._sample(bands[band], quota))
        log.debug("attempt: requested %d, selected %d", cfg.total_items, len(selected))
        return selected

    # ---- strategies ----
    def relax_difficulty(self, pool: Sequence[Item], cfg: AssemblyConfig) -> Optional[AssemblyConfig]:
        total = len(pool)
        if total == 0 or total < cfg.total_items:
            return None
        bands = group_by_difficulty(pool)
        quotas = band_quotas(cfg.total_items, cfg.difficulty_distribution)
        if all(len(bands[b]) >= quotas[b] for b in quotas):
            return None
        observed = DifficultyDistribution(
            **{b: round_half_up(len(bands[b]) / total * 100) / 100 for b in bands}
        )
        if observed == cfg.difficulty_distribution:
            return None
        return cfg.model_copy(update={"difficulty_distribution": observed})

    def substitute_types(self, pool: Sequence[Item], cfg: AssemblyConfig) -> Optional[AssemblyConfig]:
        available = {t: len(v) for t, v in group_by_type(pool).items()}
        distribution = dict(cfg.item_distribution)
        adjusted = False
        for item_type, required in cfg.item_distribution.items():
            if required <= 0:
                continue
            have = available.get(item_type, 0)
            if have >= required:
                continue
            deficit = required - have
            for sub in SUBSTITUTIONS.get(item_type, ()):
                current = distribution.get(sub, 0)
                moved = min(deficit, available.get(sub, 0) - current)
                if moved > 0:
                    distribution[item_type] = have
                    distribution[sub] = current + moved
                    log.debug("substitute %d %s -> %s", moved, item_type, sub)
                    adjusted = True
                    break
        if not adjusted:
            return None
        return cfg.model_copy(update={"item_distribution": distribution})

    def reduce_total(self, pool: Sequence[Item], cfg: AssemblyConfig) -> Optional[AssemblyConfig]:
        max_possible = min(len(pool), cfg.total_items)
        if max_possible >= cfg.total_items:
            return None
        distribution = rescale_distribution(cfg.item_distribution, max_possible, base=cfg.total_items)
        return cfg.model_copy(update={"total_items": max_possible, "item_distribution": distribution})

    def emergency(
        self, pool: Sequence[Item], cfg: AssemblyConfig, limit: int
    ) -> Tuple[AssemblyConfig, List[Item]]:
        if not pool or limit <= 0:
            empty = cfg.model_copy(
                update={
                    "total_items": 0,
                    "item_distribution": {},
                    "difficulty_distribution": DifficultyDistribution(easy=0, medium=0, hard=0),
                }
            )
            return empty, []
        taken = list(pool[: max(1, min(limit, config.EMERGENCY_MAX_ITEMS))])
        distribution: Dict[str, int] = {}
        for it in taken:
            distribution[it.type] = distribution.get(it.type, 0) + 1
        rebuilt = cfg.model_copy(
            update={
                "total_items": len(taken),
                "item_distribution": distribution,
                "difficulty_distribution": DifficultyDistribution(**config.EMERGENCY_SPLIT),
            }
        )
        return rebuilt, taken

    # ---- orchestration ----
    def assemble(self, pool: Sequence[Item], cfg: ConfigLike) -> FallbackResult:
        original = _as_config(cfg)
        pool = list(pool)
        if original.total_items <= 0:
            log.info("nothing to assemble: total_items=%d", original.total_items)
            return self._emergency_result(pool, original, original, [], [])

        split = sum(original.difficulty_distribution.as_dict().values())
        if abs(split - 1.0) > config.DIFFICULTY_SUM_TOLERANCE:
            log.warning("difficulty_distribution sums to %.2f; hard takes the remainder", split)

        current = reconcile_config(original)
        if current != original:
            log.warning(
                "item_distribution sums to %d, rescaled to total_items=%d",
                original.requested,
                original.total_items,
            )
        fallbacks: List[str] = []
        warnings: List[str] = []

        def _done(selected: List[Item]) -> FallbackResult:
            return FallbackResult(
                success=True,
                selected_items=selected[: current.total_items],
                fallbacks_applied=fallbacks,
                warnings=warnings,
                adjusted_config=current if current != original else None,
            )

        selected = self.attempt(pool, current)
        if _filled(selected, current):
            return _done(selected)

        strategies = (
            (DIFFICULTY_RELAXED, self.relax_difficulty,
             lambda c: "Difficulty distribution was adjusted due to insufficient items"),
            (TYPES_SUBSTITUTED, self.substitute_types,
             lambda c: "Some item types were substituted with similar types"),
            (TOTAL_REDUCED, self.reduce_total,
             lambda c: f"Total items reduced from {original.total_items} to {c.total_items}"),
        )
        for name, strategy, message in strategies:
            changed = strategy(pool, current)
            if changed is None:
                continue
            current = changed
            fallbacks.append(name)
            warnings.append(message(current))
            log.info("fallback %s applied", name)
            selected = self.attempt(pool, current)
            if _filled(selected, current):
                return _done(selected)

        return self._emergency_result(pool, current, original, fallbacks, warnings)

    def _emergency_result(
        self,
        pool: List[Item],
        current: AssemblyConfig,
        original: AssemblyConfig,
        fallbacks: List[str],
        warnings: List[str],
    ) -> FallbackResult:
        current, selected = self.emergency(pool, current, original.total_items)
        fallbacks.append(EMERGENCY)
        warnings.append("Used emergency fallback - paper may not meet original specifications")
        log.warning("emergency fallback: %d of %d items", len(selected), original.total_items)
        return FallbackResult(
            success=len(selected) > 0,
            selected_items=selected,
            fallbacks_applied=fallbacks,
            warnings=warnings,
            adjusted_config=current,
        )


def assemble_with_fallback(
    pool: Sequence[Item], cfg: ConfigLike, rng: Optional[random.Random] = None
) -> FallbackResult:
    return PaperAssembler(rng).assemble(pool, cfg)
