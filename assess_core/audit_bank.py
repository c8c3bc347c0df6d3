from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, Sequence

from . import config
from .bands import band_quotas, difficulty_band, group_by_difficulty, group_by_type
from .engine import ConfigLike, _as_config, reconcile_config
from .question_bank import load_bank, load_bank_file
from .types import CEFR_LEVELS, DIFFICULTY_BANDS, ITEM_TYPES, DistributionReport, Item, Shortfall
from .validators import type_problems


def validate_item_distribution(pool: Sequence[Item], cfg: ConfigLike) -> DistributionReport:
    """Pre-flight check: can the pool fill ``cfg`` without any fallback?

    Uses the same band thresholds, quotas and distribution reconciliation as the
    assembler, so a valid report guarantees the first attempt fills the paper.
    """
    cfg = _as_config(cfg)
    issues: list[str] = []
    suggestions: list[Shortfall] = []

    if cfg.total_items <= 0:
        issues.append("Paper must request at least one item")
        return DistributionReport(is_valid=False, issues=issues, suggestions=suggestions)
    if cfg.requested != cfg.total_items:
        issues.append(
            f"Item distribution sums to {cfg.requested} but total_items is {cfg.total_items}"
        )

    by_type = group_by_type(pool)
    for item_type, required in cfg.item_distribution.items():
        available = len(by_type.get(item_type, []))
        if available < required:
            issues.append(f"Insufficient {item_type} items: need {required}, have {available}")
            suggestions.append(Shortfall(type=item_type, available=available, required=required))

    bands = group_by_difficulty(pool)
    for band, required in band_quotas(cfg.total_items, cfg.difficulty_distribution).items():
        available = len(bands[band])
        if available < required:
            issues.append(f"Insufficient {band} items: need {required}, have {available}")

    reconciled = reconcile_config(cfg)
    for item_type, count in reconciled.item_distribution.items():
        if count <= 0:
            continue
        cells = group_by_difficulty(by_type.get(item_type, []))
        for band, required in band_quotas(count, reconciled.difficulty_distribution).items():
            available = len(cells[band])
            if available < required:
                issues.append(
                    f"Insufficient {band} {item_type} items: need {required}, have {available}"
                )
                suggestions.append(
                    Shortfall(type=item_type, available=available, required=required, band=band)
                )

    return DistributionReport(is_valid=not issues, issues=issues, suggestions=suggestions)


def _blank_level() -> dict[str, dict[str, int]]:
    return {t: {b: 0 for b in DIFFICULTY_BANDS} for t in ITEM_TYPES}


def audit_items(items: Iterable[Item]) -> dict[str, object]:
    coverage: dict[str, dict[str, dict[str, int]]] = {lvl: _blank_level() for lvl in CEFR_LEVELS}
    totals = {t: 0 for t in ITEM_TYPES}
    totals["malformed"] = 0
    warnings: list[str] = []

    for item in items:
        level_data = coverage.setdefault(item.level, _blank_level())
        cell = level_data.setdefault(item.type, {b: 0 for b in DIFFICULTY_BANDS})
        cell[difficulty_band(item.difficulty_score)] += 1
        totals[item.type] = totals.get(item.type, 0) + 1
        if config.BANK_AUDIT_TYPE_CHECKS:
            problems = type_problems(item)
            if problems:
                totals["malformed"] += 1
                warnings.append(f"{item.id} ({item.type}): {'; '.join(problems)}")

    for level, data in coverage.items():
        if not any(sum(cell.values()) for cell in data.values()):
            continue
        for item_type, cell in data.items():
            for band in DIFFICULTY_BANDS:
                if cell[band] < config.BANK_MIN_PER_CELL:
                    warnings.append(
                        f"{level} {item_type} {band} has {cell[band]} (<{config.BANK_MIN_PER_CELL})"
                    )

    return {"coverage": coverage, "warnings": warnings, "totals": totals}


def _format_row(label: str, data: dict[str, int]) -> str:
    parts = [f"{label:<16}"]
    for band in DIFFICULTY_BANDS:
        parts.append(f"{band}:{data.get(band, 0):3d}")
    return "  ".join(parts)


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, dict[str, int]]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Bank Coverage ===")
    for level in sorted(coverage):
        data = coverage[level]
        if not any(sum(cell.values()) for cell in data.values()):
            continue
        print(f"\nLevel: {level}")
        for item_type in sorted(data):
            print("  " + _format_row(item_type, data[item_type]))

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    totals = summary["totals"]
    print("\nTotals:", totals)


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/bank_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    print(text)
    return text


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Audit item bank coverage per level, type and difficulty band.")
    ap.add_argument("--bank", type=Path, default=None, help="raw JSON bank (defaults to the bundled bank)")
    ap.add_argument("--out", type=Path, default=Path("/tmp/bank_audit.json"))
    args = ap.parse_args(argv if argv is not None else [])
    items = load_bank_file(args.bank) if args.bank else load_bank()
    summary = audit_items(items)
    print_report(summary)
    write_summary(summary, args.out)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
