from __future__ import annotations

import logging
from typing import Any, Dict, List

from .config import DEBUG_SEED, make_rng
from .audit_bank import validate_item_distribution
from .engine import PaperAssembler
from .question_bank import filter_pool, load_bank

SMOKE_CONFIGS: List[Dict[str, Any]] = [
    {
        "total_items": 6,
        "item_distribution": {"mcq": 4, "cloze": 2},
        "difficulty_distribution": {"easy": 0.3, "medium": 0.4, "hard": 0.3},
        "level": "A2",
    },
    {
        "total_items": 10,
        "item_distribution": {"mcq": 4, "cloze": 2, "matching": 2, "writing_task": 2},
        "difficulty_distribution": {"easy": 0.6, "medium": 0.2, "hard": 0.2},
        "level": "A2",
    },
    {
        "total_items": 40,
        "item_distribution": {"reading_q": 20, "writing_task": 20},
        "difficulty_distribution": {"easy": 0.0, "medium": 0.0, "hard": 1.0},
        "level": "A2",
    },
]


def run_smoke() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    seed = DEBUG_SEED if DEBUG_SEED is not None else 7
    assembler = PaperAssembler(make_rng(seed))
    bank = load_bank()
    logging.info("Loaded %d items; seed=%s", len(bank), seed)

    for cfg in SMOKE_CONFIGS:
        pool = filter_pool(bank, level=cfg.get("level"))
        report = validate_item_distribution(pool, cfg)
        for issue in report.issues:
            logging.info("pre-flight: %s", issue)
        result = assembler.assemble(pool, cfg)
        logging.info(
            "requested=%d selected=%d success=%s fallbacks=%s",
            cfg["total_items"],
            len(result.selected_items),
            result.success,
            ",".join(result.fallbacks_applied) or "-",
        )
        for msg in result.warnings:
            logging.info("  %s", msg)


if __name__ == "__main__":
    run_smoke()
