# tools/assemble_paper.py
from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path

from pydantic import ValidationError

from assess_core.config import make_rng
from assess_core.engine import PaperAssembler
from assess_core.question_bank import filter_pool, load_bank, load_bank_file
from assess_core.types import AssemblyConfig


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Assemble a paper from an item bank, with fallbacks.")
    ap.add_argument("config", type=Path, help="JSON file with the assembly config")
    ap.add_argument("--bank", type=Path, default=None, help="raw JSON bank (defaults to the bundled bank)")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--level", default=None, help="only draw items of this CEFR level")
    ap.add_argument("--tag", action="append", default=None, help="only draw items with one of these tags")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    try:
        cfg = AssemblyConfig.model_validate(json.loads(args.config.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        print(f"invalid config {args.config}: {exc}", file=sys.stderr)
        return 1

    bank = load_bank_file(args.bank) if args.bank else load_bank()
    pool = filter_pool(bank, level=args.level or cfg.level, tags=args.tag)
    result = PaperAssembler(make_rng(args.seed)).assemble(pool, cfg)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.success else 2


if __name__ == "__main__":
    raise SystemExit(main())
