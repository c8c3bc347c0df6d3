from __future__ import annotations
import argparse, json, logging, sys
from collections import Counter
from pathlib import Path

from assess_core.normalize import convert_items_batch
from assess_core.question_bank import load_raw_bank
from assess_core.validators import type_problems


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Normalize a raw item bank and list records that cannot be used.")
    ap.add_argument("bank", type=Path, nargs="?", default=None, help="raw JSON bank (defaults to the bundled bank)")
    ap.add_argument("--out", type=Path, default=None, help="write the normalized items here as JSON")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(message)s", stream=sys.stderr)

    if args.bank:
        raw = json.loads(args.bank.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("items", [])
    else:
        raw = load_raw_bank()
    if not isinstance(raw, list):
        print("bank must be a JSON list of records (or {\"items\": [...]})", file=sys.stderr)
        return 1

    batch = convert_items_batch(raw)
    by_type = Counter(it.type for it in batch.successful)
    print(f"{len(raw)} records: {len(batch.successful)} usable, {len(batch.failed)} rejected")
    for item_type, n in sorted(by_type.items()):
        print(f"  {item_type:<16} {n:3d}")

    for f in batch.failed:
        ident = f.original.get("id", "?") if isinstance(f.original, dict) else repr(f.original)[:40]
        print(f"  ✗ {ident}: {f.error}")

    # usable but not well-formed for their type (mcq records are repaired on the way in)
    shaky = 0
    for it in batch.successful:
        problems = type_problems(it)
        if problems:
            shaky += 1
            print(f"  ! {it.id} ({it.type}): {'; '.join(problems)}")

    if args.out:
        args.out.write_text(
            json.dumps([it.to_record() for it in batch.successful], indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

    if batch.failed or shaky:
        return 2
    print("  ✓ All records usable")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
