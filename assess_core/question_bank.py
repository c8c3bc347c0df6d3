from __future__ import annotations
import json, logging, importlib.resources as ir
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .normalize import convert_items_batch
from .types import Item

log = logging.getLogger(__name__)


def load_raw_bank() -> List[Any]:
    data = ir.files(__package__).joinpath("data/bank.json").read_text(encoding="utf-8")
    return json.loads(data)


def _normalized(raw: Iterable[Any], origin: str) -> List[Item]:
    batch = convert_items_batch(raw)
    if batch.failed:
        log.warning("%s: dropped %d malformed records", origin, len(batch.failed))
        for f in batch.failed:
            log.debug("dropped record: %s", f.error)
    return batch.successful


def load_bank() -> List[Item]:
    return _normalized(load_raw_bank(), "bundled bank")


def load_bank_file(path: Path) -> List[Item]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("items", [])
    return _normalized(raw, str(path))


def filter_pool(
    items: Iterable[Item],
    level: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    owner_id: Optional[str] = None,
) -> List[Item]:
    """Caller-side narrowing before assembly; the assembler itself never filters."""
    wanted = set(tags or ())
    out: List[Item] = []
    for it in items:
        if level and it.level != level:
            continue
        if owner_id is not None and it.owner_id != owner_id:
            continue
        if wanted and not wanted.intersection(it.tags):
            continue
        out.append(it)
    return out
