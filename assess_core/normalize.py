"""Repair loosely-typed item records into canonical ``Item`` objects.

Records arrive from seed files, imports and the item bank with missing or
malformed fields. Each field is defaulted or clamped into a fresh structure so
the caller's record is never shared with the returned item.
"""

from __future__ import annotations

import copy
import logging
import math
import time
import uuid
from collections.abc import Mapping
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from . import config
from .types import BatchConversion, ConversionFailure, Item
from .validators import item_problems, type_problems

log = logging.getLogger(__name__)

_ALIASES = {"options": "options_json", "answer": "answer_json"}


class ItemConversionError(ValueError):
    """A candidate record cannot be turned into a valid Item."""


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_item_id() -> str:
    return f"item_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _field(raw: Mapping, name: str) -> Any:
    value = raw.get(name)
    if value is None and name in _ALIASES:
        value = raw.get(_ALIASES[name])
    return value


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _clamp_score(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or _is_nan(value):
        return config.DEFAULT_DIFFICULTY
    return float(max(0.0, min(1.0, value)))


def _count(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or _is_nan(value):
        return 0
    return value


def _unified_record(raw: Mapping) -> Dict[str, Any]:
    now = _utcnow_iso()
    tags = raw.get("tags")
    answer = _field(raw, "answer")
    rate = raw.get("correct_rate")
    return {
        "id": raw.get("id") or _new_item_id(),
        "owner_id": raw.get("owner_id") or "",
        "type": raw.get("type") or config.DEFAULT_ITEM_TYPE,
        "level": raw.get("level") or config.DEFAULT_LEVEL,
        "stem": raw.get("stem") or "",
        "answer": copy.deepcopy(answer) if answer is not None else "",
        "options": copy.deepcopy(_field(raw, "options")),
        "tags": list(tags) if isinstance(tags, (list, tuple)) else [],
        "difficulty_score": _clamp_score(raw.get("difficulty_score")),
        "usage_count": _count(raw.get("usage_count")),
        "created_at": raw.get("created_at") or now,
        "updated_at": raw.get("updated_at") or now,
        "explanation": raw.get("explanation") or None,
        "source": raw.get("source") or None,
        "correct_rate": rate if isinstance(rate, (int, float)) and not isinstance(rate, bool) else None,
    }


def _heal_mcq(rec: Dict[str, Any]) -> None:
    problems = type_problems(rec)
    if not problems:
        return
    opts = rec.get("options")
    if not isinstance(opts, (list, tuple)) or len(opts) < 2 or not all(isinstance(o, str) for o in opts):
        rec["options"] = list(config.MCQ_PLACEHOLDER_OPTIONS)
    if rec.get("answer") not in config.MCQ_ANSWER_KEYS:
        rec["answer"] = config.MCQ_FALLBACK_ANSWER
    log.warning("mcq %s repaired (%s); needs review", rec.get("id"), "; ".join(problems))


def _convert(raw: Any) -> Item:
    if isinstance(raw, Item):
        raw = asdict(raw)
    if not isinstance(raw, Mapping):
        raise ItemConversionError(f"expected a mapping, got {type(raw).__name__}")
    rec = _unified_record(raw)
    if rec["type"] == "mcq":
        _heal_mcq(rec)
    problems = item_problems(rec)
    if problems:
        raise ItemConversionError("; ".join(problems))
    return Item(**rec)


def convert_to_unified_structure(raw: Any) -> Optional[Item]:
    """Return a canonical Item for ``raw``, or None when it cannot be repaired."""
    try:
        return _convert(raw)
    except ItemConversionError as exc:
        log.debug("rejected candidate: %s", exc)
    except Exception as exc:
        log.warning("error converting candidate: %s", exc, exc_info=True)
    return None


def convert_items_batch(candidates: Iterable[Any]) -> BatchConversion:
    out = BatchConversion()
    for raw in candidates:
        try:
            out.successful.append(_convert(raw))
        except Exception as exc:
            out.failed.append(ConversionFailure(original=raw, error=str(exc) or type(exc).__name__))
    if out.failed:
        log.debug("batch conversion: %d ok, %d failed", len(out.successful), len(out.failed))
    return out
