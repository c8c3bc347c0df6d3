from __future__ import annotations
import math
from collections.abc import Mapping
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from . import config
from .types import CEFR_LEVELS, ITEM_TYPES, Item


def _record(obj: Any) -> Optional[Dict[str, Any]]:
    if isinstance(obj, Item):
        return asdict(obj)
    if isinstance(obj, Mapping):
        return dict(obj)
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and not math.isnan(value)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def item_problems(obj: Any) -> List[str]:
    """Generic predicate as a list of violations; empty means the record is an Item."""
    rec = _record(obj)
    if rec is None:
        return ["not a mapping"]
    problems: List[str] = []
    iid = rec.get("id")
    if not isinstance(iid, str) or not iid:
        problems.append("id must be a non-empty string")
    if not isinstance(rec.get("owner_id"), str):
        problems.append("owner_id must be a string")
    if rec.get("type") not in ITEM_TYPES:
        problems.append(f"type {rec.get('type')!r} is not one of {', '.join(ITEM_TYPES)}")
    if rec.get("level") not in CEFR_LEVELS:
        problems.append(f"level {rec.get('level')!r} is not a CEFR level")
    stem = rec.get("stem")
    if not isinstance(stem, str) or not stem.strip():
        problems.append("stem must be a non-empty string")
    if rec.get("answer") is None:
        problems.append("answer is missing")
    if not _is_sequence(rec.get("tags")):
        problems.append("tags must be a list")
    score = rec.get("difficulty_score")
    if not _is_number(score) or not 0.0 <= score <= 1.0:
        problems.append("difficulty_score must be a number in [0, 1]")
    if not _is_number(rec.get("usage_count")):
        problems.append("usage_count must be a number")
    for stamp in ("created_at", "updated_at"):
        if not isinstance(rec.get(stamp), str):
            problems.append(f"{stamp} must be a string")
    return problems


def is_valid_item(obj: Any) -> bool:
    return not item_problems(obj)


def _mcq_problems(rec: Dict[str, Any]) -> List[str]:
    problems: List[str] = []
    opts = rec.get("options")
    if not _is_sequence(opts) or len(opts) < 2 or not all(isinstance(o, str) for o in opts):
        problems.append("mcq options must be at least two strings")
    if rec.get("answer") not in config.MCQ_ANSWER_KEYS:
        problems.append(f"mcq answer must be one of {', '.join(config.MCQ_ANSWER_KEYS)}")
    return problems


def _cloze_problems(rec: Dict[str, Any]) -> List[str]:
    problems: List[str] = []
    stem = rec.get("stem")
    if not isinstance(stem, str) or config.BLANK_MARKER not in stem:
        problems.append(f"cloze stem has no blank marker {config.BLANK_MARKER}")
    ans = rec.get("answer")
    if not (isinstance(ans, str) or (_is_sequence(ans) and all(isinstance(a, str) for a in ans))):
        problems.append("cloze answer must be a string or a list of strings")
    return problems


def _matching_problems(rec: Dict[str, Any]) -> List[str]:
    problems: List[str] = []
    opts = rec.get("options")
    if not isinstance(opts, Mapping) or not _is_sequence(opts.get("left")) or not _is_sequence(opts.get("right")):
        problems.append("matching options need left and right lists")
    if not isinstance(rec.get("answer"), Mapping):
        problems.append("matching answer must be a left->right mapping")
    return problems


_TYPE_CHECKS = {
    "mcq": _mcq_problems,
    "cloze": _cloze_problems,
    "matching": _matching_problems,
}


def type_problems(obj: Any) -> List[str]:
    """Type-specific refinements; types without a refinement only need the generic predicate."""
    rec = _record(obj)
    if rec is None:
        return ["not a mapping"]
    item_type = rec.get("type")
    check = _TYPE_CHECKS.get(item_type) if isinstance(item_type, str) else None
    return check(rec) if check else []


def _is_valid_as(obj: Any, item_type: str) -> bool:
    rec = _record(obj)
    if rec is None or rec.get("type") != item_type or item_problems(rec):
        return False
    return not _TYPE_CHECKS[item_type](rec)


def is_valid_mcq_item(obj: Any) -> bool:
    return _is_valid_as(obj, "mcq")


def is_valid_cloze_item(obj: Any) -> bool:
    return _is_valid_as(obj, "cloze")


def is_valid_matching_item(obj: Any) -> bool:
    return _is_valid_as(obj, "matching")
