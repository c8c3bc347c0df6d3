from __future__ import annotations
import os, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# difficulty bands: easy <= EASY_MAX < medium <= MEDIUM_MAX < hard
EASY_MAX: float = 0.30
MEDIUM_MAX: float = 0.60

EMERGENCY_MAX_ITEMS: int = 10
EMERGENCY_SPLIT: dict[str, float] = {"easy": 0.33, "medium": 0.34, "hard": 0.33}
DIFFICULTY_SUM_TOLERANCE: float = 0.01

DEFAULT_ITEM_TYPE: str = "mcq"
DEFAULT_LEVEL: str = "A2"
DEFAULT_DIFFICULTY: float = 0.5
BLANK_MARKER: str = "___"
MCQ_ANSWER_KEYS: tuple[str, ...] = ("A", "B", "C", "D")
MCQ_FALLBACK_ANSWER: str = "A"
MCQ_PLACEHOLDER_OPTIONS: tuple[str, ...] = ("Option A", "Option B", "Option C", "Option D")

BANK_MIN_PER_CELL: int = 2
BANK_AUDIT_TYPE_CHECKS: bool = True

DEBUG_SEED: int | None = None
# // env overrides for staging/ops; defaults remain conservative.
EMERGENCY_MAX_ITEMS = max(1, _env_int("EMERGENCY_MAX_ITEMS", EMERGENCY_MAX_ITEMS))
DIFFICULTY_SUM_TOLERANCE = _env_float("DIFFICULTY_SUM_TOLERANCE", DIFFICULTY_SUM_TOLERANCE)
BANK_MIN_PER_CELL = _env_int("BANK_MIN_PER_CELL", BANK_MIN_PER_CELL)
BANK_AUDIT_TYPE_CHECKS = _env_bool("BANK_AUDIT_TYPE_CHECKS", BANK_AUDIT_TYPE_CHECKS)
_seed_raw = os.getenv("DEBUG_SEED")
if _seed_raw is not None and _seed_raw.strip():
    try:
        DEBUG_SEED = int(_seed_raw.strip())
    except ValueError:
        DEBUG_SEED = None


def make_rng(seed: int | None = None) -> random.Random:
    """Random source for sampling; explicit seed wins over DEBUG_SEED."""
    if seed is None:
        seed = DEBUG_SEED
    if seed is None:
        return random.Random()
    return random.Random(int(seed))
