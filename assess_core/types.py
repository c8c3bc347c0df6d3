from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ItemType = Literal["mcq", "cloze", "error_correction", "matching", "reading_q", "writing_task"]
ITEM_TYPES: tuple[str, ...] = ("mcq", "cloze", "error_correction", "matching", "reading_q", "writing_task")
CEFR_LEVELS: tuple[str, ...] = ("A1", "A2", "B1", "B2", "C1", "C2")
DIFFICULTY_BANDS: tuple[str, ...] = ("easy", "medium", "hard")


@dataclass
class Item:
    id: str; owner_id: str; type: str; level: str; stem: str
    answer: Any
    options: Any = None
    tags: List[str] = field(default_factory=list)
    difficulty_score: float = 0.5
    usage_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    explanation: Optional[str] = None
    source: Optional[str] = None
    correct_rate: Optional[float] = None

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


class DifficultyDistribution(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    easy: float = Field(ge=0.0, le=1.0)
    medium: float = Field(ge=0.0, le=1.0)
    hard: float = Field(ge=0.0, le=1.0)

    def as_dict(self) -> Dict[str, float]:
        return {"easy": self.easy, "medium": self.medium, "hard": self.hard}


class AssemblyConfig(BaseModel):
    """Target shape of one paper; fallback strategies derive copies, never edit in place."""

    model_config = ConfigDict(frozen=True)

    total_items: int = Field(ge=0)
    item_distribution: Dict[str, int] = Field(default_factory=dict)
    difficulty_distribution: DifficultyDistribution
    level: Optional[str] = None
    topics: Optional[List[str]] = None
    tags: Optional[List[str]] = None

    @field_validator("item_distribution")
    @classmethod
    def _clamp_counts(cls, value: Dict[str, int]) -> Dict[str, int]:
        return {str(k): max(0, int(v)) for k, v in value.items()}

    @property
    def requested(self) -> int:
        return sum(self.item_distribution.values())


@dataclass
class FallbackResult:
    success: bool
    selected_items: List[Item]
    fallbacks_applied: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    adjusted_config: Optional[AssemblyConfig] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "adjusted_config": self.adjusted_config.model_dump() if self.adjusted_config else None,
            "selected_items": [it.to_record() for it in self.selected_items],
            "fallbacks_applied": list(self.fallbacks_applied),
            "warnings": list(self.warnings),
        }


@dataclass
class ConversionFailure:
    original: Any; error: str


@dataclass
class BatchConversion:
    successful: List[Item] = field(default_factory=list)
    failed: List[ConversionFailure] = field(default_factory=list)


@dataclass
class Shortfall:
    type: str
    available: int
    required: int
    band: Optional[str] = None


@dataclass
class DistributionReport:
    is_valid: bool
    issues: List[str] = field(default_factory=list)
    suggestions: List[Shortfall] = field(default_factory=list)
