from __future__ import annotations

import random

import pytest

from assess_core.types import Item


def make_item(
    id: str,
    type: str = "mcq",
    difficulty: float = 0.5,
    level: str = "A2",
    **extra,
) -> Item:
    fields = dict(
        id=id,
        owner_id="test_user",
        type=type,
        level=level,
        stem=f"Test question {id}",
        answer="A",
        tags=[],
        difficulty_score=difficulty,
        usage_count=0,
        created_at="2023-01-01T00:00:00Z",
        updated_at="2023-01-01T00:00:00Z",
    )
    fields.update(extra)
    return Item(**fields)


def build_pool(layout: dict[str, list[float]]) -> list[Item]:
    """Pool from {type: [difficulty, ...]}; ids are ``<type><n>``."""
    items: list[Item] = []
    for item_type, scores in layout.items():
        for idx, score in enumerate(scores, start=1):
            items.append(make_item(f"{item_type}{idx}", item_type, score))
    return items


def spread(n: int) -> list[float]:
    return [i / (n - 1) for i in range(n)] if n > 1 else [0.5]


def raw_record(**overrides) -> dict:
    rec = {
        "id": "item_123",
        "owner_id": "user_456",
        "type": "mcq",
        "level": "A2",
        "stem": "What is the capital of France?",
        "options": ["Paris", "London", "Berlin", "Madrid"],
        "answer": "A",
        "tags": ["geography", "capitals"],
        "difficulty_score": 0.4,
        "usage_count": 5,
        "created_at": "2023-01-01T00:00:00Z",
        "updated_at": "2023-01-01T00:00:00Z",
    }
    rec.update(overrides)
    return rec


@pytest.fixture
def sample_pool() -> list[Item]:
    return build_pool(
        {
            "mcq": [0.2, 0.2, 0.5, 0.5, 0.8, 0.8],
            "cloze": [0.3, 0.4, 0.7],
            "reading_q": [0.4, 0.6],
        }
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
