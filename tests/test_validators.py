from __future__ import annotations

import math

import pytest

from assess_core.types import Item
from assess_core.validators import (
    is_valid_cloze_item,
    is_valid_item,
    is_valid_matching_item,
    is_valid_mcq_item,
    item_problems,
    type_problems,
)

from tests.conftest import make_item, raw_record


def test_valid_record_and_item_pass():
    assert is_valid_item(raw_record())
    assert is_valid_item(make_item("x1"))


@pytest.mark.parametrize(
    "field",
    ["id", "owner_id", "type", "level", "stem", "answer", "tags",
     "difficulty_score", "usage_count", "created_at", "updated_at"],
)
def test_missing_required_field_fails(field):
    rec = raw_record()
    del rec[field]
    assert not is_valid_item(rec)


@pytest.mark.parametrize(
    "overrides",
    [
        {"id": 123},
        {"id": ""},
        {"owner_id": 123},
        {"stem": 123},
        {"stem": "   "},
        {"tags": "not-a-list"},
        {"difficulty_score": "0.4"},
        {"difficulty_score": True},
        {"difficulty_score": math.nan},
        {"usage_count": "5"},
        {"created_at": 123},
        {"type": "essay"},
        {"level": "X1"},
        {"difficulty_score": -0.1},
        {"difficulty_score": 1.1},
    ],
)
def test_bad_field_values_fail(overrides):
    assert not is_valid_item(raw_record(**overrides))


def test_boundary_scores_and_empty_owner_are_accepted():
    assert is_valid_item(raw_record(difficulty_score=0))
    assert is_valid_item(raw_record(difficulty_score=1))
    assert is_valid_item(raw_record(owner_id=""))


@pytest.mark.parametrize("value", [None, "string", 123, [], ["a"], 1.5])
def test_non_mappings_are_not_items(value):
    assert not is_valid_item(value)
    assert item_problems(value) == ["not a mapping"]


def test_problems_name_every_violation():
    problems = item_problems({"type": "essay", "level": "Z9"})
    joined = "\n".join(problems)
    assert "id must be" in joined
    assert "'essay'" in joined
    assert "'Z9'" in joined
    assert "stem must be" in joined


def test_mcq_refinement():
    assert is_valid_mcq_item(raw_record())
    assert not is_valid_mcq_item(raw_record(type="cloze"))
    for bad in (None, "not-a-list", ["only-one"], [123, 456], []):
        assert not is_valid_mcq_item(raw_record(options=bad))
    for bad in ("E", "a", 0, ""):
        assert not is_valid_mcq_item(raw_record(answer=bad))


def test_cloze_refinement():
    rec = raw_record(type="cloze", stem="I ___ a student.", answer="am", options=None)
    assert is_valid_cloze_item(rec)
    assert is_valid_cloze_item({**rec, "answer": ["am", "is"]})
    assert not is_valid_cloze_item({**rec, "stem": "I am a student."})
    assert not is_valid_cloze_item({**rec, "answer": {"blank": "am"}})
    assert not is_valid_cloze_item({**rec, "answer": ["am", 2]})


def test_matching_refinement():
    rec = raw_record(
        type="matching",
        options={"left": ["go", "eat"], "right": ["ate", "went"]},
        answer={"go": "went", "eat": "ate"},
    )
    assert is_valid_matching_item(rec)
    assert not is_valid_matching_item({**rec, "options": ["go", "eat"]})
    assert not is_valid_matching_item({**rec, "options": {"left": ["go"]}})
    assert not is_valid_matching_item({**rec, "answer": ["went", "ate"]})
    assert not is_valid_matching_item({**rec, "type": "mcq"})


@pytest.mark.parametrize("bad_type", [["mcq"], {"kind": "mcq"}, None, 3])
def test_type_problems_tolerates_odd_type_values(bad_type):
    rec = raw_record(type=bad_type)
    assert type_problems(rec) == []
    assert not is_valid_item(rec)


def test_type_problems_only_for_refined_types():
    assert type_problems(make_item("w1", "writing_task", answer={"rubric": []})) == []
    problems = type_problems(make_item("c1", "cloze"))
    assert any("blank marker" in p for p in problems)
    assert isinstance(make_item("m1"), Item)
