"""Tests for the registry descriptor models.

Covers:
- Default resolution for objectives, prerequisites and chapter
- Difficulty parsing and DIFFICULTY_LEVELS ordering
- Frozen descriptors
- Case-insensitive text matching
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from fhevm_scaffold.registry import (
    DEFAULT_CHAPTER,
    DEFAULT_LEARNING_OBJECTIVES,
    DEFAULT_PREREQUISITES,
    DIFFICULTY_LEVELS,
    CategoryDescriptor,
    Difficulty,
    ExampleDescriptor,
)

pytestmark = pytest.mark.unit


def _descriptor(**overrides) -> ExampleDescriptor:
    fields = {
        "name": "fhe-counter",
        "title": "FHE Counter",
        "category": "basic",
        "contract_file": "contracts/basic/FHECounter.sol",
    }
    fields.update(overrides)
    return ExampleDescriptor(**fields)


class TestDefaults:
    def test_missing_objectives_use_named_default(self):
        assert _descriptor().resolved_learning_objectives == DEFAULT_LEARNING_OBJECTIVES

    def test_empty_objectives_use_named_default(self):
        d = _descriptor(learning_objectives=[])
        assert d.resolved_learning_objectives == DEFAULT_LEARNING_OBJECTIVES

    def test_explicit_objectives_win(self):
        d = _descriptor(learning_objectives=["Add numbers"])
        assert d.resolved_learning_objectives == ("Add numbers",)

    def test_prerequisites_default(self):
        assert _descriptor().resolved_prerequisites == DEFAULT_PREREQUISITES

    def test_chapter_default(self):
        assert _descriptor().resolved_chapter == DEFAULT_CHAPTER
        assert _descriptor(chapter="Basics").resolved_chapter == "Basics"

    def test_optional_fields(self):
        d = _descriptor()
        assert d.test_file is None
        assert d.description == ""
        assert d.difficulty is Difficulty.BEGINNER
        assert d.concepts == ()
        assert d.tags == ()


class TestValidation:
    def test_difficulty_from_string(self):
        assert _descriptor(difficulty="advanced").difficulty is Difficulty.ADVANCED

    def test_unknown_difficulty_rejected(self):
        with pytest.raises(ValidationError):
            _descriptor(difficulty="expert")

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            _descriptor(name="")

    def test_missing_contract_rejected(self):
        with pytest.raises(ValidationError):
            ExampleDescriptor(name="x", title="X", category="basic")

    def test_descriptor_is_frozen(self):
        d = _descriptor()
        with pytest.raises(ValidationError):
            d.title = "Changed"

    def test_category_members_are_ordered_tuple(self):
        c = CategoryDescriptor(name="basic", title="Basic", examples=["b", "a"])
        assert c.examples == ("b", "a")


class TestDifficultyLevels:
    def test_every_level_described(self):
        assert set(DIFFICULTY_LEVELS) == set(Difficulty)

    def test_levels_are_ordered(self):
        levels = [DIFFICULTY_LEVELS[d].level for d in Difficulty]
        assert levels == sorted(levels) == [0, 1, 2]

    def test_estimated_time(self):
        assert DIFFICULTY_LEVELS[Difficulty.BEGINNER].estimated_time == "30-60 minutes"


class TestMatches:
    @pytest.mark.parametrize("query", ["counter", "COUNTER", "encrypted", "arith", "basic"])
    def test_matches_any_field(self, query):
        d = _descriptor(
            description="An encrypted value",
            concepts=["arithmetic"],
            tags=["basic"],
        )
        assert d.matches(query)

    def test_no_match(self):
        assert not _descriptor().matches("permission")

    def test_category_and_file_not_searched(self):
        assert not _descriptor(category="oddball").matches("oddball")
