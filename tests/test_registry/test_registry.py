"""Tests for ExampleRegistry lookups, queries and integrity checks.

Covers:
- Self-consistent lookups and NotFoundError listings
- Category membership order
- Difficulty / tag / text queries
- validate_configuration() and ensure_valid()
- Loading from dicts, mappings and files
- The bundled registry
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fhevm_scaffold.errors import ConfigurationError, NotFoundError
from fhevm_scaffold.registry import (
    CategoryDescriptor,
    Difficulty,
    ExampleDescriptor,
    ExampleRegistry,
    load_default_registry,
    load_registry,
)

pytestmark = pytest.mark.unit


def _example(name: str, category: str = "basic", **extra) -> ExampleDescriptor:
    return ExampleDescriptor(
        name=name,
        title=name.title(),
        category=category,
        contract_file=f"contracts/{name}.sol",
        **extra,
    )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestLookup:
    def test_get_example_name_matches_id(self, registry):
        for example_id in registry.example_ids():
            assert registry.get_example(example_id).name == example_id

    def test_unknown_example_raises_not_found(self, registry):
        before = registry.example_ids()
        with pytest.raises(NotFoundError) as exc_info:
            registry.get_example("does-not-exist")
        err = exc_info.value
        assert err.kind == "example"
        assert err.identifier == "does-not-exist"
        assert err.available == sorted(before)
        assert "fhe-counter" in str(err)
        assert registry.example_ids() == before

    def test_unknown_category_raises_not_found(self, registry):
        with pytest.raises(NotFoundError, match="Unknown category: nope"):
            registry.get_category("nope")

    def test_contains_and_len(self, registry):
        assert "fhe-add" in registry
        assert "missing" not in registry
        assert len(registry) == 3

    def test_examples_in_category_in_declared_order(self):
        registry = ExampleRegistry(
            [_example("b"), _example("a")],
            [CategoryDescriptor(name="basic", title="Basic", examples=["a", "b"])],
        )
        members = registry.get_examples_in_category("basic")
        assert [m.name for m in members] == ["a", "b"]

    def test_examples_in_category_dangling_member(self):
        registry = ExampleRegistry(
            [_example("a")],
            [CategoryDescriptor(name="basic", title="Basic", examples=["a", "ghost"])],
        )
        with pytest.raises(ConfigurationError, match="ghost"):
            registry.get_examples_in_category("basic")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_by_difficulty_enum_and_string(self, registry):
        assert [e.name for e in registry.get_examples_by_difficulty(Difficulty.ADVANCED)] == ["acl"]
        assert [e.name for e in registry.get_examples_by_difficulty("Intermediate")] == ["fhe-add"]

    def test_by_unknown_difficulty_is_empty(self, registry):
        assert registry.get_examples_by_difficulty("expert") == []

    def test_by_tag_is_exact_and_case_insensitive(self, registry):
        assert [e.name for e in registry.get_examples_by_tag("ACL")] == ["acl"]
        assert registry.get_examples_by_tag("perm") == []

    def test_search_permission(self, registry):
        # "acl" has "permissions" as a tag and "Permission management" as a concept.
        assert [e.name for e in registry.search_examples("permission")] == ["acl"]

    def test_search_matches_description(self, registry):
        names = [e.name for e in registry.search_examples("ENCRYPTED")]
        assert names == ["fhe-counter", "fhe-add"]

    def test_search_no_match(self, registry):
        assert registry.search_examples("zzz") == []

    def test_all_tags_sorted_unique(self, registry):
        assert registry.get_all_tags() == ["acl", "arithmetic", "basic", "counter", "permissions"]

    def test_summary_counts(self, registry):
        summary = registry.summary()
        assert summary.total_examples == 3
        assert summary.total_categories == 2
        assert summary.per_category == {"basic": 2, "access-control": 1}
        assert summary.per_difficulty == {"beginner": 1, "intermediate": 1, "advanced": 1}

    def test_listing_order_follows_input(self, registry):
        assert registry.example_ids() == ["fhe-counter", "fhe-add", "acl"]
        assert registry.category_ids() == ["basic", "access-control"]
        assert [c.name for c in registry.categories()] == registry.category_ids()
        assert [e.name for e in registry.all_examples()] == registry.example_ids()


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------


class TestValidation:
    def test_valid_registry(self, registry):
        report = registry.validate_configuration()
        assert report.valid is True
        assert report.errors == []

    def test_dangling_member_reported(self):
        registry = ExampleRegistry(
            [_example("a")],
            [CategoryDescriptor(name="basic", title="Basic", examples=["a", "ghost"])],
        )
        report = registry.validate_configuration()
        assert not report.valid
        assert report.errors == ["Category 'basic' references non-existent example 'ghost'"]

    def test_missing_category_reported(self):
        registry = ExampleRegistry(
            [_example("a", category="nowhere")],
            [CategoryDescriptor(name="basic", title="Basic", examples=[])],
        )
        report = registry.validate_configuration()
        assert report.errors == ["Example 'a' references non-existent category 'nowhere'"]

    def test_duplicates_reported_and_first_wins(self):
        first = _example("a", description="first")
        registry = ExampleRegistry(
            [first, _example("a", description="second")],
            [
                CategoryDescriptor(name="basic", title="Basic", examples=["a"]),
                CategoryDescriptor(name="basic", title="Again", examples=[]),
            ],
        )
        report = registry.validate_configuration()
        assert "Duplicate example identifier 'a'" in report.errors
        assert "Duplicate category identifier 'basic'" in report.errors
        assert registry.get_example("a") is first
        assert registry.get_category("basic").title == "Basic"

    def test_ensure_valid_raises_with_all_errors(self):
        registry = ExampleRegistry(
            [_example("a", category="nowhere")],
            [CategoryDescriptor(name="basic", title="Basic", examples=["ghost"])],
        )
        with pytest.raises(ConfigurationError) as exc_info:
            registry.ensure_valid()
        assert len(exc_info.value.errors) == 2

    def test_ensure_valid_returns_registry(self, registry):
        assert registry.ensure_valid() is registry


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoading:
    def test_from_dict_accepts_mappings(self):
        registry = ExampleRegistry.from_dict(
            {
                "examples": {
                    "a": {"title": "A", "category": "basic", "contract_file": "a.sol"},
                },
                "categories": {"basic": {"title": "Basic", "examples": ["a"]}},
            }
        )
        assert registry.get_example("a").title == "A"
        assert registry.validate_configuration().valid

    def test_from_dict_collects_model_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ExampleRegistry.from_dict(
                {
                    "examples": [
                        {"name": "a", "title": "A", "category": "basic"},
                        {"name": "b", "title": "B", "category": "basic",
                         "contract_file": "b.sol", "difficulty": "expert"},
                    ],
                    "categories": [],
                }
            )
        errors = exc_info.value.errors
        assert any("'a'" in e and "contract_file" in e for e in errors)
        assert any("'b'" in e and "difficulty" in e for e in errors)

    def test_from_dict_rejects_bad_section(self):
        with pytest.raises(ConfigurationError, match="must be a list or a mapping"):
            ExampleRegistry.from_dict({"examples": "nope"})

    def test_from_file(self, registry_file: Path):
        registry = load_registry(registry_file)
        assert registry.example_ids() == ["fhe-counter", "fhe-add", "acl"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="Cannot read registry"):
            load_registry(tmp_path / "missing.json")

    def test_malformed_file(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_registry(path)

    def test_load_validates_by_default(self, tmp_path: Path, registry_data):
        registry_data["categories"][0]["examples"].append("ghost")
        path = tmp_path / "invalid.json"
        path.write_text(json.dumps(registry_data), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="ghost"):
            load_registry(path)
        assert not load_registry(path, validate=False).validate_configuration().valid


class TestBundledRegistry:
    def test_bundled_registry_is_valid(self):
        registry = load_default_registry()
        assert registry.validate_configuration().valid
        assert len(registry) == 25
        assert "fhe-counter" in registry

    def test_bundled_categories(self):
        registry = load_default_registry()
        assert registry.category_ids() == [
            "basic", "access-control", "anti-patterns", "openzeppelin", "advanced",
        ]
        assert [e.name for e in registry.get_examples_in_category("advanced")] == [
            "blind-auction", "dutch-auction", "voting-system",
        ]
