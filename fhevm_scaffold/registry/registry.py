"""Immutable example registry.

The registry is built once per invocation -- from the bundled JSON table, a
user-supplied JSON file, or (in tests) a literal list of descriptors -- and is
then passed explicitly to the renderer and materializer.  It exposes read-only
lookup and query operations plus an integrity check that collects every
cross-reference problem instead of stopping at the first one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fhevm_scaffold.errors import ConfigurationError, NotFoundError
from fhevm_scaffold.utils import load_json

from .models import (
    CategoryDescriptor,
    Difficulty,
    ExampleDescriptor,
    RegistrySummary,
    ValidationReport,
)


class ExampleRegistry:
    """Read-only mapping of identifiers to example and category descriptors.

    Iteration order follows the order descriptors were supplied in, which is
    also the order batch generation visits examples.
    """

    def __init__(
        self,
        examples: Iterable[ExampleDescriptor],
        categories: Iterable[CategoryDescriptor],
    ) -> None:
        self._example_list: tuple[ExampleDescriptor, ...] = tuple(examples)
        self._category_list: tuple[CategoryDescriptor, ...] = tuple(categories)

        self._examples: dict[str, ExampleDescriptor] = {}
        self._duplicate_examples: list[str] = []
        for example in self._example_list:
            if example.name in self._examples:
                self._duplicate_examples.append(example.name)
                continue
            self._examples[example.name] = example

        self._categories: dict[str, CategoryDescriptor] = {}
        self._duplicate_categories: list[str] = []
        for category in self._category_list:
            if category.name in self._categories:
                self._duplicate_categories.append(category.name)
                continue
            self._categories[category.name] = category

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExampleRegistry":
        """Build a registry from a ``{"examples": ..., "categories": ...}`` payload.

        Both sections may be either a list of descriptor dicts or a mapping
        of identifier -> descriptor dict (the identifier fills a missing
        ``name``).

        Raises:
            ConfigurationError: If any descriptor fails model validation.
        """
        errors: list[str] = []
        examples = _parse_section(data.get("examples", []), ExampleDescriptor, "example", errors)
        categories = _parse_section(
            data.get("categories", []), CategoryDescriptor, "category", errors
        )
        if errors:
            raise ConfigurationError(errors)
        return cls(examples, categories)

    @classmethod
    def from_file(cls, path: str | Path) -> "ExampleRegistry":
        """Load a registry from a JSON file.

        Raises:
            ConfigurationError: If the file is missing, malformed, or invalid.
        """
        file_path = Path(path)
        try:
            data = load_json(file_path)
        except (OSError, ValueError) as exc:
            raise ConfigurationError([f"Cannot read registry {file_path}: {exc}"]) from exc
        return cls.from_dict(data)

    # -- Lookup ------------------------------------------------------------

    def get_example(self, example_id: str) -> ExampleDescriptor:
        """Return the descriptor for *example_id*.

        Raises:
            NotFoundError: If the identifier is not registered.
        """
        try:
            return self._examples[example_id]
        except KeyError:
            raise NotFoundError("example", example_id, self._examples) from None

    def get_category(self, category_id: str) -> CategoryDescriptor:
        """Return the descriptor for *category_id*.

        Raises:
            NotFoundError: If the identifier is not registered.
        """
        try:
            return self._categories[category_id]
        except KeyError:
            raise NotFoundError("category", category_id, self._categories) from None

    def get_examples_in_category(self, category_id: str) -> list[ExampleDescriptor]:
        """Return the member descriptors of a category, in declared order.

        Raises:
            NotFoundError: If the category is not registered.
            ConfigurationError: If a member does not resolve (registry was
                not validated).
        """
        category = self.get_category(category_id)
        dangling = [name for name in category.examples if name not in self._examples]
        if dangling:
            raise ConfigurationError(
                f"Category '{category_id}' references non-existent example '{name}'"
                for name in dangling
            )
        return [self._examples[name] for name in category.examples]

    def __contains__(self, example_id: object) -> bool:
        return example_id in self._examples

    def __len__(self) -> int:
        return len(self._examples)

    # -- Queries -----------------------------------------------------------

    def all_examples(self) -> list[ExampleDescriptor]:
        return list(self._examples.values())

    def categories(self) -> list[CategoryDescriptor]:
        return list(self._categories.values())

    def example_ids(self) -> list[str]:
        return list(self._examples)

    def category_ids(self) -> list[str]:
        return list(self._categories)

    def get_examples_by_difficulty(self, level: Difficulty | str) -> list[ExampleDescriptor]:
        """Return every example at *level*; unknown levels simply match nothing."""
        wanted = level.value if isinstance(level, Difficulty) else str(level).lower()
        return [ex for ex in self._examples.values() if ex.difficulty.value == wanted]

    def get_examples_by_tag(self, tag: str) -> list[ExampleDescriptor]:
        """Return examples carrying *tag* (case-insensitive exact match)."""
        wanted = tag.lower()
        return [
            ex for ex in self._examples.values()
            if any(t.lower() == wanted for t in ex.tags)
        ]

    def search_examples(self, query: str) -> list[ExampleDescriptor]:
        """Return examples whose title, description, concepts or tags contain *query*."""
        return [ex for ex in self._examples.values() if ex.matches(query)]

    def get_all_tags(self) -> list[str]:
        """Return the sorted set of tags used across all examples."""
        return sorted({tag for ex in self._examples.values() for tag in ex.tags})

    def summary(self) -> RegistrySummary:
        """Count examples overall, per category and per difficulty."""
        per_difficulty = {level.value: 0 for level in Difficulty}
        for ex in self._examples.values():
            per_difficulty[ex.difficulty.value] += 1
        return RegistrySummary(
            total_examples=len(self._examples),
            total_categories=len(self._categories),
            per_category={
                cat.name: sum(1 for name in cat.examples if name in self._examples)
                for cat in self._categories.values()
            },
            per_difficulty=per_difficulty,
        )

    # -- Integrity ---------------------------------------------------------

    def validate_configuration(self) -> ValidationReport:
        """Collect every integrity violation without raising.

        Checks duplicate identifiers, category members that do not resolve,
        and examples whose category does not exist.
        """
        errors: list[str] = []

        for name in self._duplicate_examples:
            errors.append(f"Duplicate example identifier '{name}'")
        for name in self._duplicate_categories:
            errors.append(f"Duplicate category identifier '{name}'")

        for category in self._categories.values():
            for example_name in category.examples:
                if example_name not in self._examples:
                    errors.append(
                        f"Category '{category.name}' references non-existent example "
                        f"'{example_name}'"
                    )

        for example in self._examples.values():
            if example.category not in self._categories:
                errors.append(
                    f"Example '{example.name}' references non-existent category "
                    f"'{example.category}'"
                )

        return ValidationReport(valid=not errors, errors=errors)

    def ensure_valid(self) -> "ExampleRegistry":
        """Raise ``ConfigurationError`` unless :meth:`validate_configuration` passes."""
        report = self.validate_configuration()
        if not report.valid:
            raise ConfigurationError(report.errors)
        return self


# ---------------------------------------------------------------------------
# Loading helpers
# ---------------------------------------------------------------------------

def load_registry(path: str | Path, *, validate: bool = True) -> ExampleRegistry:
    """Load the registry at *path*, failing fast on integrity errors by default."""
    registry = ExampleRegistry.from_file(path)
    if validate:
        registry.ensure_valid()
    return registry


def load_default_registry(*, validate: bool = True) -> ExampleRegistry:
    """Load the registry bundled with the package."""
    from fhevm_scaffold.config import BUNDLED_REGISTRY

    return load_registry(BUNDLED_REGISTRY, validate=validate)


def _parse_section(
    raw: Any,
    model: type[ExampleDescriptor] | type[CategoryDescriptor],
    kind: str,
    errors: list[str],
) -> list[Any]:
    """Validate one registry section, appending readable messages to *errors*."""
    if isinstance(raw, Mapping):
        items = [
            {"name": key, **value} if isinstance(value, Mapping) else value
            for key, value in raw.items()
        ]
    elif isinstance(raw, list):
        items = raw
    else:
        errors.append(f"'{kind}' section must be a list or a mapping")
        return []

    parsed: list[Any] = []
    for index, item in enumerate(items):
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            label = item.get("name", f"#{index}") if isinstance(item, Mapping) else f"#{index}"
            for problem in exc.errors():
                location = ".".join(str(part) for part in problem["loc"]) or "<root>"
                errors.append(f"Invalid {kind} '{label}': {location}: {problem['msg']}")
    return parsed
