"""Pydantic v2 models for the example registry.

Descriptors are frozen: the registry is loaded once per invocation and never
mutated afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Defaults for optional descriptor fields
# ---------------------------------------------------------------------------

DEFAULT_LEARNING_OBJECTIVES: tuple[str, ...] = ("Understand core FHEVM concepts",)
DEFAULT_PREREQUISITES: tuple[str, ...] = (
    "Basic Solidity knowledge",
    "Understanding of encryption concepts",
)
DEFAULT_CHAPTER = "General"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Difficulty(str, Enum):
    """How much prior FHEVM knowledge an example assumes."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class DifficultyInfo(BaseModel):
    """Human-facing description of a difficulty level."""
    model_config = ConfigDict(frozen=True)

    level: int
    description: str
    estimated_time: str


DIFFICULTY_LEVELS: dict[Difficulty, DifficultyInfo] = {
    Difficulty.BEGINNER: DifficultyInfo(
        level=0,
        description="No prior FHEVM knowledge required",
        estimated_time="30-60 minutes",
    ),
    Difficulty.INTERMEDIATE: DifficultyInfo(
        level=1,
        description="Some FHEVM knowledge recommended",
        estimated_time="1-2 hours",
    ),
    Difficulty.ADVANCED: DifficultyInfo(
        level=2,
        description="Advanced FHEVM knowledge required",
        estimated_time="2-4 hours",
    ),
}


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

class ExampleDescriptor(BaseModel):
    """One documented code sample: a contract, its test, and its metadata."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique kebab-case identifier")
    title: str = Field(..., description="Display title")
    description: str = Field(default="", description="What the example teaches")
    category: str = Field(..., description="Identifier of the owning category")
    contract_file: str = Field(..., description="Path to the primary .sol artifact")
    test_file: Optional[str] = Field(default=None, description="Path to the test artifact")
    fixtures: tuple[str, ...] = Field(
        default=(), description="Extra test-side files copied next to the test"
    )
    difficulty: Difficulty = Field(default=Difficulty.BEGINNER)
    concepts: tuple[str, ...] = Field(default=(), description="Key FHEVM concepts")
    tags: tuple[str, ...] = Field(default=(), description="Free-text search tags")
    chapter: Optional[str] = Field(default=None, description="Documentation chapter")
    prerequisites: Optional[tuple[str, ...]] = None
    learning_objectives: Optional[tuple[str, ...]] = None

    @property
    def resolved_learning_objectives(self) -> tuple[str, ...]:
        """Learning objectives, or ``DEFAULT_LEARNING_OBJECTIVES`` when absent or empty."""
        return self.learning_objectives or DEFAULT_LEARNING_OBJECTIVES

    @property
    def resolved_prerequisites(self) -> tuple[str, ...]:
        """Prerequisites, or ``DEFAULT_PREREQUISITES`` when absent or empty."""
        return self.prerequisites or DEFAULT_PREREQUISITES

    @property
    def resolved_chapter(self) -> str:
        return self.chapter or DEFAULT_CHAPTER

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title, description, concepts and tags."""
        needle = query.lower()
        if needle in self.title.lower() or needle in self.description.lower():
            return True
        return any(needle in value.lower() for value in (*self.concepts, *self.tags))


class CategoryDescriptor(BaseModel):
    """An ordered group of examples sharing a theme."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    title: str
    description: str = ""
    examples: tuple[str, ...] = Field(default=(), description="Ordered member identifiers")
    difficulty: Difficulty = Field(default=Difficulty.BEGINNER)


class ValidationReport(BaseModel):
    """Outcome of a registry integrity check."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


class RegistrySummary(BaseModel):
    """Counts describing the registry contents."""

    total_examples: int
    total_categories: int
    per_category: dict[str, int] = Field(default_factory=dict)
    per_difficulty: dict[str, int] = Field(default_factory=dict)
