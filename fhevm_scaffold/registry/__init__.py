"""Static example registry: descriptors, lookups, and integrity checks."""

from .models import (
    DEFAULT_CHAPTER,
    DEFAULT_LEARNING_OBJECTIVES,
    DEFAULT_PREREQUISITES,
    DIFFICULTY_LEVELS,
    CategoryDescriptor,
    Difficulty,
    ExampleDescriptor,
    RegistrySummary,
    ValidationReport,
)
from .registry import (
    ExampleRegistry,
    load_default_registry,
    load_registry,
)

__all__ = [
    "DEFAULT_CHAPTER",
    "DEFAULT_LEARNING_OBJECTIVES",
    "DEFAULT_PREREQUISITES",
    "DIFFICULTY_LEVELS",
    "CategoryDescriptor",
    "Difficulty",
    "ExampleDescriptor",
    "ExampleRegistry",
    "RegistrySummary",
    "ValidationReport",
    "load_default_registry",
    "load_registry",
]
