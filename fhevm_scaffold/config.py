"""Scaffolding tool configuration.

Centralised, typed configuration for every command.  All settings use a
Pydantic v2 model so they are validated at construction time and can be
serialised to/from JSON or read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

PACKAGE_DIR = Path(__file__).parent

BUNDLED_BASE_TEMPLATE = PACKAGE_DIR / "base_template"
BUNDLED_REGISTRY = PACKAGE_DIR / "registry" / "data" / "examples.json"

DEFAULT_COPY_EXCLUDE: list[str] = [
    "node_modules",
    "artifacts",
    "cache",
    "coverage",
    "types",
    "dist",
]

DEFAULT_PLACEHOLDER_FILES: list[str] = [
    "contracts/FHECounter.sol",
    "test/FHECounter.ts",
]


class Config(BaseModel):
    """Global scaffolding configuration.

    Instances are created once by the CLI entry point (or by a test) and
    passed to the registry loader, renderer and materializer.
    """

    source_root: Path = Field(
        default=Path("."),
        description="Directory against which descriptor contract/test paths resolve",
    )
    base_template_dir: Path | None = Field(
        default=None,
        description="Base project template; None selects the bundled template",
    )
    registry_path: Path | None = Field(
        default=None,
        description="JSON registry file; None selects the bundled registry",
    )
    output_root: Path = Field(
        default=Path("./output"),
        description="Parent directory for projects when no target is given",
    )
    docs_dir: Path = Field(default=Path("docs"))
    summary_filename: str = Field(default="SUMMARY.md")
    copy_exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_COPY_EXCLUDE))
    placeholder_files: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PLACEHOLDER_FILES),
        description="Base-template files replaced by the injected artifacts",
    )
    homepage_base: str = Field(default="https://github.com/fhevm-examples")
    stamp_generated_at: bool = Field(
        default=False,
        description="Append an isolated generated-at marker to rendered documents",
    )

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def template_path(self) -> Path:
        """The base template actually used for materialization."""
        return self.base_template_dir or BUNDLED_BASE_TEMPLATE

    @property
    def registry_file(self) -> Path:
        """The registry data file actually loaded."""
        return self.registry_path or BUNDLED_REGISTRY

    @property
    def docs_path(self) -> Path:
        """Documentation directory, resolved against ``source_root`` when relative."""
        if self.docs_dir.is_absolute():
            return self.docs_dir
        return self.source_root / self.docs_dir

    @property
    def summary_path(self) -> Path:
        """Path to the shared ``SUMMARY.md`` index."""
        return self.docs_path / self.summary_filename

    def resolve_source(self, relative: str | Path) -> Path:
        """Resolve a descriptor artifact path against ``source_root``."""
        candidate = Path(relative)
        if candidate.is_absolute():
            return candidate
        return self.source_root / candidate

    def default_example_target(self, example_id: str) -> Path:
        """Default output directory for ``create-example``."""
        return self.output_root / f"fhevm-example-{example_id}"

    def default_category_target(self, category_id: str) -> Path:
        """Default output directory for ``create-category``."""
        return self.output_root / f"fhevm-category-{category_id}"

    def default_doc_output(self, example_id: str) -> Path:
        """Default GitBook page location for ``generate-docs``."""
        return self.docs_path / f"{example_id}.md"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            FHEVM_SOURCE_ROOT, FHEVM_BASE_TEMPLATE, FHEVM_REGISTRY,
            FHEVM_OUTPUT_ROOT, FHEVM_DOCS_DIR, FHEVM_STAMP_DOCS.

        Keyword *overrides* whose value is not ``None`` win over the
        environment; the CLI uses this for its ``--source-root`` style flags.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("FHEVM_SOURCE_ROOT"):
            kwargs["source_root"] = Path(os.environ["FHEVM_SOURCE_ROOT"])
        if os.environ.get("FHEVM_BASE_TEMPLATE"):
            kwargs["base_template_dir"] = Path(os.environ["FHEVM_BASE_TEMPLATE"])
        if os.environ.get("FHEVM_REGISTRY"):
            kwargs["registry_path"] = Path(os.environ["FHEVM_REGISTRY"])
        if os.environ.get("FHEVM_OUTPUT_ROOT"):
            kwargs["output_root"] = Path(os.environ["FHEVM_OUTPUT_ROOT"])
        if os.environ.get("FHEVM_DOCS_DIR"):
            kwargs["docs_dir"] = Path(os.environ["FHEVM_DOCS_DIR"])
        stamp = os.environ.get("FHEVM_STAMP_DOCS", "").strip().lower()
        if stamp:
            kwargs["stamp_generated_at"] = stamp in {"1", "true", "yes"}

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
