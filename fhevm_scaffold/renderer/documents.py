"""Document rendering for examples and categories.

Turns an :class:`ExampleDescriptor` plus the literal text of its artifacts
into a :class:`RenderedDocument`.  Rendering is a pure function of its
inputs: the only non-deterministic piece, a generation timestamp, is off by
default and, when enabled, confined to a single trailing marker line.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from fhevm_scaffold.errors import MissingArtifactError
from fhevm_scaffold.registry.models import (
    DIFFICULTY_LEVELS,
    CategoryDescriptor,
    ExampleDescriptor,
)
from fhevm_scaffold.utils import write_text

from .source import (
    code_language,
    extract_contract_name,
    extract_description,
    extract_function_signatures,
    extract_solidity_version,
    fenced,
)
from .templates import TemplateRenderer

GENERATED_AT_PREFIX = "<!-- generated-at: "
GENERATED_AT_SUFFIX = " -->"


# ---------------------------------------------------------------------------
# Data Models
# ---------------------------------------------------------------------------

class DocumentKind(str, Enum):
    """The document shapes the renderer can produce."""
    README = "readme"
    API = "api"
    LEARNING_GUIDE = "learning_guide"
    GITBOOK = "gitbook"
    CATEGORY_README = "category_readme"


_TEMPLATES: dict[DocumentKind, str] = {
    DocumentKind.README: "README.md.j2",
    DocumentKind.API: "API.md.j2",
    DocumentKind.LEARNING_GUIDE: "LEARNING_GUIDE.md.j2",
    DocumentKind.GITBOOK: "gitbook.md.j2",
    DocumentKind.CATEGORY_README: "CATEGORY_README.md.j2",
}

DEFAULT_FILENAMES: dict[DocumentKind, str] = {
    DocumentKind.README: "README.md",
    DocumentKind.API: "API.md",
    DocumentKind.LEARNING_GUIDE: "LEARNING_GUIDE.md",
    DocumentKind.CATEGORY_README: "README.md",
}


class RenderedDocument(BaseModel):
    """A rendered text document and where it belongs."""

    path: Path
    content: str
    kind: DocumentKind

    async def write(self) -> Path:
        """Write the document, overwriting any previous file at ``path``."""
        await asyncio.to_thread(write_text, self.path, self.content)
        return self.path


class CategoryMember(BaseModel):
    """One example as it appears inside a category project."""
    model_config = ConfigDict(frozen=True)

    descriptor: ExampleDescriptor
    contract_name: str
    test_filename: Optional[str] = None
    description: Optional[str] = Field(
        default=None, description="Overrides the descriptor description when set"
    )

    @property
    def display_description(self) -> str:
        return self.description or self.descriptor.description


class DeployTarget(BaseModel):
    """A contract the generated deploy script deploys."""

    contract_name: str
    deploy_id: str = Field(default="")


# ---------------------------------------------------------------------------
# DocumentRenderer
# ---------------------------------------------------------------------------

class DocumentRenderer:
    """Renders README, API reference, learning guide and GitBook pages.

    Usage::

        renderer = DocumentRenderer()
        doc = renderer.render(descriptor, contract_text, test_text)
        await doc.write()
    """

    def __init__(
        self,
        templates: TemplateRenderer | None = None,
        *,
        stamp_generated_at: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.templates = templates or TemplateRenderer()
        self.stamp_generated_at = stamp_generated_at
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(
        self,
        descriptor: ExampleDescriptor,
        source_text: str | None,
        test_text: str | None = None,
        *,
        kind: DocumentKind = DocumentKind.README,
        path: str | Path | None = None,
    ) -> RenderedDocument:
        """Render one document for *descriptor*.

        The descriptor is trusted to have come from a registry lookup; only
        the artifact text is checked.

        Raises:
            MissingArtifactError: If *source_text* is absent or blank.
        """
        if kind is DocumentKind.CATEGORY_README:
            raise ValueError("use render_category() for category documents")
        if not source_text or not source_text.strip():
            raise MissingArtifactError(
                f"Source artifact {descriptor.contract_file} is empty",
                subject=descriptor.name,
                step=f"render {kind.value}",
            )

        context = self._example_context(descriptor, source_text, test_text)
        content = self.templates.render(_TEMPLATES[kind], context)
        target = Path(path) if path is not None else Path(self._default_filename(kind, descriptor))
        return RenderedDocument(path=target, content=self._finalise(content), kind=kind)

    def render_category(
        self,
        category: CategoryDescriptor,
        members: Sequence[CategoryMember],
        *,
        path: str | Path | None = None,
    ) -> RenderedDocument:
        """Render the README of a category project."""
        ordered = sorted(
            members,
            key=lambda m: DIFFICULTY_LEVELS[m.descriptor.difficulty].level,
        )
        context = {
            "category": category,
            "members": list(members),
            "learning_path": ordered,
            "difficulty_info": DIFFICULTY_LEVELS[category.difficulty],
        }
        content = self.templates.render(_TEMPLATES[DocumentKind.CATEGORY_README], context)
        target = Path(path) if path is not None else Path(DEFAULT_FILENAMES[DocumentKind.CATEGORY_README])
        return RenderedDocument(
            path=target,
            content=self._finalise(content),
            kind=DocumentKind.CATEGORY_README,
        )

    def render_deploy_script(self, contract_names: Sequence[str]) -> str:
        """Render a hardhat-deploy script deploying each contract in order."""
        targets = [
            DeployTarget(contract_name=name, deploy_id=f"deploy_{name.lower()}")
            for name in contract_names
        ]
        tags = ", ".join(f'"{t.contract_name}"' for t in targets)
        func_id = targets[0].deploy_id if len(targets) == 1 else "deploy_all"
        return self.templates.render(
            "deploy.ts.j2",
            {"targets": targets, "tags": tags, "func_id": func_id},
        )

    # ------------------------------------------------------------------
    # Context building
    # ------------------------------------------------------------------

    def _example_context(
        self,
        descriptor: ExampleDescriptor,
        source_text: str,
        test_text: str | None,
    ) -> dict[str, Any]:
        contract_name = extract_contract_name(source_text, descriptor.contract_file)
        test_filename = PurePath(descriptor.test_file).name if descriptor.test_file else None
        has_test = bool(test_text and test_text.strip())
        return {
            "example": descriptor,
            "description": descriptor.description or extract_description(source_text),
            "objectives": descriptor.resolved_learning_objectives,
            "prerequisites": descriptor.resolved_prerequisites,
            "chapter": descriptor.resolved_chapter,
            "difficulty_info": DIFFICULTY_LEVELS[descriptor.difficulty],
            "contract_name": contract_name,
            "contract_filename": f"{contract_name}.sol",
            "source_filename": PurePath(descriptor.contract_file).name,
            "test_filename": test_filename,
            "has_test": has_test,
            "source_block": fenced(source_text, code_language(descriptor.contract_file)),
            "test_block": (
                fenced(test_text, code_language(descriptor.test_file or "test.ts"))
                if has_test else None
            ),
            "functions": extract_function_signatures(source_text),
            "solidity_version": extract_solidity_version(source_text) or "unspecified",
        }

    @staticmethod
    def _default_filename(kind: DocumentKind, descriptor: ExampleDescriptor) -> str:
        if kind is DocumentKind.GITBOOK:
            return f"{descriptor.name}.md"
        return DEFAULT_FILENAMES[kind]

    def _finalise(self, content: str) -> str:
        """Normalise the trailing newline and append the optional timestamp marker."""
        content = content.rstrip("\n") + "\n"
        if self.stamp_generated_at:
            stamp = self._clock().replace(microsecond=0).isoformat()
            content += f"\n{GENERATED_AT_PREFIX}{stamp}{GENERATED_AT_SUFFIX}\n"
        return content


def strip_generated_marker(content: str) -> str:
    """Remove the trailing generated-at marker, if present."""
    lines = content.rstrip("\n").split("\n")
    if lines and lines[-1].startswith(GENERATED_AT_PREFIX):
        lines = lines[:-1]
        while lines and not lines[-1]:
            lines.pop()
    return "\n".join(lines) + "\n"
