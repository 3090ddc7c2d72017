"""Reading the source, test and fixture artifacts an example descriptor points at."""

from __future__ import annotations

import asyncio
from pathlib import Path, PurePath
from typing import Optional

from pydantic import BaseModel, Field

from fhevm_scaffold.config import Config
from fhevm_scaffold.errors import MissingArtifactError, ScaffoldError
from fhevm_scaffold.registry.models import ExampleDescriptor
from fhevm_scaffold.renderer.source import extract_contract_name, extract_description


class ResolvedArtifacts(BaseModel):
    """The literal text of one example's artifacts, ready to inject."""

    descriptor: ExampleDescriptor
    source_path: Path
    source_text: str
    test_path: Optional[Path] = None
    test_text: Optional[str] = None
    fixtures: dict[str, str] = Field(
        default_factory=dict, description="Fixture file name -> text, in declaration order"
    )

    @property
    def contract_name(self) -> str:
        return extract_contract_name(self.source_text, self.descriptor.contract_file)

    @property
    def contract_filename(self) -> str:
        return f"{self.contract_name}.sol"

    @property
    def test_filename(self) -> str | None:
        if self.test_text is None or self.descriptor.test_file is None:
            return None
        return PurePath(self.descriptor.test_file).name

    @property
    def description(self) -> str:
        return self.descriptor.description or extract_description(self.source_text)

    def output_paths(self) -> list[str]:
        """Project-relative paths this example's artifacts are injected at."""
        paths = [f"contracts/{self.contract_filename}"]
        if self.test_filename:
            paths.append(f"test/{self.test_filename}")
        paths.extend(f"test/{name}" for name in self.fixtures)
        return paths


def read_artifact(path: Path, *, subject: str, role: str) -> str:
    """Read one artifact as UTF-8 text.

    Raises:
        MissingArtifactError: If the file is absent, unreadable, or blank.
    """
    step = f"read {role} artifact"
    if not path.is_file():
        raise MissingArtifactError(
            f"{role.capitalize()} file not found: {path}", subject=subject, step=step
        )
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MissingArtifactError(
            f"Cannot read {role} file {path}: {exc}", subject=subject, step=step
        ) from exc
    if not text.strip():
        raise MissingArtifactError(
            f"{role.capitalize()} file is empty: {path}", subject=subject, step=step
        )
    return text


async def resolve_artifacts(descriptor: ExampleDescriptor, config: Config) -> ResolvedArtifacts:
    """Read every artifact *descriptor* references, relative to ``config.source_root``.

    A descriptor without ``test_file`` yields ``test_text=None``; a declared
    test or fixture file that is missing is an error like a missing contract.
    """
    source_path = config.resolve_source(descriptor.contract_file)
    source_text = await asyncio.to_thread(
        read_artifact, source_path, subject=descriptor.name, role="contract"
    )

    test_path: Path | None = None
    test_text: str | None = None
    if descriptor.test_file:
        test_path = config.resolve_source(descriptor.test_file)
        test_text = await asyncio.to_thread(
            read_artifact, test_path, subject=descriptor.name, role="test"
        )

    fixtures: dict[str, str] = {}
    for fixture in descriptor.fixtures:
        name = PurePath(fixture).name
        if name in fixtures:
            raise ScaffoldError(
                f"Two fixtures share the file name {name}",
                subject=descriptor.name,
                step="read fixture artifact",
            )
        fixtures[name] = await asyncio.to_thread(
            read_artifact, config.resolve_source(fixture), subject=descriptor.name, role="fixture"
        )

    return ResolvedArtifacts(
        descriptor=descriptor,
        source_path=source_path,
        source_text=source_text,
        test_path=test_path,
        test_text=test_text,
        fixtures=fixtures,
    )
