"""Project materialization: one example, or every example of a category.

Both variants follow the same sequence and fail fast:

1. resolve the descriptor(s) through the registry,
2. read every artifact (nothing is written before this succeeds),
3. stage the base template beside the target,
4. inject the artifacts in place of the template placeholders,
5. render the README (plus optional API reference / learning guide) and the
   deploy script, and rewrite ``package.json``,
6. move the staged tree into place,
7. optionally add an entry to the shared ``SUMMARY.md``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from fhevm_scaffold.config import Config
from fhevm_scaffold.errors import ScaffoldError
from fhevm_scaffold.registry.models import ExampleDescriptor
from fhevm_scaffold.registry.registry import ExampleRegistry
from fhevm_scaffold.renderer.documents import (
    DEFAULT_FILENAMES,
    CategoryMember,
    DocumentKind,
    DocumentRenderer,
)
from fhevm_scaffold.renderer.templates import TemplateRenderer
from fhevm_scaffold.utils import dump_json, print_info, print_step, print_success, relativize

from .artifacts import ResolvedArtifacts, resolve_artifacts
from .summary import IndexEntry, SummaryIndex
from .workspace import Workspace

PACKAGE_JSON = "package.json"
DEPLOY_SCRIPT = "deploy/deploy.ts"


# ---------------------------------------------------------------------------
# Data Models
# ---------------------------------------------------------------------------

class GeneratedProject(BaseModel):
    """What a successful materialization produced."""

    identifier: str
    kind: str = Field(..., description="'example' or 'category'")
    path: Path
    files: list[str] = Field(default_factory=list, description="Written files, relative to path")
    contract_names: list[str] = Field(default_factory=list)
    summary_entry: Optional[str] = Field(
        default=None, description="Index line added to SUMMARY.md, if any"
    )


# ---------------------------------------------------------------------------
# ProjectMaterializer
# ---------------------------------------------------------------------------

class ProjectMaterializer:
    """Creates standalone Hardhat projects from registry entries.

    Usage::

        materializer = ProjectMaterializer(registry, config)
        project = await materializer.materialize_example("fhe-counter", "/tmp/out")
    """

    def __init__(
        self,
        registry: ExampleRegistry,
        config: Config,
        renderer: DocumentRenderer | None = None,
    ) -> None:
        self.registry = registry
        self.config = config
        self.renderer = renderer or DocumentRenderer(
            TemplateRenderer(), stamp_generated_at=config.stamp_generated_at
        )

    # ------------------------------------------------------------------
    # Single example
    # ------------------------------------------------------------------

    async def materialize_example(
        self,
        example_id: str,
        target_dir: str | Path | None = None,
        *,
        overwrite: bool = False,
        update_summary: bool = True,
        api_docs: bool = False,
        learning_guide: bool = False,
    ) -> GeneratedProject:
        """Generate a standalone project for *example_id*.

        Raises:
            NotFoundError: Unknown identifier (before any side effect).
            MissingArtifactError: A referenced artifact is absent or empty
                (before anything is written to *target_dir*).
            AlreadyExistsError: *target_dir* is non-empty and *overwrite* is false.
            ConflictError: Another invocation holds the target lock.
            FilesystemError: Any I/O failure while staging or committing.
        """
        print_step(1, f"Resolving example [bold]{example_id}[/bold]")
        descriptor = self.registry.get_example(example_id)
        target = (
            Path(target_dir) if target_dir is not None
            else self.config.default_example_target(example_id)
        )

        print_step(2, "Reading source artifacts")
        artifacts = await resolve_artifacts(descriptor, self.config)
        contract_name = artifacts.contract_name
        self._check_unique_names(example_id, [artifacts])
        print_info(f"contract: {artifacts.source_path} -> contracts/{artifacts.contract_filename}")
        if artifacts.test_filename:
            print_info(f"test:     {artifacts.test_path} -> test/{artifacts.test_filename}")
        for name in artifacts.fixtures:
            print_info(f"fixture:  test/{name}")

        documents = [DocumentKind.README]
        if api_docs:
            documents.append(DocumentKind.API)
        if learning_guide:
            documents.append(DocumentKind.LEARNING_GUIDE)

        async with Workspace(target, overwrite=overwrite, subject=example_id) as workspace:
            print_step(3, f"Staging base template from {self.config.template_path}")
            await workspace.copy_template(self.config.template_path, exclude=self.config.copy_exclude)
            await self._remove_placeholders(workspace)

            print_step(4, "Injecting contract and test")
            files = await self._inject(workspace, artifacts)

            print_step(5, "Rendering documentation")
            for kind in documents:
                doc = self.renderer.render(
                    descriptor, artifacts.source_text, artifacts.test_text, kind=kind
                )
                await workspace.write(doc.path, doc.content, step=f"write {doc.path}")
                files.append(doc.path.as_posix())
                print_info(f"rendered {doc.path}")
            await workspace.write(
                DEPLOY_SCRIPT, self.renderer.render_deploy_script([contract_name]),
                step="write deploy script",
            )
            files.append(DEPLOY_SCRIPT)
            await self._rewrite_package_json(
                workspace,
                name=f"fhevm-example-{example_id}",
                description=descriptor.description or descriptor.title,
                homepage_slug=example_id,
            )
            files.append(PACKAGE_JSON)

            print_step(6, f"Writing project to {relativize(target)}")
            await workspace.commit()

        project = GeneratedProject(
            identifier=example_id,
            kind="example",
            path=workspace.target,
            files=sorted(set(files)),
            contract_names=[contract_name],
        )

        if update_summary:
            print_step(7, "Updating SUMMARY.md")
            project.summary_entry = await self._add_summary_entry(
                descriptor.title, workspace.target, section_title_for(self.registry, descriptor)
            )

        print_success(f"Example '{example_id}' generated at {relativize(workspace.target)}")
        return project

    # ------------------------------------------------------------------
    # Category
    # ------------------------------------------------------------------

    async def materialize_category(
        self,
        category_id: str,
        target_dir: str | Path | None = None,
        *,
        overwrite: bool = False,
        update_summary: bool = True,
    ) -> GeneratedProject:
        """Generate one project holding every example of *category_id*.

        Every member's artifacts are read before anything is staged, so a
        single missing artifact aborts the whole category.
        """
        print_step(1, f"Resolving category [bold]{category_id}[/bold]")
        category = self.registry.get_category(category_id)
        members = self.registry.get_examples_in_category(category_id)
        target = (
            Path(target_dir) if target_dir is not None
            else self.config.default_category_target(category_id)
        )

        print_step(2, f"Reading artifacts of {len(members)} examples")
        resolved = [await resolve_artifacts(member, self.config) for member in members]
        self._check_unique_names(category_id, resolved)

        async with Workspace(target, overwrite=overwrite, subject=category_id) as workspace:
            print_step(3, f"Staging base template from {self.config.template_path}")
            await workspace.copy_template(self.config.template_path, exclude=self.config.copy_exclude)
            await self._remove_placeholders(workspace)

            print_step(4, "Injecting contracts and tests")
            files: list[str] = []
            for artifacts in resolved:
                files.extend(await self._inject(workspace, artifacts))

            print_step(5, "Rendering category README and deploy script")
            doc = self.renderer.render_category(
                category,
                [
                    CategoryMember(
                        descriptor=a.descriptor,
                        contract_name=a.contract_name,
                        test_filename=a.test_filename,
                        description=a.description,
                    )
                    for a in resolved
                ],
            )
            await workspace.write(doc.path, doc.content, step="write category README")
            files.append(DEFAULT_FILENAMES[DocumentKind.CATEGORY_README])
            contract_names = [a.contract_name for a in resolved]
            await workspace.write(
                DEPLOY_SCRIPT, self.renderer.render_deploy_script(contract_names),
                step="write deploy script",
            )
            files.append(DEPLOY_SCRIPT)
            await self._rewrite_package_json(
                workspace,
                name=f"fhevm-category-{category_id}",
                description=category.description or category.title,
                homepage_slug=f"category-{category_id}",
            )
            files.append(PACKAGE_JSON)

            print_step(6, f"Writing project to {relativize(target)}")
            await workspace.commit()

        project = GeneratedProject(
            identifier=category_id,
            kind="category",
            path=workspace.target,
            files=sorted(set(files)),
            contract_names=contract_names,
        )

        if update_summary:
            print_step(7, "Updating SUMMARY.md")
            project.summary_entry = await self._add_summary_entry(
                category.title, workspace.target, category.title
            )

        print_success(
            f"Category '{category_id}' generated at {relativize(workspace.target)} "
            f"({len(contract_names)} contracts)"
        )
        return project

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _remove_placeholders(self, workspace: Workspace) -> None:
        for placeholder in self.config.placeholder_files:
            if await workspace.remove(placeholder):
                print_info(f"removed placeholder {placeholder}")

    async def _inject(self, workspace: Workspace, artifacts: ResolvedArtifacts) -> list[str]:
        """Write the contract, test and fixtures into the staged project."""
        written: list[str] = []
        contract_rel = f"contracts/{artifacts.contract_filename}"
        await workspace.write(contract_rel, artifacts.source_text, step="inject contract")
        written.append(contract_rel)
        if artifacts.test_text is not None and artifacts.test_filename:
            test_rel = f"test/{artifacts.test_filename}"
            await workspace.write(test_rel, artifacts.test_text, step="inject test")
            written.append(test_rel)
        for name, text in artifacts.fixtures.items():
            fixture_rel = f"test/{name}"
            await workspace.write(fixture_rel, text, step="inject fixture")
            written.append(fixture_rel)
        return written

    async def _rewrite_package_json(
        self,
        workspace: Workspace,
        *,
        name: str,
        description: str,
        homepage_slug: str,
    ) -> None:
        """Rename the staged ``package.json``; create a minimal one if absent."""
        raw = workspace.read(PACKAGE_JSON)
        data: dict[str, Any]
        if raw is None:
            data = {"version": "1.0.0", "license": "BSD-3-Clause-Clear"}
        else:
            try:
                data = json.loads(raw)
            except ValueError as exc:
                raise ScaffoldError(
                    f"Base template package.json is not valid JSON: {exc}",
                    subject=workspace.subject,
                    step="update package.json",
                ) from exc
        data["name"] = name
        data["description"] = description
        data["homepage"] = f"{self.config.homepage_base.rstrip('/')}/{homepage_slug}"
        await workspace.write(PACKAGE_JSON, dump_json(data), step="update package.json")

    def _check_unique_names(self, subject: str, resolved: list[ResolvedArtifacts]) -> None:
        """No two injected files may land on the same project path."""
        seen: dict[str, str] = {}
        for artifacts in resolved:
            owner = artifacts.descriptor.name
            for path in artifacts.output_paths():
                previous = seen.get(path)
                if previous == owner:
                    raise ScaffoldError(
                        f"Example '{owner}' produces {path} more than once",
                        subject=subject,
                        step="inject artifacts",
                    )
                if previous is not None:
                    raise ScaffoldError(
                        f"Examples '{previous}' and '{owner}' both produce {path}",
                        subject=subject,
                        step="inject artifacts",
                    )
                seen[path] = owner

    async def _add_summary_entry(self, title: str, project_dir: Path, section: str) -> str | None:
        summary = SummaryIndex(self.config.summary_path)
        entry = IndexEntry(
            title=title,
            link=_link_from(summary.path, project_dir / DEFAULT_FILENAMES[DocumentKind.README]),
            section=section,
        )
        if await summary.add(entry):
            print_info(f"added '{entry.line}'")
            return entry.line
        print_info("entry already present in SUMMARY.md")
        return None


def section_title_for(registry: ExampleRegistry, descriptor: ExampleDescriptor) -> str:
    """The SUMMARY.md heading an example belongs under."""
    if descriptor.category in registry.category_ids():
        return registry.get_category(descriptor.category).title
    return descriptor.category


def _link_from(summary_path: Path, destination: Path) -> str:
    """A POSIX link to *destination* relative to the directory of *summary_path*."""
    start = summary_path.absolute().parent
    return Path(os.path.relpath(destination.absolute(), start)).as_posix()
