"""Documentation-only generation (``generate-docs``).

Renders the GitBook page of an example straight into the docs directory
without scaffolding a project.  The single-example path fails fast; the
category and ``--all`` paths are best-effort batches that record each
outcome in a :class:`BatchReport` and update ``SUMMARY.md`` once at the end.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from pathlib import Path

from fhevm_scaffold.config import Config
from fhevm_scaffold.errors import FilesystemError, ScaffoldError
from fhevm_scaffold.registry.models import ExampleDescriptor
from fhevm_scaffold.registry.registry import ExampleRegistry
from fhevm_scaffold.renderer.documents import DocumentKind, DocumentRenderer
from fhevm_scaffold.renderer.templates import TemplateRenderer
from fhevm_scaffold.utils import (
    print_error,
    print_info,
    print_step,
    print_success,
    print_warning,
    relativize,
)

from .artifacts import resolve_artifacts
from .batch import BatchReport
from .project import section_title_for
from .summary import IndexEntry, SummaryIndex


class DocsGenerator:
    """Writes GitBook pages for registered examples."""

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
        self.summary = SummaryIndex(config.summary_path)

    # ------------------------------------------------------------------
    # Single example
    # ------------------------------------------------------------------

    async def generate(
        self,
        example_id: str,
        output: str | Path | None = None,
        *,
        update_summary: bool = True,
    ) -> Path:
        """Render and write the GitBook page for *example_id*.

        Returns the path written.  Errors propagate unchanged.
        """
        descriptor = self.registry.get_example(example_id)
        print_info(f"Generating documentation for: {descriptor.title}")

        artifacts = await resolve_artifacts(descriptor, self.config)
        target = Path(output) if output is not None else self.config.default_doc_output(example_id)
        doc = self.renderer.render(
            descriptor,
            artifacts.source_text,
            artifacts.test_text,
            kind=DocumentKind.GITBOOK,
            path=target,
        )
        try:
            await doc.write()
        except OSError as exc:
            raise FilesystemError(
                f"Cannot write {target}: {exc}", subject=example_id, step="write documentation"
            ) from exc
        print_success(f"Documentation written to: {relativize(target)}")

        if update_summary:
            entry = self.summary_entry(descriptor, target)
            if await self.summary.add(entry):
                print_info(f"SUMMARY.md: added '{entry.line}'")
            else:
                print_info("Example already in SUMMARY.md")
        return target

    def summary_entry(self, descriptor: ExampleDescriptor, output: Path) -> IndexEntry:
        """The index line linking to *output* from ``SUMMARY.md``."""
        start = self.summary.path.absolute().parent
        link = Path(os.path.relpath(output.absolute(), start)).as_posix()
        return IndexEntry(
            title=descriptor.title,
            link=link,
            section=section_title_for(self.registry, descriptor),
        )

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def generate_all(
        self,
        *,
        update_summary: bool = True,
        stop: asyncio.Event | None = None,
    ) -> BatchReport:
        """Generate docs for every registered example, continuing past failures."""
        report = await self._run_batch(
            self.registry.example_ids(),
            title="Documentation: all examples",
            update_summary=update_summary,
            stop=stop,
        )
        report.registry_valid = self.registry.validate_configuration().valid
        return report

    async def generate_category(
        self,
        category_id: str,
        *,
        update_summary: bool = True,
        stop: asyncio.Event | None = None,
    ) -> BatchReport:
        """Generate docs for every member of *category_id*.

        Raises:
            NotFoundError: If the category itself is unknown.
        """
        category = self.registry.get_category(category_id)
        return await self._run_batch(
            list(category.examples),
            title=f"Documentation: {category.title}",
            update_summary=update_summary,
            stop=stop,
        )

    async def _run_batch(
        self,
        identifiers: Sequence[str],
        *,
        title: str,
        update_summary: bool,
        stop: asyncio.Event | None,
    ) -> BatchReport:
        report = BatchReport(title=title)
        entries: list[IndexEntry] = []
        total = len(identifiers)

        for index, example_id in enumerate(identifiers, start=1):
            if stop is not None and stop.is_set():
                report.record_skipped(example_id)
                continue
            print_step(index, f"[{index}/{total}] {example_id}")
            try:
                output = await self.generate(example_id, update_summary=False)
            except ScaffoldError as exc:
                print_warning(f"Failed to generate docs for {example_id}: {exc}")
                report.record_failure(example_id, exc)
                continue
            report.record_success(example_id, output)
            entries.append(self.summary_entry(self.registry.get_example(example_id), output))

        if report.interrupted:
            print_warning(f"Interrupted: {len(report.skipped)} examples not processed")

        if update_summary and entries:
            try:
                added = await self.summary.add_many(entries)
            except ScaffoldError as exc:
                print_error(str(exc))
                report.errors.append(str(exc))
            else:
                print_info(f"SUMMARY.md: {len(added)} new entries")
        return report
