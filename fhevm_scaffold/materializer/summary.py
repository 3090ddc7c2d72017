"""Idempotent maintenance of the shared ``SUMMARY.md`` index.

The index is a flat list of markdown links grouped under ``## <section>``
headings.  An entry is identified by its link target: adding an entry whose
target already appears anywhere in the file is a no-op, so re-running a
command never duplicates a line.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from fhevm_scaffold.errors import FilesystemError
from fhevm_scaffold.utils import write_text

SUMMARY_PREAMBLE = "# Summary\n\n## Table of Contents\n\n"


class IndexEntry(BaseModel):
    """One link line in the index."""
    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    section: str

    @property
    def line(self) -> str:
        return f"- [{self.title}]({self.link})"

    @property
    def marker(self) -> str:
        return f"]({self.link})"


def insert_entries(text: str, entries: Iterable[IndexEntry]) -> tuple[str, list[IndexEntry]]:
    """Return *text* with every new entry inserted, plus the entries added.

    Entries go after the last link already under their section heading; a
    missing heading is appended at the end of the document.
    """
    source = text if text.strip() else SUMMARY_PREAMBLE
    lines = source.rstrip("\n").split("\n")
    added: list[IndexEntry] = []

    for entry in entries:
        if any(entry.marker in line for line in lines):
            continue
        heading = f"## {entry.section}"
        try:
            start = lines.index(heading)
        except ValueError:
            if lines and lines[-1].strip():
                lines.append("")
            lines.extend([heading, "", entry.line])
            added.append(entry)
            continue

        insert_at = start + 1
        cursor = start + 1
        while cursor < len(lines) and not lines[cursor].startswith("## "):
            if lines[cursor].startswith("- "):
                insert_at = cursor + 1
            cursor += 1
        if insert_at == start + 1:
            # Empty section: keep a blank line between heading and list.
            if insert_at < len(lines) and not lines[insert_at].strip():
                insert_at += 1
            else:
                lines.insert(insert_at, "")
                insert_at += 1
        lines.insert(insert_at, entry.line)
        if insert_at + 1 < len(lines) and lines[insert_at + 1].startswith("## "):
            lines.insert(insert_at + 1, "")
        added.append(entry)

    return "\n".join(lines) + "\n", added


class SummaryIndex:
    """The ``SUMMARY.md`` file at *path*.

    Usage::

        index = SummaryIndex(config.summary_path)
        await index.add_many(entries)   # one read, one write
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> str:
        """Return the current index text, or the preamble if the file is absent."""
        if not self.path.exists():
            return SUMMARY_PREAMBLE
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FilesystemError(f"Cannot read {self.path}: {exc}", step="update summary") from exc

    def contains(self, link: str) -> bool:
        return f"]({link})" in self.read()

    async def add(self, entry: IndexEntry) -> bool:
        """Add a single entry; return ``False`` if it was already present."""
        added = await self.add_many([entry])
        return bool(added)

    async def add_many(self, entries: Iterable[IndexEntry]) -> list[IndexEntry]:
        """Add every entry not yet present with a single write.

        The file is left untouched when nothing new was added.
        """
        existed = self.path.exists()
        current = await asyncio.to_thread(self.read)
        updated, added = insert_entries(current, entries)
        if added or not existed:
            try:
                await asyncio.to_thread(write_text, self.path, updated)
            except OSError as exc:
                raise FilesystemError(
                    f"Cannot write {self.path}: {exc}", step="update summary"
                ) from exc
        return added
