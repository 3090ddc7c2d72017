"""Shared utility functions for the scaffolding tool.

Provides the Rich console used for all operator-facing output, name
helpers (slugs, PascalCase), JSON I/O, and small file-system helpers.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def slugify(name: str) -> str:
    """Convert an arbitrary title to a safe, hyphenated file name.

    Examples::

        slugify("FHE Counter") -> "fhe-counter"
        slugify("  FHE.allow() Pattern ") -> "fhe-allow-pattern"
    """
    result = re.sub(r"[^a-z0-9]+", "-", name.strip().lower())
    return result.strip("-")


def to_pascal(name: str) -> str:
    """Convert ``some-thing``, ``some_thing`` or ``some thing`` to ``SomeThing``.

    Words that already contain capitals keep their inner casing, so
    ``"fhe-allowThis-example"`` becomes ``"FheAllowThisExample"``.
    """
    parts = re.split(r"[-_\s.]+", name)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)


def truncate(text: str, width: int = 80) -> str:
    """Shorten *text* to *width* characters, marking the cut with ``...``."""
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)].rstrip() + "..."


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


def dump_json(data: dict[str, Any] | list[Any]) -> str:
    """Serialise *data* the way generated ``package.json`` files are laid out."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def write_text(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write *content*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def is_empty_dir(path: Path) -> bool:
    """Return ``True`` if *path* is a directory with no entries."""
    return path.is_dir() and not any(path.iterdir())


def relativize(path: Path, base: Path | None = None) -> str:
    """Render *path* relative to *base* (default: cwd) when possible."""
    base = base or Path.cwd()
    try:
        return str(path.resolve().relative_to(base.resolve()))
    except ValueError:
        return str(path)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------

_quiet = False


def set_quiet(quiet: bool) -> None:
    """Silence step-level progress lines (errors and summaries still print)."""
    global _quiet
    _quiet = quiet


def print_header(title: str) -> None:
    """Print a full-width rule announcing a command."""
    console.print()
    console.print(Rule(f"[bold bright_cyan] {title} [/bold bright_cyan]", style="bright_cyan"))


def print_step(number: int, message: str) -> None:
    """Print a numbered step line in cyan."""
    if _quiet:
        return
    console.print(f"\n[cyan]Step {number}:[/cyan] {message}")


def print_info(message: str) -> None:
    """Print a dim informational line."""
    if _quiet:
        return
    console.print(f"  [dim]{escape(message)}[/dim]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(escape(key), escape(str(value)))

    console.print(table)
    console.print()
