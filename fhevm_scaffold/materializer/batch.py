"""Accumulator for best-effort batch runs.

A batch never handles errors inline: each item is recorded as an
:class:`ItemOutcome` and the final tally, table and exit status are derived
from the accumulated outcomes alone.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fhevm_scaffold.utils import console


class ItemStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


class ItemOutcome(BaseModel):
    """Result of processing one identifier."""

    identifier: str
    status: ItemStatus
    output: Optional[Path] = None
    error: Optional[str] = None


class BatchReport(BaseModel):
    """Ordered outcomes of one batch run."""

    title: str = Field(default="Batch")
    outcomes: list[ItemOutcome] = Field(default_factory=list)
    registry_valid: bool = Field(default=True)
    errors: list[str] = Field(default_factory=list, description="Failures outside any single item")

    # -- Recording ---------------------------------------------------------

    def record_success(self, identifier: str, output: Path | None = None) -> ItemOutcome:
        return self._record(ItemOutcome(identifier=identifier, status=ItemStatus.OK, output=output))

    def record_failure(self, identifier: str, error: BaseException | str) -> ItemOutcome:
        return self._record(
            ItemOutcome(identifier=identifier, status=ItemStatus.FAILED, error=str(error))
        )

    def record_skipped(self, identifier: str, reason: str = "interrupted") -> ItemOutcome:
        return self._record(
            ItemOutcome(identifier=identifier, status=ItemStatus.SKIPPED, error=reason)
        )

    def _record(self, outcome: ItemOutcome) -> ItemOutcome:
        self.outcomes.append(outcome)
        return outcome

    # -- Derived views -----------------------------------------------------

    def _with(self, status: ItemStatus) -> list[ItemOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def succeeded(self) -> list[ItemOutcome]:
        return self._with(ItemStatus.OK)

    @property
    def failed(self) -> list[ItemOutcome]:
        return self._with(ItemStatus.FAILED)

    @property
    def skipped(self) -> list[ItemOutcome]:
        return self._with(ItemStatus.SKIPPED)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def interrupted(self) -> bool:
        return bool(self.skipped)

    @property
    def exit_code(self) -> int:
        """``0`` only when the registry was valid and every step succeeded."""
        if not self.registry_valid or self.errors or self.failed or self.skipped:
            return 1
        return 0

    def tally(self) -> str:
        text = f"{len(self.succeeded)} succeeded, {len(self.failed)} failed"
        if self.skipped:
            text += f", {len(self.skipped)} skipped"
        return text

    # -- Display -----------------------------------------------------------

    def print_summary(self) -> None:
        """Pretty-print the outcome table and the final tally."""
        table = Table(title=self.title, show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Identifier", no_wrap=True)
        table.add_column("Status")
        table.add_column("Output / Error")

        styles = {ItemStatus.OK: "green", ItemStatus.FAILED: "red", ItemStatus.SKIPPED: "yellow"}
        for index, outcome in enumerate(self.outcomes, start=1):
            style = styles[outcome.status]
            detail = str(outcome.output) if outcome.output is not None else (outcome.error or "")
            table.add_row(
                str(index),
                escape(outcome.identifier),
                f"[{style}]{outcome.status.value}[/{style}]",
                escape(detail),
            )
        console.print(table)

        ok = self.exit_code == 0
        console.print(
            Panel(
                f"[bold]{self.tally()}[/bold] (total {self.total})",
                title=self.title,
                border_style="green" if ok else "yellow",
            )
        )

        if self.errors:
            console.print("\n[red bold]Errors:[/red bold]")
            for err in self.errors:
                console.print(f"  [red]- {escape(err)}[/red]")
