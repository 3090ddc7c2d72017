"""Command-line entry point: ``fhevm-scaffold``.

Sub-commands::

    fhevm-scaffold list [--category C] [--difficulty D] [--tag T] [--search Q]
    fhevm-scaffold validate
    fhevm-scaffold create-example <id> [target] [--force] [--no-summary]
    fhevm-scaffold create-category <id> [target] [--force] [--no-summary]
    fhevm-scaffold generate-docs <id> [--output PATH] [--no-summary]
    fhevm-scaffold generate-docs --all | --category C

Exit status is 0 on success, 1 on any scaffolding failure (unknown
identifier, missing artifact, filesystem error, invalid registry, a failed
batch item) and 2 on usage errors.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fhevm_scaffold import __version__
from fhevm_scaffold.config import Config
from fhevm_scaffold.errors import ScaffoldError
from fhevm_scaffold.materializer import BatchReport, DocsGenerator, ProjectMaterializer
from fhevm_scaffold.registry import Difficulty, ExampleRegistry, load_registry
from fhevm_scaffold.utils import (
    console,
    print_error,
    print_header,
    print_success,
    print_summary_table,
    relativize,
    set_quiet,
    truncate,
)

DESCRIPTION_WIDTH = 80


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _examples_epilog(config: Config) -> str:
    """List the known example identifiers for ``--help``."""
    try:
        registry = load_registry(config.registry_file, validate=False)
    except ScaffoldError as exc:
        return f"Example registry unavailable: {exc}\n"
    lines = ["Available examples:"]
    for example in registry.all_examples():
        lines.append(f"  {example.name}")
        lines.append(f"    {truncate(example.description or example.title, DESCRIPTION_WIDTH)}")
    lines.append("")
    lines.append("Examples:")
    lines.append("  fhevm-scaffold create-example fhe-counter ./output/fhe-counter")
    lines.append("  fhevm-scaffold create-category basic")
    lines.append("  fhevm-scaffold generate-docs --all")
    return "\n".join(lines) + "\n"


def build_parser(config: Config | None = None) -> argparse.ArgumentParser:
    """Build the argument parser; the epilog lists *config*'s registry."""
    epilog = _examples_epilog(config or Config.from_env())

    parser = argparse.ArgumentParser(
        prog="fhevm-scaffold",
        description="Generate standalone FHEVM example projects and their documentation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--source-root",
        type=Path,
        default=None,
        help="Directory the registry's contract/test paths are relative to (default: .)",
    )
    parser.add_argument(
        "--template",
        type=Path,
        default=None,
        help="Base project template directory (default: bundled Hardhat template)",
    )
    parser.add_argument(
        "--registry",
        type=Path,
        default=None,
        help="Example registry JSON file (default: bundled registry)",
    )
    parser.add_argument(
        "--output-root",
        type=Path,
        default=None,
        help="Parent directory for projects when no target is given (default: ./output)",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print errors and final results",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    p_list = sub.add_parser(
        "list",
        help="List registered examples",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p_list.add_argument("--category", help="Only examples in this category")
    p_list.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        help="Only examples at this difficulty",
    )
    p_list.add_argument("--tag", help="Only examples carrying this tag")
    p_list.add_argument("--search", help="Case-insensitive text search")

    sub.add_parser(
        "validate",
        help="Check the registry for integrity errors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )

    p_example = sub.add_parser(
        "create-example",
        help="Generate a standalone project for one example",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p_example.add_argument("example", help="Example identifier")
    p_example.add_argument(
        "target",
        nargs="?",
        type=Path,
        default=None,
        help="Output directory (default: <output-root>/fhevm-example-<id>)",
    )
    _add_project_flags(p_example)
    p_example.add_argument("--api-docs", action="store_true", help="Also write API.md")
    p_example.add_argument(
        "--learning-guide", action="store_true", help="Also write LEARNING_GUIDE.md"
    )

    p_category = sub.add_parser(
        "create-category",
        help="Generate one project containing every example of a category",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p_category.add_argument("category", help="Category identifier")
    p_category.add_argument(
        "target",
        nargs="?",
        type=Path,
        default=None,
        help="Output directory (default: <output-root>/fhevm-category-<id>)",
    )
    _add_project_flags(p_category)

    p_docs = sub.add_parser(
        "generate-docs",
        help="Render GitBook documentation without scaffolding a project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p_docs.add_argument("example", nargs="?", help="Example identifier")
    p_docs.add_argument("--output", "-o", type=Path, default=None, help="Output file path")
    p_docs.add_argument(
        "--no-summary", action="store_true", help="Skip updating SUMMARY.md"
    )
    p_docs.add_argument("--all", action="store_true", help="Generate docs for every example")
    p_docs.add_argument(
        "--category", default=None, help="Generate docs for every example of a category"
    )

    return parser


def _add_project_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--force", action="store_true", help="Replace the target directory if it is not empty"
    )
    p.add_argument("--no-summary", action="store_true", help="Skip updating SUMMARY.md")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_list(registry: ExampleRegistry, args: argparse.Namespace) -> int:
    examples = registry.all_examples()
    if args.category:
        wanted = {e.name for e in registry.get_examples_in_category(args.category)}
        examples = [e for e in examples if e.name in wanted]
    if args.difficulty:
        wanted = {e.name for e in registry.get_examples_by_difficulty(args.difficulty)}
        examples = [e for e in examples if e.name in wanted]
    if args.tag:
        wanted = {e.name for e in registry.get_examples_by_tag(args.tag)}
        examples = [e for e in examples if e.name in wanted]
    if args.search:
        wanted = {e.name for e in registry.search_examples(args.search)}
        examples = [e for e in examples if e.name in wanted]

    table = Table(title=f"FHEVM Examples ({len(examples)})", show_lines=False)
    table.add_column("ID", style="green", no_wrap=True)
    table.add_column("Title")
    table.add_column("Category", style="cyan")
    table.add_column("Difficulty")
    table.add_column("Description", style="dim")
    for example in examples:
        table.add_row(
            escape(example.name),
            escape(example.title),
            escape(example.category),
            example.difficulty.value,
            escape(truncate(example.description, 60)),
        )
    console.print(table)

    summary = registry.summary()
    print_summary_table(
        {
            "Examples": str(summary.total_examples),
            "Categories": str(summary.total_categories),
            **{f"Difficulty: {k}": str(v) for k, v in summary.per_difficulty.items()},
        },
        title="Registry",
    )
    return 0


def cmd_validate(registry: ExampleRegistry, config: Config) -> int:
    report = registry.validate_configuration()
    if report.valid:
        summary = registry.summary()
        print_success(
            f"Registry {relativize(config.registry_file)} is valid: "
            f"{summary.total_examples} examples, {summary.total_categories} categories"
        )
        return 0
    print_error(f"Registry {relativize(config.registry_file)} has {len(report.errors)} problem(s)")
    for problem in report.errors:
        console.print(f"  [red]- {escape(problem)}[/red]")
    return 1


async def cmd_create_example(
    registry: ExampleRegistry, config: Config, args: argparse.Namespace
) -> int:
    print_header(f"Create example: {args.example}")
    materializer = ProjectMaterializer(registry, config)
    project = await materializer.materialize_example(
        args.example,
        args.target,
        overwrite=args.force,
        update_summary=not args.no_summary,
        api_docs=args.api_docs,
        learning_guide=args.learning_guide,
    )
    _print_next_steps(project.path)
    return 0


async def cmd_create_category(
    registry: ExampleRegistry, config: Config, args: argparse.Namespace
) -> int:
    print_header(f"Create category: {args.category}")
    materializer = ProjectMaterializer(registry, config)
    project = await materializer.materialize_category(
        args.category,
        args.target,
        overwrite=args.force,
        update_summary=not args.no_summary,
    )
    _print_next_steps(project.path)
    return 0


async def cmd_generate_docs(
    registry: ExampleRegistry, config: Config, args: argparse.Namespace
) -> int:
    generator = DocsGenerator(registry, config)
    update_summary = not args.no_summary

    if args.all or args.category:
        title = "all examples" if args.all else f"category {args.category}"
        print_header(f"Generate docs: {title}")

        async def run(stop: asyncio.Event) -> BatchReport:
            if args.all:
                return await generator.generate_all(update_summary=update_summary, stop=stop)
            return await generator.generate_category(
                args.category, update_summary=update_summary, stop=stop
            )

        report = await run_interruptible(run)
        report.print_summary()
        return report.exit_code

    print_header(f"Generate docs: {args.example}")
    await generator.generate(args.example, args.output, update_summary=update_summary)
    return 0


def _print_next_steps(project_path: Path) -> None:
    console.print(
        Panel(
            f"cd {escape(relativize(project_path))}\n"
            "npm install\n"
            "npm run compile\n"
            "npm run test",
            title="Next steps",
            border_style="green",
        )
    )


# ---------------------------------------------------------------------------
# Signal handling
# ---------------------------------------------------------------------------


async def run_interruptible(
    batch: Callable[[asyncio.Event], Awaitable[BatchReport]],
) -> BatchReport:
    """Run *batch* with SIGINT/SIGTERM setting its stop event.

    The batch checks the event between items, so an interrupted run still
    finishes the item in progress and reports the rest as skipped.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []

    def _request_stop(sig: signal.Signals) -> None:
        console.print(f"\n[yellow]Received {sig.name}; stopping after the current example[/yellow]")
        stop.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop, sig)
        except (NotImplementedError, RuntimeError):
            # Event loops without signal support (Windows, non-main thread)
            # fall back to the default KeyboardInterrupt behaviour.
            continue
        installed.append(sig)

    try:
        return await batch(stop)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _help_config(argv: Sequence[str] | None) -> Config:
    """Config for the help epilog, honouring a ``--registry`` given on the command line."""
    pre = argparse.ArgumentParser(prog="fhevm-scaffold", add_help=False, allow_abbrev=False)
    pre.add_argument("--registry", type=Path, default=None)
    known, _ = pre.parse_known_args(argv)
    return Config.from_env(registry_path=known.registry)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point; returns the process exit status."""
    parser = build_parser(_help_config(argv))
    args = parser.parse_args(argv)

    if args.command == "generate-docs":
        selected = sum([bool(args.example), args.all, bool(args.category)])
        if selected != 1:
            parser.error("generate-docs needs exactly one of <example>, --all, --category")
        if args.output is not None and args.example is None:
            parser.error("--output only applies to a single example")

    set_quiet(args.quiet)
    config = Config.from_env(
        source_root=args.source_root,
        base_template_dir=args.template,
        registry_path=args.registry,
        output_root=args.output_root,
    )

    try:
        registry = load_registry(config.registry_file, validate=False)
        if args.command == "validate":
            return cmd_validate(registry, config)
        registry.ensure_valid()

        if args.command == "list":
            return cmd_list(registry, args)
        if args.command == "create-example":
            return asyncio.run(cmd_create_example(registry, config, args))
        if args.command == "create-category":
            return asyncio.run(cmd_create_category(registry, config, args))
        if args.command == "generate-docs":
            return asyncio.run(cmd_generate_docs(registry, config, args))
    except ScaffoldError as exc:
        print_error(str(exc))
        return 1
    except KeyboardInterrupt:
        print_error("Interrupted")
        return 130

    parser.error(f"unknown command {args.command!r}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
