"""CLI module for inline-tests."""

from __future__ import annotations

import argparse
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inline_tests.config import InlineConfig, load_config
from inline_tests.errors import ConfigFileError
from inline_tests.logging import configure_logging
from inline_tests.stripping import FileStatus, StripReport, strip_paths
from inline_tests.testing import discover_paths


STRIP_DESCRIPTION = "Remove inline tests from source files for production builds"


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the inline-tests CLI."""
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if args.command == "strip":
        raise SystemExit(_run_strip(args, parser=args.subparser))
    if args.command == "collect":
        raise SystemExit(_run_collect(args))

    parser.print_help()
    raise SystemExit(0)


def strip_main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the standalone ``inline-tests-strip`` command."""
    parser = argparse.ArgumentParser(prog="inline-tests-strip", description=STRIP_DESCRIPTION)
    _add_strip_arguments(parser)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    raise SystemExit(_run_strip(args, parser=parser))


def _add_strip_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("directories", nargs="*", help="Directories to strip")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which files would change without writing anything",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase output (-vv for debug)"
    )
    parser.add_argument(
        "--validator",
        choices=["command", "balance"],
        help="Syntax check for stripped output (default: from config, else command)",
    )
    parser.add_argument(
        "--validator-command",
        type=str,
        help="External syntax checker; the file path is appended (default: 'php -l')",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inline-tests", description="Inline test tooling")
    subparsers = parser.add_subparsers(dest="command")

    strip_parser = subparsers.add_parser("strip", help=STRIP_DESCRIPTION)
    _add_strip_arguments(strip_parser)
    strip_parser.set_defaults(subparser=strip_parser)

    collect_parser = subparsers.add_parser("collect", help="List discovered inline tests")
    collect_parser.add_argument("directories", nargs="+", help="Directories to scan")
    collect_parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase output (-vv for debug)"
    )

    return parser


def _load(console: Console) -> InlineConfig | None:
    try:
        return load_config(Path.cwd())
    except ConfigFileError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return None


def _strip_config(args: argparse.Namespace, config: InlineConfig) -> InlineConfig:
    updates: dict[str, object] = {}
    if args.validator:
        updates["validator"] = args.validator
    if args.validator_command:
        updates["validator_command"] = shlex.split(args.validator_command)
    return config.model_copy(update=updates) if updates else config


def _run_strip(args: argparse.Namespace, *, parser: argparse.ArgumentParser) -> int:
    console = Console()
    configure_logging(args.verbose)

    if not args.directories:
        parser.print_usage()
        console.print("[red]Error: at least one directory is required.[/red]")
        return 1

    config = _load(console)
    if config is None:
        return 2
    config = _strip_config(args, config)

    if args.dry_run:
        console.print("[yellow]Dry run: no files will be modified.[/yellow]")

    report = strip_paths(
        [Path(d) for d in args.directories],
        config=config,
        dry_run=args.dry_run,
    )
    _print_report(console, report, verbose=args.verbose > 0)
    return report.exit_code


def _print_report(console: Console, report: StripReport, *, verbose: bool) -> None:
    for warning in report.warnings:
        console.print(f"[yellow]Warning: {escape(warning)}[/yellow]")

    for outcome in report.outcomes:
        if outcome.status is FileStatus.STRIPPED:
            console.print(f"[green]Stripped[/green] {escape(str(outcome.path))}")
        elif outcome.status is FileStatus.WOULD_STRIP:
            console.print(f"Would strip {escape(str(outcome.path))}")
        elif outcome.status is FileStatus.SKIPPED:
            console.print(
                f"[yellow]Skipped[/yellow] {escape(str(outcome.path))}: {escape(outcome.detail)}"
            )
        elif outcome.status is FileStatus.UNCHANGED and verbose:
            console.print(f"[dim]Unchanged {escape(str(outcome.path))}[/dim]")

    if report.failures:
        console.print()
        console.print(f"[red]{len(report.failures)} file(s) failed validation:[/red]")
        for outcome in report.failures:
            console.print(
                f"  - {escape(str(outcome.path))} (candidate kept at {escape(str(outcome.quarantined))})"
            )
            if verbose and outcome.detail:
                console.print(f"    {outcome.detail}", markup=False)

    counts = report.counts()
    changed = counts[FileStatus.WOULD_STRIP] if report.dry_run else counts[FileStatus.STRIPPED]
    verb = "would be stripped" if report.dry_run else "stripped"
    console.print(
        f"{len(report.outcomes)} file(s) processed, {changed} {verb}, "
        f"{counts[FileStatus.UNCHANGED]} unchanged"
    )


def _run_collect(args: argparse.Namespace) -> int:
    console = Console()
    configure_logging(args.verbose)

    config = _load(console)
    if config is None:
        return 2

    table = Table(title="Inline tests")
    table.add_column("Group")
    table.add_column("Test")
    table.add_column("Data source")
    table.add_column("Factory")
    table.add_column("Status")

    total = 0
    for group in discover_paths([Path(d) for d in args.directories], config):
        for unit in group.units:
            total += 1
            status = f"[red]{escape(str(unit.error))}[/red]" if unit.error else "[green]ok[/green]"
            table.add_row(
                group.name,
                unit.name,
                unit.data_source.name if unit.data_source else "",
                unit.factory.name if unit.factory else "",
                status,
            )

    console.print(table)
    console.print(f"{total} inline test(s) collected")
    return 0
