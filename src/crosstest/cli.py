"""Command-line interface for crosstest."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from crosstest.cartesian import plan_invocations
from crosstest.config import CrosstestSettings, get_settings
from crosstest.errors import CartesianError
from crosstest.testing.discovery import collect
from crosstest.testing.resources import get_registry
from crosstest.testing.runner import Runner


class CLIApplication:
    """Top-level command router."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.parser = argparse.ArgumentParser(
            prog="crosstest",
            description="Run Cartesian parameterized tests.",
        )
        subparsers = self.parser.add_subparsers(dest="command", required=True)

        run = subparsers.add_parser("run", help="Discover and run cross_* test files.")
        run.add_argument("path", nargs="?", default=None, help="File or directory (default: current directory)")
        run.add_argument("-c", "--concurrency", type=int, default=None, help="Test methods to run at once")
        run.add_argument("--maxfail", type=int, default=None, help="Stop after N failing test methods")
        run.add_argument("--timeout", type=float, default=None, help="Per test method timeout in seconds")
        verbosity = run.add_mutually_exclusive_group()
        verbosity.add_argument("-q", "--quiet", action="store_const", const=-1, dest="verbosity")
        verbosity.add_argument("-v", "--verbose", action="store_const", const=1, dest="verbosity")

        listing = subparsers.add_parser("list", help="Show every invocation name without running tests.")
        listing.add_argument("path", nargs="?", default=None, help="File or directory (default: current directory)")

    def run(self, argv: Sequence[str] | None = None) -> int:
        load_dotenv(Path.cwd() / ".env")
        args = self.parser.parse_args(argv)
        settings = get_settings(
            concurrency=getattr(args, "concurrency", None),
            maxfail=getattr(args, "maxfail", None),
            timeout=getattr(args, "timeout", None),
            verbosity=getattr(args, "verbosity", None),
        )
        configure_logging(settings.log_level, self.console)
        if args.command == "list":
            return ListCommand(self.console, args, settings).run()
        return RunCommand(self.console, args, settings).run()


def configure_logging(level: str, console: Console) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


class RunCommand:
    """Pipeline driver for `crosstest run`."""

    def __init__(self, console: Console, args: argparse.Namespace, settings: CrosstestSettings) -> None:
        self.console = console
        self.path = args.path
        self.settings = settings

    def run(self) -> int:
        runner = Runner(console=self.console, settings=self.settings)
        result = asyncio.run(runner.run(path=self.path))
        return 0 if result.ok else 1


class ListCommand:
    """Pipeline driver for `crosstest list`."""

    def __init__(self, console: Console, args: argparse.Namespace, settings: CrosstestSettings) -> None:
        self.console = console
        self.path = args.path
        self.settings = settings

    def run(self) -> int:
        items = collect(self.path)
        if not items:
            self.console.print("[yellow]No tests found.[/yellow]")
            return 0

        injectable = frozenset(get_registry())
        table = Table(title=f"{len(items)} Cartesian tests")
        table.add_column("Test", style="cyan")
        table.add_column("#", justify="right")
        table.add_column("Invocation")

        exit_code = 0
        for item in items:
            try:
                plan = plan_invocations(
                    item.fn,
                    owner=item.owner,
                    injectable=injectable,
                    default_pattern=self.settings.name_pattern,
                )
            except CartesianError as e:
                table.add_row(escape(item.full_name), "", f"[yellow]{type(e).__name__}: {escape(str(e))}[/yellow]")
                exit_code = 1
                continue
            for record in plan:
                label = escape(item.full_name) if record.index == 1 else ""
                table.add_row(label, str(record.index), escape(record.name))

        self.console.print(table)
        return exit_code


def main(argv: Sequence[str] | None = None) -> None:
    """Console script entry point."""
    sys.exit(CLIApplication().run(argv))
