"""
Run one retention sweep from the command line.

Loads the same configuration as the HTTP service, sweeps both collections
once and prints a human-readable report.

Usage:
    CONFIG_PATH=config.yaml retention-sweep --dry-run
    retention-sweep --timeout 600
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING

from rich.console import Console

from retention_service.clients import create_collections
from retention_service.config import ConfigurationError, get_settings
from retention_service.logging import setup_logging
from retention_service.services import SweepCoordinator, format_report

if TYPE_CHECKING:
    from collections.abc import Sequence

    from retention_service.config import Settings
    from retention_service.services import SweepReport

console = Console()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Delete expired shares and assets from the blob store",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be deleted without deleting anything",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Sweep deadline (overrides sweep.timeout_seconds)",
    )
    return parser.parse_args(argv)


async def run_once(settings: Settings, dry_run: bool, timeout: float | None) -> SweepReport:
    """Build store clients, run a single sweep and close the clients."""
    collections = create_collections(settings)
    try:
        coordinator = SweepCoordinator(
            collections=collections,
            concurrency=settings.sweep.concurrency,
            timeout_seconds=settings.sweep.timeout_seconds,
        )
        return await coordinator.run_sweep(simulate=dry_run, timeout_seconds=timeout)
    finally:
        for store in collections.values():
            await store.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Sweep entry point."""
    args = parse_args(argv)

    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print("[red]Configuration error[/red]")
        console.print(str(e), markup=False, highlight=False)
        return 1

    setup_logging(settings.server.log_level, settings.service.name)

    if args.timeout is not None and args.timeout <= 0:
        console.print("[red]Error: --timeout must be positive[/red]")
        return 1

    console.print()
    console.print(
        "[dim]Sweeping "
        f"{settings.collections.shares} and {settings.collections.assets}"
        f"{' (dry run)' if args.dry_run else ''}...[/dim]"
    )

    report = asyncio.run(run_once(settings, args.dry_run, args.timeout))

    console.print(format_report(report), markup=False, highlight=False)
    if report.nothing_listed:
        console.print("[red]Sweep failed: the blob store could not be listed[/red]")
        return 1
    if report.errors:
        console.print(f"[yellow]{len(report.errors)} item(s) failed; see logs[/yellow]")
    else:
        console.print("[green]Sweep finished without errors[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
