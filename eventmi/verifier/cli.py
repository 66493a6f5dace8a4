"""CLI for the Eventmi verifier.

Usage:
    eventmi-verify list                                   # Show available scenarios
    eventmi-verify run                                    # Run every scenario
    eventmi-verify run submit_edit submit_deletion        # Run selected scenarios
    eventmi-verify run --base-url https://localhost:7236 --insecure
"""

from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from eventmi.config import get_settings
from eventmi.verifier.client import EndpointClient
from eventmi.verifier.harness import SCENARIOS, VerificationHarness
from eventmi.verifier.inspector import StoreInspector

app = typer.Typer(
    name="eventmi-verify",
    help="Verify the Eventmi event pages against their database",
    no_args_is_help=True,
)
console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command("list")
def cmd_list() -> None:
    """Show available scenarios."""
    table = Table(title="Scenarios", show_header=True, header_style="bold")
    table.add_column("Name", style="green", min_width=24)
    table.add_column("Checks", min_width=30)

    for name, description in SCENARIOS.items():
        table.add_row(name, description)

    console.print()
    console.print(table)
    console.print()


@app.command("run")
def cmd_run(
    scenarios: Optional[List[str]] = typer.Argument(None, help="Scenario names (default: all)"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the endpoint base URL"),
    database_url: Optional[str] = typer.Option(None, "--database-url", help="Override the store connection URL"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS certificate verification"),
    keep: bool = typer.Option(False, "--keep", help="Leave fixture records in the store"),
    exact_names: bool = typer.Option(False, "--exact-names", help="Submit the creation fixture name without a unique suffix"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request"),
) -> None:
    """Run scenarios and report pass/fail for each."""
    _configure_logging(verbose)

    unknown = [name for name in scenarios or [] if name not in SCENARIOS]
    if unknown:
        console.print(f"[red]Unknown scenario(s): {', '.join(unknown)}[/red]. See 'eventmi-verify list'.")
        raise typer.Exit(2)

    overrides = {}
    if base_url:
        overrides["base_url"] = base_url
    if database_url:
        overrides["database_url"] = database_url
    if timeout is not None:
        overrides["request_timeout"] = timeout
    if insecure:
        overrides["verify_tls"] = False
    settings = get_settings().model_copy(update=overrides)

    inspector = StoreInspector.from_settings(settings)
    try:
        with EndpointClient(settings=settings) as client:
            harness = VerificationHarness(client, inspector, cleanup=not keep, unique_names=not exact_names)
            results = harness.run_all(scenarios or None)
    finally:
        inspector.dispose()

    table = Table(title=f"Results for {settings.base_url}", show_header=True, header_style="bold")
    table.add_column("Scenario", min_width=24)
    table.add_column("Result", justify="center")
    table.add_column("Time", justify="right")
    table.add_column("Detail")
    for r in results:
        outcome = "[green]PASS[/green]" if r.passed else f"[red]{r.error_kind}[/red]"
        table.add_row(r.name, outcome, f"{r.duration:.2f}s", r.error or "")

    console.print()
    console.print(table)

    failed = sum(1 for r in results if not r.passed)
    if failed:
        console.print(f"[red]{failed} of {len(results)} scenario(s) failed[/red]")
        raise typer.Exit(1)
    console.print(f"[green]All {len(results)} scenario(s) passed[/green]")


if __name__ == "__main__":
    app()
