"""
Command-line interface for fieldgroups using Typer.
"""

from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.table import Table

from fieldgroups import __version__
from fieldgroups.api import run_commit, run_preview
from fieldgroups.config import load_requirements
from fieldgroups.core_types import GroupResult, GroupStats
from fieldgroups.exceptions import GroupingError
from fieldgroups.repository import InMemoryRepository
from fieldgroups.statistics import (
    family_statistics,
    population_statistics,
    statistics_to_dataframe,
    summarize_run,
)
from fieldgroups.utils.colors import RandomColorSource
from fieldgroups.utils.logging import (
    LogLevel,
    ProgressTracker,
    log_error,
    log_success,
    setup_logging,
)

app = typer.Typer(
    help="fieldgroups: group people around meeting points by proximity and roles",
    add_completion=False,
)
console = Console()


def _load_repository(dataset: Path, config: Path | None) -> InMemoryRepository:
    """Read a YAML dataset and, optionally, a separate configuration file."""
    with dataset.open() as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise GroupingError(f"Dataset {dataset} must be a YAML mapping")

    repo = InMemoryRepository.from_dict(data)
    if config is not None:
        repo.set_requirements(load_requirements(config))
    return repo


def _collect_options(
    threshold: float | None,
    min_size: int | None,
    max_size: int | None,
    split_families: bool,
    no_meetings: bool,
    retry_rejected: bool,
) -> dict[str, Any]:
    options: dict[str, Any] = {
        "distance_threshold": threshold,
        "min_group_size": min_size,
        "max_group_size": max_size,
    }
    # Flags only override the configuration when given.
    if split_families:
        options["keep_families_together"] = False
    if no_meetings:
        options["assign_meeting_points"] = False
    if retry_rejected:
        options["retry_rejected"] = True
    return options


def _print_groups(title: str, stats: list[GroupStats]) -> None:
    df = statistics_to_dataframe(stats)
    if df.empty:
        console.print(f"[yellow]{title}: no groups could be formed[/yellow]")
        return

    table = Table(title=title, show_header=True)
    columns = ["Name", "Persons", "Meetings", "Leaders", "Helpers", "Families", "Meets_Requirements"]
    for col in columns:
        table.add_column(col.replace("_", " "), style="cyan" if col == "Name" else "green")
    for _, row in df.iterrows():
        table.add_row(*[str(row[col]) for col in columns])
    console.print(table)


def _print_summary(created: list[GroupResult], unassigned_before: int) -> None:
    summary = summarize_run(created, unassigned_before)
    table = Table(title="Run Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Groups Created", str(summary.groups_created))
    table.add_row("Persons Assigned", str(summary.persons_assigned))
    table.add_row("Persons Unassigned", str(summary.persons_unassigned))
    table.add_row("Meetings Assigned", str(summary.meetings_assigned))
    console.print(table)


@app.command()
def preview(
    dataset: Path = typer.Argument(..., help="YAML file with persons, meetings and families"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file"
    ),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", help="Distance threshold in km"
    ),
    min_size: int | None = typer.Option(None, "--min-size", help="Minimum group size"),
    max_size: int | None = typer.Option(None, "--max-size", help="Maximum group size"),
    split_families: bool = typer.Option(
        False, "--split-families", help="Do not keep family members together"
    ),
    no_meetings: bool = typer.Option(
        False, "--no-meetings", help="Do not assign meeting points to groups"
    ),
    retry_rejected: bool = typer.Option(
        False, "--retry-rejected", help="Return rejected candidates to the pools"
    ),
    seed: int | None = typer.Option(None, "--seed", help="Seed for group colours"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output (errors only)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """
    Show the groups a run would create without keeping them.
    """
    _setup_logging_from_flags(verbose, quiet, debug)
    repo = _open_repository(dataset, config)
    options = _collect_options(
        threshold, min_size, max_size, split_families, no_meetings, retry_rejected
    )

    unassigned_before = len(repo.list_unassigned_persons())
    result = run_preview(repo, options, color_source=RandomColorSource(seed))
    if not result.success:
        log_error(result.error or "Preview failed")
        raise typer.Exit(1)

    _print_groups("Proposed Groups", result.statistics)
    _print_summary(result.created_groups, unassigned_before)
    log_success("Preview finished; nothing was changed")


@app.command()
def commit(
    dataset: Path = typer.Argument(..., help="YAML file with persons, meetings and families"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file"
    ),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", help="Distance threshold in km"
    ),
    min_size: int | None = typer.Option(None, "--min-size", help="Minimum group size"),
    max_size: int | None = typer.Option(None, "--max-size", help="Maximum group size"),
    split_families: bool = typer.Option(
        False, "--split-families", help="Do not keep family members together"
    ),
    no_meetings: bool = typer.Option(
        False, "--no-meetings", help="Do not assign meeting points to groups"
    ),
    retry_rejected: bool = typer.Option(
        False, "--retry-rejected", help="Return rejected candidates to the pools"
    ),
    seed: int | None = typer.Option(None, "--seed", help="Seed for group colours"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output (errors only)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """
    Create groups for the dataset and print what was created.
    """
    _setup_logging_from_flags(verbose, quiet, debug)
    repo = _open_repository(dataset, config)
    progress = ProgressTracker(["Load Data", "Create Groups", "Summarize"])

    options = _collect_options(
        threshold, min_size, max_size, split_families, no_meetings, retry_rejected
    )
    unassigned_before = len(repo.list_unassigned_persons())
    progress.advance(f"Loaded {unassigned_before} unassigned persons")

    try:
        result = run_commit(repo, options, color_source=RandomColorSource(seed))
    except GroupingError as e:
        progress.close(success=False)
        log_error(str(e))
        raise typer.Exit(1)
    progress.advance(f"Created {len(result.created_groups)} groups")

    _print_groups("Created Groups", result.statistics)
    _print_summary(result.created_groups, unassigned_before)
    progress.advance("Summary ready")
    progress.close()


@app.command()
def stats(
    dataset: Path = typer.Argument(..., help="YAML file with persons, meetings and families"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output (errors only)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """
    Show population and family statistics for the dataset as it stands.
    """
    _setup_logging_from_flags(verbose, quiet, debug)
    repo = _open_repository(dataset, None)
    population = population_statistics(repo)

    table = Table(title="Population", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Persons", str(population.persons))
    table.add_row("Meetings", str(population.meetings))
    table.add_row("Groups", str(population.groups))
    table.add_row("Families", str(population.families))
    table.add_row("Grouped", str(population.grouped))
    table.add_row("Ungrouped", str(population.ungrouped))
    table.add_row("In Families", str(population.in_families))
    for role, count in population.roles.items():
        table.add_row(role.replace("_", " ").title(), str(count))
    console.print(table)

    families = family_statistics(repo)
    if not families:
        return
    table = Table(title="Families", show_header=True)
    for col in ("Family", "Members", "Groups", "Unassigned", "Together"):
        table.add_column(col, style="cyan" if col == "Family" else "green")
    for s in families:
        table.add_row(
            s.family.name or s.family.family_id,
            str(s.member_count),
            ", ".join(s.group_ids) or "-",
            str(s.unassigned),
            "yes" if s.together else "no",
        )
    console.print(table)


@app.command()
def version() -> None:
    """
    Show the fieldgroups version.
    """
    console.print(f"fieldgroups version {__version__}")


def _open_repository(dataset: Path, config: Path | None) -> InMemoryRepository:
    if not dataset.exists():
        log_error(f"Dataset file not found: {dataset}")
        raise typer.Exit(1)
    if config is not None and not config.exists():
        log_error(f"Config file not found: {config}")
        raise typer.Exit(1)

    try:
        return _load_repository(dataset, config)
    except (GroupingError, yaml.YAMLError) as e:
        log_error(str(e))
        raise typer.Exit(1)


def _setup_logging_from_flags(
    verbose: bool = False, quiet: bool = False, debug: bool = False
):
    """Setup logging based on CLI flags or environment variable."""
    level_from_flags: LogLevel | None = None
    if debug:
        level_from_flags = LogLevel.DEBUG
    elif verbose:
        level_from_flags = LogLevel.VERBOSE
    elif quiet:
        level_from_flags = LogLevel.QUIET

    if level_from_flags is not None:
        setup_logging(level_from_flags)
    else:
        # No flags set, let setup_logging handle it (will check env var)
        setup_logging()


if __name__ == "__main__":
    app()
