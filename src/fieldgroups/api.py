"""
API facade for fieldgroups - the entry points for committing or previewing a run.
"""

from collections.abc import Mapping
from typing import Any, Optional, Union

from fieldgroups.clustering import ClusteringEngine
from fieldgroups.config.params import GroupingParams, Requirements, apply_options
from fieldgroups.core_types import CommitResult, PreviewResult
from fieldgroups.exceptions import ConfigurationError
from fieldgroups.interfaces import ColorSource, GroupRepository, NotificationSink
from fieldgroups.statistics import collect_statistics
from fieldgroups.transaction import PreviewTransaction
from fieldgroups.utils.logging import (
    Symbols,
    log_detail,
    log_progress,
    log_success,
    log_warning,
)

Options = Union[GroupingParams, Mapping[str, Any], None]


def resolve_requirements(repository: GroupRepository, options: Options = None) -> Requirements:
    """Repository requirements with caller overrides applied.

    Raises:
        ConfigurationError: if the repository has no requirements, an option is
            unknown or the merged values are invalid.
    """
    requirements = repository.get_requirements()
    if not isinstance(requirements, Requirements):
        raise ConfigurationError("Repository returned no Requirements")
    return apply_options(requirements, options)


def run_commit(
    repository: GroupRepository,
    options: Options = None,
    *,
    sink: Optional[NotificationSink] = None,
    color_source: Optional[ColorSource] = None,
) -> CommitResult:
    """Create groups and keep them.

    Configuration is resolved before anything is written.  Groups created
    before a repository failure stay committed; the error propagates.

    Args:
        repository: Storage to read people and meetings from and write groups to.
        options: Overrides for ``distance_threshold``, ``min_group_size``,
            ``max_group_size``, ``keep_families_together``,
            ``assign_meeting_points`` and ``retry_rejected``.
        sink: Optional receiver for ``group_created``/``run_completed`` events.
        color_source: Colour generator for new groups; random by default.

    Returns:
        CommitResult with the created groups and their statistics.

    Example:
        >>> result = run_commit(repo, {"distance_threshold": 0.5})
        >>> [r.group.name for r in result.created_groups]
        ['Group - Hall']
    """
    requirements = resolve_requirements(repository, options)
    log_progress("Creating groups...")

    engine = ClusteringEngine(
        repository, requirements, sink=sink, color_source=color_source
    )
    created = engine.run()
    statistics = collect_statistics(repository, created, requirements.quotas)

    for stats in statistics:
        log_detail(
            f"{Symbols.GROUP} {stats.group.name}: {stats.counts['persons']} people, "
            f"{stats.counts['meetings']} meetings, {stats.family_count} families"
        )
    if not created:
        log_warning("No viable groups could be formed")
    log_success(f"Created {len(created)} groups")
    return CommitResult(created_groups=created, statistics=statistics)


def run_preview(
    repository: GroupRepository,
    options: Options = None,
    *,
    sink: Optional[NotificationSink] = None,
    color_source: Optional[ColorSource] = None,
) -> PreviewResult:
    """Report what :func:`run_commit` would create without keeping it.

    Never raises for configuration or repository errors: failures come back as
    ``PreviewResult(success=False, error=...)`` after the repository has been
    restored.
    """
    transaction = PreviewTransaction(repository)
    return transaction.run(
        lambda: run_commit(
            repository, options, sink=sink, color_source=color_source
        )
    )
