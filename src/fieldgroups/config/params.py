from __future__ import annotations

"""Parameter containers for the grouping engine.

Role quotas and engine-wide parameters live in separate immutable dataclasses
and are bundled into :class:`Requirements`, which is what a repository hands to
the engine.
"""

import dataclasses
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from fieldgroups.exceptions import ConfigurationError

__all__ = [
    "RoleQuotas",
    "GroupingParams",
    "Requirements",
    "apply_options",
]


# ---------------------------------------------------------------------------
# Role quotas
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RoleQuotas:
    """Minimum number of people holding each role that a group must contain."""

    min_elders: int = 0
    min_servants: int = 0
    min_pioneers: int = 0
    min_leaders: int = 1
    min_helpers: int = 1
    min_publishers: int = 0

    def __post_init__(self):  # type: ignore[override]
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"RoleQuotas.{f.name} must be an integer, got {value!r}"
                )
            if value < 0:
                raise ConfigurationError(f"RoleQuotas.{f.name} must be non-negative.")

    def is_vacuous(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in dataclasses.fields(self))


# ---------------------------------------------------------------------------
# Engine parameters
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GroupingParams:
    """Engine-wide knobs for one grouping run."""

    distance_threshold: float = 1.0  # km
    min_group_size: int = 2
    max_group_size: int = 20
    keep_families_together: bool = True
    assign_meeting_points: bool = True
    # Return rejected candidates to their pools instead of dropping them
    retry_rejected: bool = False

    def __post_init__(self):  # type: ignore[override]
        threshold = self.distance_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ConfigurationError(
                f"GroupingParams.distance_threshold must be a number, got {threshold!r}"
            )
        if not math.isfinite(threshold) or threshold <= 0:
            raise ConfigurationError(
                "GroupingParams.distance_threshold must be a positive finite number."
            )

        for name in ("min_group_size", "max_group_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"GroupingParams.{name} must be an integer, got {value!r}"
                )

        if self.min_group_size < 1:
            raise ConfigurationError("GroupingParams.min_group_size must be at least 1.")

        if self.max_group_size < self.min_group_size:
            raise ConfigurationError(
                "GroupingParams.max_group_size must be greater than or equal to "
                "min_group_size."
            )

        for name in ("keep_families_together", "assign_meeting_points", "retry_rejected"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"GroupingParams.{name} must be a boolean.")


# ---------------------------------------------------------------------------
# Aggregate container
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Requirements:
    """Quotas plus engine parameters, as returned by a repository."""

    quotas: RoleQuotas = field(default_factory=RoleQuotas)
    grouping: GroupingParams = field(default_factory=GroupingParams)

    # Convenience accessors so engine code can read `requirements.X`.
    def __getattr__(self, item):
        if item.startswith("__") or item in ("quotas", "grouping"):
            raise AttributeError(item)
        for section in (self.quotas, self.grouping):
            if hasattr(section, item):
                return getattr(section, item)
        raise AttributeError(item)


def apply_options(
    requirements: Requirements,
    options: GroupingParams | Mapping[str, Any] | None,
) -> Requirements:
    """Return *requirements* with caller overrides merged into its grouping section.

    ``None`` values in a mapping are ignored so CLI flags that were not given
    fall back to the configured defaults.
    """
    if options is None:
        return requirements
    if isinstance(options, GroupingParams):
        return dataclasses.replace(requirements, grouping=options)
    if not isinstance(options, Mapping):
        raise ConfigurationError(
            f"Options must be a mapping or GroupingParams, got {type(options).__name__}"
        )

    known = {f.name for f in dataclasses.fields(GroupingParams)}
    unknown = sorted(set(options) - known)
    if unknown:
        raise ConfigurationError(f"Unknown grouping options: {', '.join(unknown)}")

    overrides = {k: v for k, v in options.items() if v is not None}
    if not overrides:
        return requirements
    grouping = dataclasses.replace(requirements.grouping, **overrides)
    return dataclasses.replace(requirements, grouping=grouping)
