"""Error types raised by fieldgroups.

A rejected candidate group is not an error: the engine handles it as normal
control flow and never raises for it.
"""


class GroupingError(Exception):
    """Base class for all fieldgroups errors."""


class ConfigurationError(GroupingError, ValueError):
    """Requirements or run options are missing or invalid."""


class RepositoryError(GroupingError, RuntimeError):
    """A repository call failed, e.g. an unknown person or group id."""
