from __future__ import annotations

"""Load grouping requirements from YAML.

Expected layout::

    grouping:
      distance_threshold: 1.0
      min_group_size: 2
      max_group_size: 20
      keep_families_together: true
      assign_meeting_points: true
      retry_rejected: false
    requirements:
      min_elders: 0
      min_leaders: 1
      ...

Both sections are optional; omitted keys keep their dataclass defaults.
"""

from pathlib import Path
from typing import Any, Dict

import yaml

from fieldgroups.exceptions import ConfigurationError
from fieldgroups.utils.logging import GroupsLogger

from .params import GroupingParams, Requirements, RoleQuotas

logger = GroupsLogger.get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default_config.yaml"

_GROUPING_KEYS = set(GroupingParams.__dataclass_fields__)
_QUOTA_KEYS = set(RoleQuotas.__dataclass_fields__)


def _section(data: Dict[str, Any], name: str, allowed: set[str]) -> Dict[str, Any]:
    raw = data.pop(name, None) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Section '{name}' must be a mapping.")
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in '{name}' section: {', '.join(unknown)}"
        )
    return raw


def parse_requirements(data: Dict[str, Any] | None) -> Requirements:
    """Build :class:`Requirements` from an already-parsed mapping."""
    data = dict(data or {})
    grouping = GroupingParams(**_section(data, "grouping", _GROUPING_KEYS))
    quotas = RoleQuotas(**_section(data, "requirements", _QUOTA_KEYS))

    # Any remaining unknown keys will raise an error to avoid silent mistakes.
    if data:
        unknown_keys = ", ".join(sorted(data.keys()))
        raise ConfigurationError(
            f"Unknown top-level configuration keys in YAML: {unknown_keys}"
        )

    return Requirements(quotas=quotas, grouping=grouping)


def load_yaml(path: str | Path | None = None) -> Requirements:
    """Load a YAML configuration file into :class:`Requirements`.

    Without a path the packaged ``default_config.yaml`` is used.
    """
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(cfg_path)

    try:
        with cfg_path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Error parsing YAML configuration {cfg_path}: {exc}"
        ) from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration {cfg_path} must be a YAML mapping.")

    requirements = parse_requirements(data)
    logger.debug(
        "Loaded configuration – quotas: %s grouping: %s",
        requirements.quotas,
        requirements.grouping,
    )
    return requirements
