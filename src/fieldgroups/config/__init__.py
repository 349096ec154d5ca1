"""Configuration module for grouping requirements."""

from .loader import load_yaml as load_requirements
from .loader import parse_requirements
from .params import (
    GroupingParams,
    Requirements,
    RoleQuotas,
    apply_options,
)

__all__ = [
    "GroupingParams",
    "Requirements",
    "RoleQuotas",
    "apply_options",
    "load_requirements",
    "parse_requirements",
]
