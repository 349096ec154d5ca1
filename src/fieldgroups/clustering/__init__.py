"""
Proximity grouping: family units, quota checks and the two-phase engine.
"""

from .engine import MEETING_PHASE, SEED_PHASE, ClusteringEngine
from .families import extract_family_units
from .pools import Pool, PoolEntry
from .requirements import count_roles, is_viable, meets_requirements, validate_group

__all__ = [
    "ClusteringEngine",
    "MEETING_PHASE",
    "SEED_PHASE",
    "Pool",
    "PoolEntry",
    "count_roles",
    "extract_family_units",
    "is_viable",
    "meets_requirements",
    "validate_group",
]
