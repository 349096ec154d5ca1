"""fieldgroups: proximity- and quota-aware grouping of people around meeting points."""

__version__ = "0.1.0"

# Main API
from .api import run_commit, run_preview

# Engine stages (for advanced users)
from .clustering import (
    ClusteringEngine,
    extract_family_units,
    is_viable,
    meets_requirements,
    validate_group,
)

# Configuration
from .config import (
    GroupingParams,
    Requirements,
    RoleQuotas,
    load_requirements,
)

# Core types
from .core_types import (
    CommitResult,
    Family,
    FamilyStats,
    FamilyUnit,
    Group,
    GroupResult,
    GroupStats,
    Meeting,
    Person,
    PopulationStats,
    PreviewResult,
    Snapshot,
)
from .exceptions import ConfigurationError, GroupingError, RepositoryError
from .interfaces import ColorSource, GroupRepository, NotificationSink
from .repository import InMemoryRepository
from .statistics import (
    family_statistics,
    group_statistics,
    population_statistics,
    statistics_to_dataframe,
    summarize_run,
)
from .transaction import PreviewTransaction
from .utils.colors import PaletteColorSource, RandomColorSource
from .utils.distance import distance_km

__all__ = [
    # Version
    "__version__",
    # Main API
    "run_commit",
    "run_preview",
    "PreviewTransaction",
    # Engine
    "ClusteringEngine",
    "extract_family_units",
    "is_viable",
    "meets_requirements",
    "validate_group",
    "distance_km",
    # Configuration
    "GroupingParams",
    "Requirements",
    "RoleQuotas",
    "load_requirements",
    # Types
    "CommitResult",
    "Family",
    "FamilyStats",
    "FamilyUnit",
    "Group",
    "GroupResult",
    "GroupStats",
    "Meeting",
    "Person",
    "PopulationStats",
    "PreviewResult",
    "Snapshot",
    # Errors
    "ConfigurationError",
    "GroupingError",
    "RepositoryError",
    # Collaborators
    "ColorSource",
    "GroupRepository",
    "NotificationSink",
    "InMemoryRepository",
    "PaletteColorSource",
    "RandomColorSource",
    # Statistics
    "family_statistics",
    "group_statistics",
    "population_statistics",
    "statistics_to_dataframe",
    "summarize_run",
]
