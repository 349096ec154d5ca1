from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from fieldgroups.utils.distance import Coordinate

# Role flags counted against quotas, mapped to the quota field that governs them.
QUOTA_ROLES: dict[str, str] = {
    "elder": "min_elders",
    "servant": "min_servants",
    "pioneer": "min_pioneers",
    "leader": "min_leaders",
    "helper": "min_helpers",
    "publisher": "min_publishers",
}

FAMILY_ROLES = ("family_head", "spouse", "child")


@dataclass
class Person:
    """A located individual that can be placed in exactly one group."""

    person_id: str
    latitude: float
    longitude: float
    name: str = ""
    elder: bool = False
    servant: bool = False
    pioneer: bool = False
    publisher: bool = False
    leader: bool = False
    helper: bool = False
    family_head: bool = False
    spouse: bool = False
    child: bool = False
    group_id: Optional[str] = None
    family_id: Optional[str] = None

    @property
    def location(self) -> Coordinate:
        return (self.latitude, self.longitude)

    def has_role(self, role: str) -> bool:
        if role not in QUOTA_ROLES and role not in FAMILY_ROLES:
            return False
        return bool(getattr(self, role))

    def roles(self) -> list[str]:
        return [r for r in (*QUOTA_ROLES, *FAMILY_ROLES) if getattr(self, r)]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Meeting:
    """A meeting point; groups formed around it may take it over."""

    meeting_id: str
    latitude: float
    longitude: float
    name: str = ""
    group_id: Optional[str] = None

    @property
    def location(self) -> Coordinate:
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Family:
    """Registry entry listing the people that belong to one family."""

    family_id: str
    member_ids: list[str] = field(default_factory=list)
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Group:
    """A committed group. Members are resolved through the repository."""

    group_id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class FamilyUnit:
    """Unassigned members of one family, kept together during clustering."""

    family_id: str
    members: list[Person]
    centroid: Coordinate

    @property
    def location(self) -> Coordinate:
        return self.centroid

    def __len__(self) -> int:
        return len(self.members)


@dataclass
class GroupResult:
    """A group created by one engine run together with what it received."""

    group: Group
    persons: list[Person]
    meetings: list[Meeting] = field(default_factory=list)
    family_ids: list[str] = field(default_factory=list)
    phase: str = "seed"

    @property
    def size(self) -> int:
        return len(self.persons)

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group.to_dict(),
            "persons": [p.to_dict() for p in self.persons],
            "meetings": [m.to_dict() for m in self.meetings],
            "family_ids": list(self.family_ids),
            "phase": self.phase,
        }


@dataclass
class GroupStats:
    """Role counts and requirement status of one group."""

    group: Group
    counts: dict[str, int]
    family_count: int
    center: Coordinate
    meets_requirements: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group.to_dict(),
            "counts": dict(self.counts),
            "family_count": self.family_count,
            "center": self.center,
            "meets_requirements": self.meets_requirements,
        }


@dataclass
class RunSummary:
    groups_created: int = 0
    persons_assigned: int = 0
    persons_unassigned: int = 0
    meetings_assigned: int = 0


@dataclass
class PopulationStats:
    """Repository-wide totals, independent of any run."""

    persons: int
    meetings: int
    groups: int
    families: int
    roles: dict[str, int]
    grouped: int
    ungrouped: int
    in_families: int


@dataclass
class FamilyStats:
    """How the members of one family are spread over groups."""

    family: Family
    member_count: int
    group_ids: list[str]
    unassigned: int

    @property
    def together(self) -> bool:
        return self.member_count > 0 and self.unassigned == 0 and len(self.group_ids) == 1


@dataclass
class CommitResult:
    """Outcome of a committed engine run."""

    created_groups: list[GroupResult] = field(default_factory=list)
    statistics: list[GroupStats] = field(default_factory=list)


@dataclass
class PreviewResult:
    """Outcome of a preview; the repository is already rolled back."""

    success: bool
    created_groups: list[GroupResult] = field(default_factory=list)
    statistics: list[GroupStats] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Opaque copy of every entity the engine may mutate."""

    persons: tuple[Person, ...]
    meetings: tuple[Meeting, ...]
    groups: tuple[Group, ...]
    families: tuple[Family, ...] = ()
    next_group_number: int = 1
