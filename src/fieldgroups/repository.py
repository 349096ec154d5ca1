"""
In-memory implementation of :class:`fieldgroups.interfaces.GroupRepository`.

Entities are kept in insertion order, which is the order the engine sees them
in.  Every read returns copies so callers can never mutate repository state
except through the assignment methods.
"""

import copy
import math
import numbers
from collections.abc import Mapping
from typing import Any, Optional

from fieldgroups.config import Requirements, parse_requirements
from fieldgroups.core_types import Family, Group, Meeting, Person, Snapshot
from fieldgroups.exceptions import RepositoryError
from fieldgroups.utils.colors import is_hex_color
from fieldgroups.utils.logging import GroupsLogger

logger = GroupsLogger.get_logger(__name__)


class InMemoryRepository:
    """Dictionary-backed store for people, meetings, families and groups."""

    def __init__(self, requirements: Optional[Requirements] = None):
        self._persons: dict[str, Person] = {}
        self._meetings: dict[str, Meeting] = {}
        self._families: dict[str, Family] = {}
        self._groups: dict[str, Group] = {}
        self._next_group_number = 1
        self._requirements = requirements or Requirements()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InMemoryRepository":
        """Build a repository from plain mappings.

        Recognised keys are ``groups``, ``persons``, ``meetings`` and
        ``families`` (lists of mappings using the dataclass field names) and an optional ``config``
        mapping in the YAML configuration layout.
        """
        requirements = parse_requirements(data.get("config")) if data.get("config") else None
        repo = cls(requirements)
        for raw in data.get("groups") or []:
            repo.add_group(_build(Group, raw, "group"))
        for raw in data.get("families") or []:
            repo.add_family(_build(Family, raw, "family"))
        for raw in data.get("persons") or []:
            repo.add_person(_build(Person, raw, "person"))
        for raw in data.get("meetings") or []:
            repo.add_meeting(_build(Meeting, raw, "meeting"))
        return repo

    def add_person(self, person: Person) -> None:
        if person.person_id in self._persons:
            raise RepositoryError(f"Person with ID {person.person_id} already exists")
        _check_location("Person", person.person_id, person.latitude, person.longitude)
        if person.group_id is not None and person.group_id not in self._groups:
            raise RepositoryError(f"Group with ID {person.group_id} not found")
        self._persons[person.person_id] = copy.deepcopy(person)

    def add_meeting(self, meeting: Meeting) -> None:
        if meeting.meeting_id in self._meetings:
            raise RepositoryError(f"Meeting with ID {meeting.meeting_id} already exists")
        _check_location("Meeting", meeting.meeting_id, meeting.latitude, meeting.longitude)
        if meeting.group_id is not None and meeting.group_id not in self._groups:
            raise RepositoryError(f"Group with ID {meeting.group_id} not found")
        self._meetings[meeting.meeting_id] = copy.deepcopy(meeting)

    def add_group(self, group: Group) -> None:
        if group.group_id in self._groups:
            raise RepositoryError(f"Group with ID {group.group_id} already exists")
        self._groups[group.group_id] = copy.copy(group)

    def add_family(self, family: Family) -> None:
        if family.family_id in self._families:
            raise RepositoryError(f"Family with ID {family.family_id} already exists")
        self._families[family.family_id] = copy.deepcopy(family)

    def set_requirements(self, requirements: Requirements) -> None:
        self._requirements = requirements

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_persons(self) -> list[Person]:
        return [copy.copy(p) for p in self._persons.values()]

    def list_meetings(self) -> list[Meeting]:
        return [copy.copy(m) for m in self._meetings.values()]

    def list_groups(self) -> list[Group]:
        return [copy.copy(g) for g in self._groups.values()]

    def list_unassigned_persons(self) -> list[Person]:
        return [copy.copy(p) for p in self._persons.values() if p.group_id is None]

    def list_unassigned_meetings(self) -> list[Meeting]:
        return [copy.copy(m) for m in self._meetings.values() if m.group_id is None]

    def list_families(self) -> list[Family]:
        return [copy.deepcopy(f) for f in self._families.values()]

    def get_requirements(self) -> Requirements:
        return self._requirements

    def get_person(self, person_id: str) -> Person:
        return copy.copy(self._lookup(self._persons, person_id, "Person"))

    def get_meeting(self, meeting_id: str) -> Meeting:
        return copy.copy(self._lookup(self._meetings, meeting_id, "Meeting"))

    def get_group(self, group_id: str) -> Group:
        return copy.copy(self._lookup(self._groups, group_id, "Group"))

    def persons_in_group(self, group_id: str) -> list[Person]:
        return [copy.copy(p) for p in self._persons.values() if p.group_id == group_id]

    def meetings_in_group(self, group_id: str) -> list[Meeting]:
        return [copy.copy(m) for m in self._meetings.values() if m.group_id == group_id]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_group(self, name: str, color: str) -> str:
        if not name or not name.strip():
            raise RepositoryError("Group validation failed: Name is required")
        if not is_hex_color(color):
            raise RepositoryError(
                f"Group validation failed: Color must be a valid hex color, got {color!r}"
            )
        group_id = f"group_{self._next_group_number}"
        while group_id in self._groups:
            self._next_group_number += 1
            group_id = f"group_{self._next_group_number}"
        self._next_group_number += 1
        self._groups[group_id] = Group(group_id=group_id, name=name, color=color)
        logger.debug(f"Created group {group_id} ({name})")
        return group_id

    def assign_person_to_group(self, person_id: str, group_id: str) -> None:
        person = self._lookup(self._persons, person_id, "Person")
        self._lookup(self._groups, group_id, "Group")
        person.group_id = group_id

    def assign_meeting_to_group(self, meeting_id: str, group_id: str) -> None:
        meeting = self._lookup(self._meetings, meeting_id, "Meeting")
        self._lookup(self._groups, group_id, "Group")
        meeting.group_id = group_id

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        return Snapshot(
            persons=tuple(copy.deepcopy(list(self._persons.values()))),
            meetings=tuple(copy.deepcopy(list(self._meetings.values()))),
            groups=tuple(copy.deepcopy(list(self._groups.values()))),
            families=tuple(copy.deepcopy(list(self._families.values()))),
            next_group_number=self._next_group_number,
        )

    def restore(self, snapshot: Snapshot) -> None:
        self._persons = {p.person_id: copy.deepcopy(p) for p in snapshot.persons}
        self._meetings = {m.meeting_id: copy.deepcopy(m) for m in snapshot.meetings}
        self._groups = {g.group_id: copy.deepcopy(g) for g in snapshot.groups}
        self._families = {f.family_id: copy.deepcopy(f) for f in snapshot.families}
        self._next_group_number = snapshot.next_group_number

    @staticmethod
    def _lookup(store: dict, key: str, kind: str):
        try:
            return store[key]
        except KeyError:
            raise RepositoryError(f"{kind} with ID {key} not found") from None


def _build(cls, raw: Mapping[str, Any], kind: str):
    try:
        return cls(**raw)
    except TypeError as exc:
        raise RepositoryError(f"Invalid {kind} record {dict(raw)!r}: {exc}") from exc


def _check_location(kind: str, entity_id: str, latitude: Any, longitude: Any) -> None:
    errors = []
    for axis, value in (("Latitude", latitude), ("Longitude", longitude)):
        if (
            isinstance(value, bool)
            or not isinstance(value, numbers.Real)
            or not math.isfinite(value)
        ):
            errors.append(f"{axis} must be a valid number, got {value!r}")
    if errors:
        raise RepositoryError(
            f"{kind} {entity_id} validation failed: {', '.join(errors)}"
        )
