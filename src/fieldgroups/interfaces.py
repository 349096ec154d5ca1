"""Protocol definitions for the collaborators injected into the grouping engine."""

from typing import Any, Protocol

from fieldgroups.config.params import Requirements
from fieldgroups.core_types import Family, Group, Meeting, Person, Snapshot


class GroupRepository(Protocol):
    """Storage the engine reads from and materialises groups into.

    Implementations raise :class:`fieldgroups.exceptions.RepositoryError` when
    a call references an entity that does not exist.
    """

    def list_unassigned_persons(self) -> list[Person]:
        """People without a group, in stable repository order."""
        ...

    def list_unassigned_meetings(self) -> list[Meeting]:
        """Meeting points without a group, in stable repository order."""
        ...

    def list_families(self) -> list[Family]: ...

    def get_requirements(self) -> Requirements: ...

    def create_group(self, name: str, color: str) -> str:
        """Create a group and return its id."""
        ...

    def assign_person_to_group(self, person_id: str, group_id: str) -> None: ...

    def assign_meeting_to_group(self, meeting_id: str, group_id: str) -> None: ...

    def get_group(self, group_id: str) -> Group: ...

    def persons_in_group(self, group_id: str) -> list[Person]: ...

    def meetings_in_group(self, group_id: str) -> list[Meeting]: ...

    def snapshot(self) -> Snapshot: ...

    def restore(self, snapshot: Snapshot) -> None: ...


class NotificationSink(Protocol):
    """Receives engine events such as ``group_created``."""

    def notify(self, event: str, payload: dict[str, Any]) -> None: ...


class ColorSource(Protocol):
    """Hands out display colours for new groups."""

    def next_color(self) -> str:
        """Return a ``#RRGGBB`` colour."""
        ...
