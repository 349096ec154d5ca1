"""
engine.py

Two-phase greedy grouping of unassigned people around meeting points and
around each other.

Phase A (meeting-seeded)
------------------------
Every unassigned meeting, in repository order, gathers the family units whose
centroid lies within ``distance_threshold`` (always whole units) and then the
individuals within range until the candidate count reaches
``max_group_size``.  A viable candidate set becomes a group named after the
meeting, which is handed to the group when ``assign_meeting_points`` is set.

Phase B (seed-driven)
---------------------
While anything is left, the first remaining family unit (or, once units run
out, the first remaining individual) seeds a new candidate set and gathers
around its location with the same rules.  Viable sets become groups named
after the nearest meeting still free after Phase A, or numbered when none is.

Rejected candidates
-------------------
By default a rejected candidate set is dropped for the rest of the run.
With ``retry_rejected`` the candidates go back to
their pools in their original positions; a failed seed stays gatherable but
never seeds again, which bounds Phase B to one iteration per entry.

Cost
----
Every gather is a linear scan of the pools, so a run costs
O(meetings × individuals + individuals²).  Beyond a few thousand people a
spatial index is needed.
"""

from collections.abc import Sequence
from typing import Any, Optional

from fieldgroups.config.params import Requirements
from fieldgroups.core_types import FamilyUnit, GroupResult, Meeting, Person
from fieldgroups.exceptions import ConfigurationError
from fieldgroups.interfaces import ColorSource, GroupRepository, NotificationSink
from fieldgroups.utils.colors import RandomColorSource
from fieldgroups.utils.distance import Coordinate, centroid, distance_km
from fieldgroups.utils.logging import GroupsLogger, Symbols

from .families import extract_family_units
from .pools import Pool, PoolEntry
from .requirements import is_viable

logger = GroupsLogger.get_logger(__name__)

MEETING_PHASE = "meeting"
SEED_PHASE = "seed"


class ClusteringEngine:
    """Runs one grouping pass against a repository and commits what it finds."""

    def __init__(
        self,
        repository: GroupRepository,
        requirements: Optional[Requirements] = None,
        *,
        sink: Optional[NotificationSink] = None,
        color_source: Optional[ColorSource] = None,
    ):
        self.repository = repository
        if requirements is None:
            requirements = repository.get_requirements()
        if not isinstance(requirements, Requirements):
            raise ConfigurationError("Repository returned no Requirements")
        self.requirements = requirements
        self.sink = sink
        self.color_source = color_source or RandomColorSource()

        self._individuals: Pool[Person] = Pool()
        self._units: Pool[FamilyUnit] = Pool()
        self._meetings: Pool[Meeting] = Pool()
        self._created: list[GroupResult] = []

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def run(self) -> list[GroupResult]:
        """Execute Phase A then Phase B and return the groups created."""
        grouping = self.requirements.grouping
        persons = self.repository.list_unassigned_persons()

        if grouping.keep_families_together:
            units, individuals = extract_family_units(
                persons, self.repository.list_families()
            )
        else:
            units, individuals = [], persons

        self._individuals = Pool(individuals)
        self._units = Pool(units)
        self._meetings = Pool(self.repository.list_unassigned_meetings())
        self._created = []

        logger.info(
            f"--- Starting grouping run: {len(individuals)} individuals, "
            f"{len(units)} family units, {len(self._meetings)} meetings ---"
        )

        self._meeting_phase()
        self._seed_phase()

        leftover = len(self._individuals) + sum(len(u) for u in self._units.items())
        logger.info(
            f"Grouping run completed: {len(self._created)} groups created, "
            f"{leftover} people returned to the pools"
        )
        self._notify(
            "run_completed",
            {
                "groups_created": len(self._created),
                "persons_assigned": sum(r.size for r in self._created),
            },
        )
        return self._created

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _meeting_phase(self) -> None:
        assign_meetings = self.requirements.grouping.assign_meeting_points

        for meeting_entry in self._meetings.active():
            if not self._individuals and not self._units:
                logger.debug("Pools exhausted; skipping remaining meetings")
                break

            meeting = meeting_entry.item
            unit_entries, person_entries = self._gather(meeting.location, 0)
            candidates = self._members(unit_entries, person_entries)

            self._units.take(unit_entries)
            self._individuals.take(person_entries)

            if not is_viable(candidates, self.requirements):
                self._reject(unit_entries, person_entries, f"meeting {meeting.meeting_id}")
                continue

            result = self._commit(
                name=f"Group - {meeting.name or meeting.meeting_id}",
                candidates=candidates,
                unit_entries=unit_entries,
                meeting=meeting if assign_meetings else None,
                phase=MEETING_PHASE,
            )
            if assign_meetings:
                self._meetings.take([meeting_entry])
            self._created.append(result)

    def _seed_phase(self) -> None:
        while True:
            seed_entry, seed_pool = self._next_seed()
            if seed_entry is None:
                break

            seed_pool.take([seed_entry])
            seed_entry.seeded = True

            seed = seed_entry.item
            seed_members = list(seed.members) if isinstance(seed, FamilyUnit) else [seed]
            unit_entries, person_entries = self._gather(seed.location, len(seed_members))
            candidates = seed_members + self._members(unit_entries, person_entries)

            self._units.take(unit_entries)
            self._individuals.take(person_entries)

            if not is_viable(candidates, self.requirements):
                label = seed.family_id if isinstance(seed, FamilyUnit) else seed.person_id
                self._reject(unit_entries, person_entries, f"seed {label}")
                if self.requirements.grouping.retry_rejected:
                    seed_pool.give_back([seed_entry])
                continue

            if isinstance(seed, FamilyUnit):
                unit_entries = [seed_entry, *unit_entries]

            result = self._commit(
                name=self._seed_group_name(candidates),
                candidates=candidates,
                unit_entries=unit_entries,
                meeting=None,
                phase=SEED_PHASE,
            )
            self._created.append(result)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _next_seed(self) -> tuple[Optional[PoolEntry], Optional[Pool]]:
        entry = self._units.next_seed()
        if entry is not None:
            return entry, self._units
        entry = self._individuals.next_seed()
        if entry is not None:
            return entry, self._individuals
        return None, None

    def _gather(
        self, origin: Coordinate, count: int
    ) -> tuple[list[PoolEntry[FamilyUnit]], list[PoolEntry[Person]]]:
        """Collect nearby units (whole, uncapped) and then nearby individuals.

        *count* is the number of people already committed to the candidate set
        (the seed's members in Phase B).
        """
        grouping = self.requirements.grouping
        threshold = grouping.distance_threshold

        unit_entries = [
            e for e in self._units.active() if distance_km(origin, e.item.location) <= threshold
        ]
        count += sum(len(e.item) for e in unit_entries)

        person_entries: list[PoolEntry[Person]] = []
        for entry in self._individuals.active():
            if count >= grouping.max_group_size:
                break
            if distance_km(origin, entry.item.location) <= threshold:
                person_entries.append(entry)
                count += 1

        return unit_entries, person_entries

    @staticmethod
    def _members(
        unit_entries: Sequence[PoolEntry[FamilyUnit]],
        person_entries: Sequence[PoolEntry[Person]],
    ) -> list[Person]:
        members = [p for e in unit_entries for p in e.item.members]
        members.extend(e.item for e in person_entries)
        return members

    def _reject(
        self,
        unit_entries: list[PoolEntry[FamilyUnit]],
        person_entries: list[PoolEntry[Person]],
        origin_label: str,
    ) -> None:
        retry = self.requirements.grouping.retry_rejected
        logger.debug(
            f"{Symbols.CROSS} Candidates around {origin_label} rejected "
            f"({len(unit_entries)} units, {len(person_entries)} individuals); "
            f"{'returned to pools' if retry else 'dropped for this run'}"
        )
        if retry:
            self._units.give_back(unit_entries)
            self._individuals.give_back(person_entries)

    def _seed_group_name(self, candidates: list[Person]) -> str:
        center = centroid([p.location for p in candidates])
        nearest: Optional[Meeting] = None
        shortest = float("inf")
        for meeting in self._meetings.items():
            d = distance_km(center, meeting.location)
            if d < shortest:
                shortest = d
                nearest = meeting
        if nearest is not None:
            return f"Group - {nearest.name or nearest.meeting_id}"
        return f"Group {len(self._created) + 1}"

    def _commit(
        self,
        name: str,
        candidates: list[Person],
        unit_entries: Sequence[PoolEntry[FamilyUnit]],
        meeting: Optional[Meeting],
        phase: str,
    ) -> GroupResult:
        group_id = self.repository.create_group(name, self.color_source.next_color())
        for person in candidates:
            self.repository.assign_person_to_group(person.person_id, group_id)
        if meeting is not None:
            self.repository.assign_meeting_to_group(meeting.meeting_id, group_id)

        result = GroupResult(
            group=self.repository.get_group(group_id),
            persons=self.repository.persons_in_group(group_id),
            meetings=self.repository.meetings_in_group(group_id),
            family_ids=[e.item.family_id for e in unit_entries],
            phase=phase,
        )
        logger.debug(
            f"{Symbols.CHECK} Created {group_id} '{name}' with {result.size} people "
            f"({phase} phase)"
        )
        self._notify(
            "group_created",
            {
                "group_id": group_id,
                "name": name,
                "size": result.size,
                "phase": phase,
            },
        )
        return result

    def _notify(self, event: str, payload: dict[str, Any]) -> None:
        if self.sink is not None:
            self.sink.notify(event, payload)
