"""Family unit extraction for family-cohesive grouping."""

from fieldgroups.core_types import Family, FamilyUnit, Person
from fieldgroups.utils.distance import centroid
from fieldgroups.utils.logging import GroupsLogger

logger = GroupsLogger.get_logger(__name__)


def extract_family_units(
    persons: list[Person],
    families: list[Family],
) -> tuple[list[FamilyUnit], list[Person]]:
    """Split unassigned people into family units and loose individuals.

    A person belongs to a family when the family lists its id or when its own
    ``family_id`` points at the family.  Each person is claimed by the first
    family (in registry order) that matches, so nobody ends up in two units.
    Members keep the order of *persons*; families without any unassigned
    member produce no unit.

    Args:
        persons: Currently unassigned people, in pool order.
        families: Family registry, in registry order.

    Returns:
        ``(units, individuals)`` where *individuals* are the people not placed
        in any unit.
    """
    claimed: set[str] = set()
    units: list[FamilyUnit] = []

    for family in families:
        listed = set(family.member_ids)
        members = [
            p
            for p in persons
            if p.person_id not in claimed
            and (p.person_id in listed or p.family_id == family.family_id)
        ]
        if not members:
            continue

        claimed.update(p.person_id for p in members)
        units.append(
            FamilyUnit(
                family_id=family.family_id,
                members=members,
                centroid=centroid([p.location for p in members]),
            )
        )

    individuals = [p for p in persons if p.person_id not in claimed]
    logger.debug(
        f"Extracted {len(units)} family units covering {len(claimed)} people; "
        f"{len(individuals)} individuals remain"
    )
    return units, individuals
