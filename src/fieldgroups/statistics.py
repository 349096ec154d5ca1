"""
Per-group statistics and run summaries.

Statistics are always read back from the repository so they describe the
members a group actually has, not the candidates the engine proposed.
"""

from collections.abc import Sequence

import pandas as pd

from fieldgroups.clustering.requirements import count_roles, meets_requirements
from fieldgroups.config.params import RoleQuotas
from fieldgroups.clustering.families import extract_family_units
from fieldgroups.core_types import (
    FAMILY_ROLES,
    QUOTA_ROLES,
    FamilyStats,
    GroupResult,
    GroupStats,
    PopulationStats,
    RunSummary,
)
from fieldgroups.interfaces import GroupRepository
from fieldgroups.repository import InMemoryRepository
from fieldgroups.utils.distance import centroid

# Plural count keys reported for each quota role.
_COUNT_KEYS = {
    "elder": "elders",
    "servant": "servants",
    "pioneer": "pioneers",
    "leader": "leaders",
    "helper": "helpers",
    "publisher": "publishers",
}


def group_statistics(
    repository: GroupRepository, group_id: str, quotas: RoleQuotas | None = None
) -> GroupStats:
    """Role counts, family spread and centre of one group."""
    if quotas is None:
        quotas = repository.get_requirements().quotas

    group = repository.get_group(group_id)
    persons = repository.persons_in_group(group_id)
    meetings = repository.meetings_in_group(group_id)

    roles = count_roles(persons)
    counts = {"persons": len(persons), "meetings": len(meetings)}
    counts.update({_COUNT_KEYS[role]: n for role, n in roles.items()})
    counts["children"] = sum(1 for p in persons if p.child)

    return GroupStats(
        group=group,
        counts=counts,
        family_count=len({p.family_id for p in persons if p.family_id is not None}),
        center=centroid([p.location for p in persons] + [m.location for m in meetings]),
        meets_requirements=meets_requirements(persons, quotas),
    )


def collect_statistics(
    repository: GroupRepository,
    created_groups: Sequence[GroupResult],
    quotas: RoleQuotas | None = None,
) -> list[GroupStats]:
    return [group_statistics(repository, r.group.group_id, quotas) for r in created_groups]


def summarize_run(
    created_groups: Sequence[GroupResult], unassigned_before: int
) -> RunSummary:
    """Totals for one run.

    *unassigned_before* is the number of people without a group before the
    run; it is passed in because a preview has already rolled the repository
    back by the time the summary is built.
    """
    assigned = sum(r.size for r in created_groups)
    return RunSummary(
        groups_created=len(created_groups),
        persons_assigned=assigned,
        persons_unassigned=max(unassigned_before - assigned, 0),
        meetings_assigned=sum(len(r.meetings) for r in created_groups),
    )


def statistics_to_dataframe(stats: Sequence[GroupStats]) -> pd.DataFrame:
    """Flatten group statistics into one row per group."""
    if len(stats) == 0:
        return pd.DataFrame(columns=["Group_ID", "Name", "Persons", "Meets_Requirements"])

    rows = []
    for s in stats:
        row = {
            "Group_ID": s.group.group_id,
            "Name": s.group.name,
            "Color": s.group.color,
            "Persons": s.counts["persons"],
            "Meetings": s.counts["meetings"],
        }
        for key in (*_COUNT_KEYS.values(), "children"):
            row[key.title()] = s.counts[key]
        row["Families"] = s.family_count
        row["Center_Latitude"] = s.center[0]
        row["Center_Longitude"] = s.center[1]
        row["Meets_Requirements"] = s.meets_requirements
        rows.append(row)

    return pd.DataFrame(rows)


def population_statistics(repository: InMemoryRepository) -> PopulationStats:
    """Totals over everyone and everything the repository holds."""
    persons = repository.list_persons()
    roles = dict.fromkeys((*QUOTA_ROLES, *FAMILY_ROLES), 0)
    for p in persons:
        for role in p.roles():
            roles[role] += 1

    units, _ = extract_family_units(persons, repository.list_families())
    grouped = sum(1 for p in persons if p.group_id is not None)
    return PopulationStats(
        persons=len(persons),
        meetings=len(repository.list_meetings()),
        groups=len(repository.list_groups()),
        families=len(repository.list_families()),
        roles=roles,
        grouped=grouped,
        ungrouped=len(persons) - grouped,
        in_families=sum(len(u.members) for u in units),
    )


def family_statistics(repository: InMemoryRepository) -> list[FamilyStats]:
    """Group spread of every registered family, in registry order.

    Membership follows the same first-match rule as family unit extraction,
    applied to everyone rather than only the unassigned.
    """
    families = repository.list_families()
    units, _ = extract_family_units(repository.list_persons(), families)
    members = {u.family_id: u.members for u in units}

    stats = []
    for family in families:
        people = members.get(family.family_id, [])
        group_ids = list(dict.fromkeys(p.group_id for p in people if p.group_id is not None))
        stats.append(
            FamilyStats(
                family=family,
                member_count=len(people),
                group_ids=group_ids,
                unassigned=sum(1 for p in people if p.group_id is None),
            )
        )
    return stats
