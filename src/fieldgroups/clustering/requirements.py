"""
Role-quota checks for candidate and existing groups.
"""

from collections.abc import Sequence

from fieldgroups.config.params import Requirements, RoleQuotas
from fieldgroups.core_types import QUOTA_ROLES, Person
from fieldgroups.interfaces import GroupRepository


def count_roles(candidates: Sequence[Person]) -> dict[str, int]:
    """Number of candidates holding each quota role, keyed by role name."""
    return {
        role: sum(1 for p in candidates if p.has_role(role)) for role in QUOTA_ROLES
    }


def meets_requirements(candidates: Sequence[Person], quotas: RoleQuotas) -> bool:
    """True iff every role count reaches its quota.

    All-zero quotas are satisfied by any list, the empty one included.
    """
    counts = count_roles(candidates)
    return all(counts[role] >= getattr(quotas, field) for role, field in QUOTA_ROLES.items())


def is_viable(candidates: Sequence[Person], requirements: Requirements) -> bool:
    """Quota check plus the minimum group size.

    The maximum size is deliberately not checked: whole family units may push a
    candidate set past it.
    """
    if len(candidates) < requirements.grouping.min_group_size:
        return False
    return meets_requirements(candidates, requirements.quotas)


def validate_group(
    repository: GroupRepository, group_id: str, quotas: RoleQuotas | None = None
) -> bool:
    """Re-check an existing group against its current members."""
    if quotas is None:
        quotas = repository.get_requirements().quotas
    repository.get_group(group_id)
    return meets_requirements(repository.persons_in_group(group_id), quotas)
