"""Small factories for people, meetings and repositories used across tests."""

from fieldgroups.config import GroupingParams, Requirements, RoleQuotas
from fieldgroups.core_types import Meeting, Person
from fieldgroups.repository import InMemoryRepository

# Kilometres per degree along the equator for a 6371 km sphere.
KM_PER_DEGREE = 111.19492664455873


def make_person(person_id, lat, lon=0.0, **roles):
    return Person(person_id=person_id, latitude=lat, longitude=lon, name=person_id, **roles)


def make_meeting(meeting_id, lat=0.0, lon=0.0, name=None):
    return Meeting(
        meeting_id=meeting_id, latitude=lat, longitude=lon, name=name or meeting_id
    )


def leader_only(**grouping) -> Requirements:
    """One leader per group, no other quota."""
    return Requirements(
        quotas=RoleQuotas(min_leaders=1, min_helpers=0),
        grouping=GroupingParams(**grouping),
    )


def build_repo(persons=(), meetings=(), families=(), requirements=None):
    repo = InMemoryRepository(requirements or leader_only())
    for family in families:
        repo.add_family(family)
    for person in persons:
        repo.add_person(person)
    for meeting in meetings:
        repo.add_meeting(meeting)
    return repo
