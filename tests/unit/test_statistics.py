"""Tests for group statistics, run summaries and the DataFrame export."""

import pandas as pd
import pytest

from fieldgroups.clustering import ClusteringEngine
from fieldgroups.config import RoleQuotas
from fieldgroups.core_types import Family
from fieldgroups.statistics import (
    collect_statistics,
    family_statistics,
    group_statistics,
    population_statistics,
    statistics_to_dataframe,
    summarize_run,
)
from tests.builders import build_repo, make_meeting, make_person


@pytest.fixture
def stocked_repo():
    repo = build_repo(
        persons=[
            make_person("a", 0.0, 0.0, leader=True, elder=True, family_id="f1"),
            make_person("b", 2.0, 0.0, child=True, family_id="f1"),
            make_person("c", 0.0, 0.0, helper=True, family_id="f2"),
            make_person("d", 5.0, 5.0),
        ],
        meetings=[make_meeting("m1", 1.0, 0.0)],
    )
    group_id = repo.create_group("Stocked", "#123456")
    for pid in ("a", "b", "c"):
        repo.assign_person_to_group(pid, group_id)
    repo.assign_meeting_to_group("m1", group_id)
    return repo, group_id


def test_group_statistics_counts_roles(stocked_repo):
    repo, group_id = stocked_repo
    stats = group_statistics(repo, group_id)

    assert stats.group.name == "Stocked"
    assert stats.counts["persons"] == 3
    assert stats.counts["meetings"] == 1
    assert stats.counts["leaders"] == 1
    assert stats.counts["elders"] == 1
    assert stats.counts["helpers"] == 1
    assert stats.counts["children"] == 1
    assert stats.counts["publishers"] == 0
    assert stats.family_count == 2
    assert stats.meets_requirements


def test_center_includes_meetings(stocked_repo):
    repo, group_id = stocked_repo
    lat, lon = group_statistics(repo, group_id).center
    assert lat == pytest.approx(0.75)
    assert lon == pytest.approx(0.0)


def test_explicit_quotas_override_repository(stocked_repo):
    repo, group_id = stocked_repo
    stats = group_statistics(repo, group_id, RoleQuotas(min_elders=2))
    assert not stats.meets_requirements


def test_summarize_run_uses_count_before_run(crowded_repo):
    unassigned_before = len(crowded_repo.list_unassigned_persons())
    created = ClusteringEngine(crowded_repo).run()

    summary = summarize_run(created, unassigned_before)

    assert summary.groups_created == 2
    assert summary.persons_assigned == 25
    assert summary.persons_unassigned == 0
    assert summary.meetings_assigned == 1


def test_summarize_empty_run():
    summary = summarize_run([], 7)
    assert summary.groups_created == 0
    assert summary.persons_unassigned == 7


def test_dataframe_has_one_row_per_group(crowded_repo):
    created = ClusteringEngine(crowded_repo).run()
    stats = collect_statistics(crowded_repo, created)

    df = statistics_to_dataframe(stats)

    assert isinstance(df, pd.DataFrame)
    assert list(df["Group_ID"]) == ["group_1", "group_2"]
    assert list(df["Persons"]) == [20, 5]
    assert list(df["Leaders"]) == [20, 5]
    assert list(df["Meetings"]) == [1, 0]
    for column in ("Color", "Elders", "Children", "Families", "Center_Latitude"):
        assert column in df.columns
    assert df["Meets_Requirements"].all()


def test_dataframe_for_no_groups_is_empty_with_headers():
    df = statistics_to_dataframe([])
    assert df.empty
    assert "Group_ID" in df.columns


@pytest.fixture
def household_repo():
    repo = build_repo(
        persons=[
            make_person("a", 0.0, family_head=True, elder=True, family_id="f1"),
            make_person("b", 0.0, spouse=True, pioneer=True),
            make_person("c", 0.0, child=True, family_id="f1"),
            make_person("d", 1.0, child=True, family_id="f2"),
            make_person("e", 1.0, family_id="f2"),
            make_person("loner", 2.0, publisher=True),
        ],
        meetings=[make_meeting("m1"), make_meeting("m2", 1.0)],
        families=[
            Family(family_id="f1", member_ids=["b"], name="Smith"),
            Family(family_id="f2", name="Jones"),
            Family(family_id="f3", name="Empty"),
        ],
    )
    first = repo.create_group("North", "#111111")
    second = repo.create_group("South", "#222222")
    for pid in ("a", "b", "c", "d"):
        repo.assign_person_to_group(pid, first)
    repo.assign_person_to_group("e", second)
    return repo


def test_population_statistics_totals(household_repo):
    stats = population_statistics(household_repo)

    assert stats.persons == 6
    assert stats.meetings == 2
    assert stats.groups == 2
    assert stats.families == 3
    assert stats.grouped == 5
    assert stats.ungrouped == 1
    assert stats.in_families == 5


def test_population_statistics_counts_every_role(household_repo):
    roles = population_statistics(household_repo).roles

    assert roles["elder"] == 1
    assert roles["pioneer"] == 1
    assert roles["publisher"] == 1
    assert roles["leader"] == 0
    assert roles["family_head"] == 1
    assert roles["spouse"] == 1
    assert roles["child"] == 2


def test_population_statistics_of_empty_repository():
    stats = population_statistics(build_repo())
    assert stats.persons == 0
    assert stats.ungrouped == 0
    assert set(stats.roles.values()) == {0}


def test_family_statistics_spread(household_repo):
    by_name = {s.family.name: s for s in family_statistics(household_repo)}

    smith = by_name["Smith"]
    assert smith.member_count == 3
    assert smith.group_ids == ["group_1"]
    assert smith.together

    jones = by_name["Jones"]
    assert jones.member_count == 2
    assert jones.group_ids == ["group_1", "group_2"]
    assert not jones.together

    empty = by_name["Empty"]
    assert empty.member_count == 0
    assert empty.group_ids == []
    assert not empty.together


def test_family_statistics_counts_unassigned_members(family_repo):
    (smith,) = family_statistics(family_repo)

    assert smith.member_count == 3
    assert smith.unassigned == 3
    assert not smith.together
