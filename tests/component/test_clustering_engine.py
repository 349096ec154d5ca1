"""Behavioural tests for the two-phase grouping engine."""

import pytest

from fieldgroups.clustering import MEETING_PHASE, SEED_PHASE, ClusteringEngine
from fieldgroups.core_types import Family
from fieldgroups.exceptions import ConfigurationError
from fieldgroups.repository import InMemoryRepository
from tests.builders import build_repo, leader_only, make_meeting, make_person


class RecordingSink:
    def __init__(self):
        self.events = []

    def notify(self, event, payload):
        self.events.append((event, payload))


def _ids(persons):
    return [p.person_id for p in persons]


def _assert_no_dangling_references(repo):
    group_ids = {g.group_id for g in repo.list_groups()}
    for person in repo.list_persons():
        assert person.group_id is None or person.group_id in group_ids
    for meeting in repo.list_meetings():
        assert meeting.group_id is None or meeting.group_id in group_ids


def test_meeting_gathers_people_within_threshold(hall_repo, palette):
    created = ClusteringEngine(hall_repo, color_source=palette).run()

    assert len(created) == 1
    result = created[0]
    assert result.group.name == "Group - Hall"
    assert result.group.color == "#112233"
    assert result.phase == MEETING_PHASE
    assert _ids(result.persons) == ["p1", "p2"]
    assert [m.meeting_id for m in result.meetings] == ["m1"]

    # p3 is 2.2 km out and cannot form a group on its own.
    assert _ids(hall_repo.list_unassigned_persons()) == ["p3"]
    assert hall_repo.list_unassigned_meetings() == []
    _assert_no_dangling_references(hall_repo)


def test_meeting_not_assigned_when_disabled(hall_repo):
    engine = ClusteringEngine(
        hall_repo, leader_only(assign_meeting_points=False)
    )
    created = engine.run()

    assert created[0].group.name == "Group - Hall"
    assert created[0].meetings == []
    assert [m.meeting_id for m in hall_repo.list_unassigned_meetings()] == ["m1"]


def test_overflow_spills_into_seed_phase(crowded_repo):
    created = ClusteringEngine(crowded_repo).run()

    assert [r.size for r in created] == [20, 5]
    assert _ids(created[0].persons) == [f"p{i}" for i in range(1, 21)]
    assert _ids(created[1].persons) == [f"p{i}" for i in range(21, 26)]
    assert [r.phase for r in created] == [MEETING_PHASE, SEED_PHASE]
    # The only meeting went to the first group, so the second is numbered.
    assert created[1].group.name == "Group 2"
    assert crowded_repo.list_unassigned_persons() == []
    _assert_no_dangling_references(crowded_repo)


def test_every_person_assigned_at_most_once(crowded_repo):
    created = ClusteringEngine(crowded_repo).run()
    assigned = [p.person_id for r in created for p in r.persons]
    assert len(assigned) == len(set(assigned))


def test_family_unit_joins_whole_even_beyond_max(family_repo):
    created = ClusteringEngine(family_repo).run()

    assert len(created) == 1
    result = created[0]
    assert result.family_ids == ["f1"]
    assert sorted(_ids(result.persons)) == ["a", "b", "c"]
    assert result.size > family_repo.get_requirements().grouping.max_group_size
    assert _ids(family_repo.list_unassigned_persons()) == ["solo"]


def test_family_members_share_group_or_stay_unassigned():
    persons = [
        make_person("a", 0.001, family_id="f1"),
        make_person("b", 0.002, family_id="f1"),
        make_person("far", 0.5, family_id="f2"),
        make_person("far2", 0.501, family_id="f2", leader=True),
        make_person("x", 0.0015, leader=True),
    ]
    families = [Family(family_id="f1"), Family(family_id="f2")]
    repo = build_repo(
        persons=persons, meetings=[make_meeting("m1")], families=families
    )

    ClusteringEngine(repo).run()

    for family in ("f1", "f2"):
        members = [p for p in repo.list_persons() if p.family_id == family]
        assert len({p.group_id for p in members}) == 1
    assert repo.get_person("a").group_id == repo.get_person("x").group_id


def test_split_families_treats_members_as_individuals():
    persons = [
        make_person("a", 0.001, family_id="f1", leader=True),
        make_person("b", 0.002, family_id="f1"),
        make_person("c", 0.003, family_id="f1"),
    ]
    repo = build_repo(
        persons=persons,
        meetings=[make_meeting("m1")],
        families=[Family(family_id="f1")],
        requirements=leader_only(max_group_size=2, keep_families_together=False),
    )

    created = ClusteringEngine(repo).run()

    assert _ids(created[0].persons) == ["a", "b"]
    assert created[0].family_ids == []
    assert _ids(repo.list_unassigned_persons()) == ["c"]


def test_family_unit_seeds_before_individuals():
    persons = [
        make_person("loner", 0.0, 1.0, leader=True),
        make_person("loner2", 0.0, 1.001),
        make_person("mum", 0.0, 5.0, family_id="f1", leader=True),
        make_person("kid", 0.0, 5.001, family_id="f1", child=True),
    ]
    repo = build_repo(persons=persons, families=[Family(family_id="f1")])

    created = ClusteringEngine(repo).run()

    assert [r.family_ids for r in created] == [["f1"], []]
    assert _ids(created[0].persons) == ["mum", "kid"]
    assert [r.group.name for r in created] == ["Group 1", "Group 2"]


def test_seed_group_named_after_nearest_free_meeting():
    persons = [
        make_person("p1", 0.5, 0.5, leader=True),
        make_person("p2", 0.5001, 0.5),
    ]
    meetings = [make_meeting("m1", 0.0, 0.0, "North"), make_meeting("m2", 2.0, 2.0, "South")]
    repo = build_repo(persons=persons, meetings=meetings)

    created = ClusteringEngine(repo).run()

    assert len(created) == 1
    assert created[0].group.name == "Group - North"
    assert created[0].phase == SEED_PHASE
    # Phase B only borrows the name; the meeting stays free.
    assert created[0].meetings == []
    assert len(repo.list_unassigned_meetings()) == 2


def test_seed_group_numbered_without_meetings():
    repo = build_repo(
        persons=[make_person("a", 0.0, leader=True), make_person("b", 0.001)]
    )
    created = ClusteringEngine(repo).run()
    assert [r.group.name for r in created] == ["Group 1"]


def test_nothing_to_do_creates_nothing():
    repo = build_repo(meetings=[make_meeting("m1")])
    sink = RecordingSink()

    assert ClusteringEngine(repo, sink=sink).run() == []
    assert repo.list_groups() == []
    assert sink.events == [("run_completed", {"groups_created": 0, "persons_assigned": 0})]


def test_quota_failure_creates_no_group():
    repo = build_repo(
        persons=[make_person("a", 0.0), make_person("b", 0.001)],
        meetings=[make_meeting("m1")],
    )
    assert ClusteringEngine(repo).run() == []
    assert len(repo.list_unassigned_persons()) == 2


@pytest.fixture
def retry_repo_factory():
    """Phase A fails for want of a leader; the leader sits just outside the meeting's reach."""

    def factory(retry):
        persons = [
            make_person("x", 0.001),
            make_person("y", 0.002),
            make_person("lead", 0.009, leader=True),
        ]
        return build_repo(
            persons=persons,
            meetings=[make_meeting("m1", name="Hall")],
            requirements=leader_only(retry_rejected=retry),
        )

    return factory


def test_rejected_candidates_are_dropped_by_default(retry_repo_factory):
    repo = retry_repo_factory(False)

    created = ClusteringEngine(repo).run()

    assert created == []
    assert len(repo.list_unassigned_persons()) == 3


def test_rejected_candidates_return_to_pools_when_retrying(retry_repo_factory):
    repo = retry_repo_factory(True)

    created = ClusteringEngine(repo).run()

    assert len(created) == 1
    assert _ids(created[0].persons) == ["x", "y", "lead"]
    assert created[0].group.name == "Group - Hall"
    assert created[0].phase == SEED_PHASE
    assert repo.list_unassigned_persons() == []


def test_retry_terminates_when_nothing_is_viable():
    repo = build_repo(
        persons=[make_person(f"p{i}", 0.001 * i) for i in range(6)],
        meetings=[make_meeting("m1")],
        requirements=leader_only(retry_rejected=True),
    )
    assert ClusteringEngine(repo).run() == []
    assert len(repo.list_unassigned_persons()) == 6


def test_sink_receives_group_events(hall_repo):
    sink = RecordingSink()
    ClusteringEngine(hall_repo, sink=sink).run()

    assert sink.events[0] == (
        "group_created",
        {"group_id": "group_1", "name": "Group - Hall", "size": 2, "phase": MEETING_PHASE},
    )
    assert sink.events[-1] == (
        "run_completed",
        {"groups_created": 1, "persons_assigned": 2},
    )


def test_engine_uses_repository_requirements_by_default(hall_repo):
    engine = ClusteringEngine(hall_repo)
    assert engine.requirements is hall_repo.get_requirements()


def test_already_assigned_people_are_ignored(hall_repo):
    group_id = hall_repo.create_group("Existing", "#000000")
    hall_repo.assign_person_to_group("p2", group_id)

    created = ClusteringEngine(hall_repo).run()

    # p1 alone is below the minimum size.
    assert created == []
    assert _ids(hall_repo.persons_in_group(group_id)) == ["p2"]


def test_engine_rejects_repository_without_requirements():
    class Unconfigured(InMemoryRepository):
        def get_requirements(self):
            return None

    with pytest.raises(ConfigurationError, match="no Requirements"):
        ClusteringEngine(Unconfigured())
