"""Shared fixtures for the fieldgroups test-suite."""

import logging
import os

import pytest

from fieldgroups.core_types import Family
from fieldgroups.utils.colors import PaletteColorSource
from fieldgroups.utils.logging import GroupsLogger
from tests.builders import build_repo, leader_only, make_meeting, make_person


@pytest.fixture
def palette():
    return PaletteColorSource(["#112233", "#445566", "#778899"])


@pytest.fixture
def hall_repo():
    """One meeting, two people in range and one out of range."""
    return build_repo(
        persons=[
            make_person("p1", 0.001, leader=True),
            make_person("p2", 0.005),
            make_person("p3", 0.02),
        ],
        meetings=[make_meeting("m1", name="Hall")],
    )


@pytest.fixture
def crowded_repo():
    """Twenty-five leaders around one meeting with the default maximum of 20."""
    persons = [make_person(f"p{i}", 0.0001 * i, leader=True) for i in range(1, 26)]
    return build_repo(persons=persons, meetings=[make_meeting("m1", name="Hall")])


@pytest.fixture
def family_repo():
    """A three-person family next to a meeting plus one loose individual."""
    persons = [
        make_person("a", 0.001, family_id="f1"),
        make_person("b", 0.002, leader=True),
        make_person("c", 0.0015),
        make_person("solo", 0.0012),
    ]
    return build_repo(
        persons=persons,
        meetings=[make_meeting("m1", name="Hall")],
        families=[Family(family_id="f1", member_ids=["b", "c"], name="Smith")],
        requirements=leader_only(max_group_size=2),
    )


@pytest.fixture(autouse=True)
def _restore_logging_state():
    root = logging.getLogger()
    handlers = root.handlers[:]
    root_level = root.level
    level = GroupsLogger.get_level()
    effective = os.environ.pop("FIELDGROUPS_EFFECTIVE_LOG_LEVEL", None)
    yield
    root.handlers[:] = handlers
    root.setLevel(root_level)
    os.environ.pop("FIELDGROUPS_EFFECTIVE_LOG_LEVEL", None)
    if effective is not None:
        os.environ["FIELDGROUPS_EFFECTIVE_LOG_LEVEL"] = effective
    GroupsLogger.set_level(level)
