"""
Shared pytest fixtures for the progress exhaust suite.
The sample course c1 has two modules; batch b1 has learners u1 and u2.
"""
import sys
import os

_tests_dir = os.path.dirname(__file__)
_root_dir = os.path.join(_tests_dir, "..")
for _p in (_tests_dir, _root_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

import pytest

from factories import make_attempts, make_counters, make_enrolments, make_hierarchies, make_node

from progress_exhaust.config.settings import Settings
from progress_exhaust.models.schema import Context


@pytest.fixture
def course_c1():
    return make_node(
        "c1",
        leaf_nodes_count=10,
        children=[
            make_node("m1", leaf_nodes_count=4, children=[make_node("g1", leaf_nodes_count=2)]),
            make_node("m2", leaf_nodes_count=6),
        ],
    )


@pytest.fixture
def counters():
    return make_counters(
        [
            ("u1", "c1", 5, "b1"),
            ("u1", "m1", 4, "b1"),
            ("u1", "m2", 1, "b1"),
            ("u2", "c1", 10, "b1"),
            ("u2", "m1", 4, "b1"),
            ("u2", "m2", 6, "b1"),
            ("u9", "c1", 3, "b2"),
        ]
    )


@pytest.fixture
def attempts():
    return make_attempts(
        [
            ("c1", "b1", "q1", "a1", "u1", 5, 5, "5/5"),
            ("c1", "b1", "q2", "a2", "u1", 3, 5, "3/5"),
            ("c1", "b1", "q1", "a3", "u2", 2, 5, "2/5"),
        ]
    )


@pytest.fixture
def enrolments():
    return make_enrolments([("c1", "b1", "u1"), ("c1", "b1", "u2")])


@pytest.fixture
def settings(tmp_path):
    return Settings(
        base_dir=tmp_path,
        data_dir=tmp_path / "db",
        output_dir=tmp_path / "output",
        table_dir=tmp_path / "output" / "tables",
        hierarchy_depth=2,
        join_how="inner",
        log_level="INFO",
    )


@pytest.fixture
def ctx(settings, course_c1, counters, attempts, enrolments):
    data = {
        "user_activity_agg": counters,
        "content_hierarchy": make_hierarchies(course_c1),
        "assessment_aggregator": attempts,
        "user_enrolments": enrolments,
    }
    return Context(settings=settings, data=data)
