"""Tests for the search session: coordinator and selection together."""

import pytest

from bibfind.core.flatten import build
from bibfind.core.models import CoordinatorState, Direction
from bibfind.core.session import SearchSession, drop_last_word


class ManualLauncher:
    def __init__(self):
        self.jobs = []

    def __call__(self, job):
        self.jobs.append(job)

    def run_all(self):
        jobs, self.jobs = self.jobs, []
        for job in jobs:
            job()


def inline(job):
    job()


def contains_matcher(query, candidate):
    if query not in candidate:
        return None
    return 1.0


TITLES = ["alpha one", "alpha two", "beta one", "beta two", "gamma"]


@pytest.fixture
def session():
    categories = [["title"]]
    records = [build(i, {"title": t}, categories) for i, t in enumerate(TITLES)]
    return SearchSession(records, 1, matcher=contains_matcher, launcher=inline)


def settle(session):
    session.tick()
    return session.poll()


class TestDropLastWord:
    @pytest.mark.parametrize("text,expected", [
        ("", ""),
        ("word", ""),
        ("two words", "two "),
        ("trailing space  ", "trailing "),
        ("   ", ""),
        ("two words  ", "two "),
        ("line\nbreak", "line\n"),
        ("tab\tsep", "tab\t"),
    ])
    def test_cases(self, text, expected):
        assert drop_last_word(text) == expected


def test_initial_rescan_lists_everything(session):
    assert session.coordinator.state is CoordinatorState.QUEUED
    view = settle(session)
    assert len(view.ranked) == len(TITLES)
    assert view.selected == 0
    assert view.state is CoordinatorState.IDLE


def test_typing_narrows_results(session):
    settle(session)
    session.add_text(0, "beta")
    view = settle(session)
    assert [e.record.id for e in view.ranked.entries] == [2, 3]
    assert view.queries == ("beta",)


def test_editing_helpers(session):
    session.add_text(0, "alpha one")
    session.remove_letter(0)
    assert session.coordinator.queries == ("alpha on",)
    session.remove_word(0)
    assert session.coordinator.queries == ("alpha ",)
    session.clear_all()
    assert session.coordinator.queries == ("",)
    session.edit(0, str.upper)
    session.set_query(0, "gamma")
    assert session.coordinator.queries == ("gamma",)


def test_selection_clamps_when_result_shrinks(session):
    settle(session)
    for _ in range(3):
        session.navigate(Direction.NEXT)
    assert session.selection.index == 3

    session.set_query(0, "alpha")
    view = settle(session)

    assert len(view.ranked) == 2
    assert view.selected == 1


def test_selection_clears_on_empty_result(session):
    settle(session)
    session.set_query(0, "no such title")
    view = settle(session)
    assert view.selected is None
    assert session.commit() is None


def test_selection_restarts_after_empty(session):
    settle(session)
    session.set_query(0, "zzz")
    settle(session)
    session.set_query(0, "gamma")
    view = settle(session)
    assert view.selected == 0
    assert session.commit() == 4


def test_navigation_wraps(session):
    settle(session)
    session.navigate(Direction.PREVIOUS)
    assert session.selection.index == len(TITLES) - 1
    session.navigate(Direction.NEXT)
    assert session.selection.index == 0


def test_commit_resolves_selected_record(session):
    settle(session)
    session.set_query(0, "two")
    settle(session)
    session.navigate(Direction.NEXT)
    assert session.commit() == 3


def test_stale_result_does_not_move_selection():
    categories = [["title"]]
    records = [build(i, {"title": t}, categories) for i, t in enumerate(TITLES)]
    launcher = ManualLauncher()
    session = SearchSession(records, 1, matcher=contains_matcher, launcher=launcher)

    session.tick()
    launcher.run_all()
    session.poll()

    session.set_query(0, "alpha")
    session.tick()
    stale_job = launcher.jobs.pop()
    session.set_query(0, "gamma")
    session.tick()
    launcher.run_all()
    view = session.poll()
    assert view.ranked.generation == 3
    assert view.selected == 0

    stale_job()
    view = session.poll()
    assert view.ranked.generation == 3
    assert [e.record.id for e in view.ranked.entries] == [4]
    assert session.commit() == 4


def test_quantum_end_to_end():
    """Default matcher: only the record matching 'quant' is listed."""
    categories = [["title"]]
    records = [
        build(0, {"title": "Quantum Computing"}, categories),
        build(1, {"title": "Classical Mechanics"}, categories),
    ]
    session = SearchSession(records, 1, launcher=inline)
    session.set_query(0, "quant")
    view = settle(session)

    assert [e.record.id for e in view.ranked.entries] == [0]
    assert view.selected_entry.record.title == "Quantum Computing"
    assert session.commit() == 0
