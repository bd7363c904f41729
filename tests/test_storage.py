"""Tests for per-step storage: lazy bags, stash and restore."""

import pytest

from ingest.session import initialize_session
from ingest.storage import get_step_storage, restore, stash


@pytest.fixture
def state():
    return initialize_session({"models": ["m"]})


def test_bag_created_lazily(state) -> None:
    assert "a" not in state.step_storage
    bag = get_step_storage(state, "a")
    assert bag == {}
    bag["aux"] = 1
    assert state.step_storage["a"] == {"aux": 1}
    assert get_step_storage(state, "a") is bag


def test_defaults_to_current_step(state) -> None:
    state.current_step_id = "b"
    get_step_storage(state)["x"] = True
    assert state.step_storage["b"] == {"x": True}


def test_no_step_id_raises(state) -> None:
    with pytest.raises(ValueError):
        get_step_storage(state)


def test_stash_moves_and_clears_pending(state) -> None:
    state.pending_values = {"label": "L"}
    stash(state, "a")
    assert state.step_storage["a"]["values"] == {"label": "L"}
    assert state.pending_values == {}


def test_stash_then_restore_is_identity(state) -> None:
    values = {"label": "L", "nested": {"tags": ["x", "y"]}, "n": 3}
    state.pending_values = dict(values)
    stash(state, "a")
    restore(state, "a")
    assert state.pending_values == values


def test_restore_unknown_step_gives_empty_values(state) -> None:
    state.pending_values = {"stale": 1}
    restore(state, "never-seen")
    assert state.pending_values == {}


def test_restored_values_do_not_alias_storage(state) -> None:
    state.pending_values = {"tags": ["x"]}
    stash(state, "a")
    restore(state, "a")
    state.pending_values["tags"].append("y")
    assert state.step_storage["a"]["values"] == {"tags": ["x"]}


def test_stash_keeps_auxiliary_data(state) -> None:
    get_step_storage(state, "a")["original_label"] = "Old"
    state.pending_values = {"label": "New"}
    stash(state, "a")
    assert state.step_storage["a"] == {"original_label": "Old", "values": {"label": "New"}}
