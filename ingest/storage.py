"""Per-step storage: stash pending values before the pointer moves, restore them after."""

import copy
from typing import Any

from ingest.session import SessionState

VALUES_KEY = "values"


def _resolve_step_id(state: SessionState, step_id: str | None) -> str:
    resolved = step_id if step_id is not None else state.current_step_id
    if resolved is None:
        raise ValueError("No step id given and session has no current step")
    return resolved


def get_step_storage(state: SessionState, step_id: str | None = None) -> dict[str, Any]:
    """Return the mutable bag for a step, creating it on first access.

    Steps may keep arbitrary auxiliary data here beside the stashed "values".
    """
    key = _resolve_step_id(state, step_id)
    return state.step_storage.setdefault(key, {})


def stash(state: SessionState, step_id: str | None = None) -> None:
    """Move pending input into the step's storage and clear the pending area."""
    storage = get_step_storage(state, step_id)
    storage[VALUES_KEY] = copy.deepcopy(state.pending_values)
    state.pending_values = {}


def restore(state: SessionState, step_id: str | None = None) -> None:
    """Copy the step's stored values (or nothing) back into the pending area."""
    storage = get_step_storage(state, step_id)
    state.pending_values = copy.deepcopy(storage.get(VALUES_KEY, {}))
