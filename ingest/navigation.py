"""NavigationController: current position, neighbours, and stash/restore around moves."""

import logging

from ingest.models import StepOrdering
from ingest.session import SessionState
from ingest.steps.registry import StepRegistry
from ingest.storage import restore, stash

logger = logging.getLogger(__name__)


def current_step_id(state: SessionState, ordering: StepOrdering) -> str | None:
    """Stored position, or the first step when none is stored. None for an empty ordering."""
    if state.current_step_id is not None:
        if state.current_step_id in ordering:
            return state.current_step_id
        logger.warning(
            "Step %r is no longer offered; falling back to the first step",
            state.current_step_id,
        )
    first = ordering.first
    return first.id if first else None


def _neighbour_id(state: SessionState, ordering: StepOrdering, offset: int) -> str | None:
    current = current_step_id(state, ordering)
    if current is None:
        return None
    ids = ordering.ids()
    index = ids.index(current) + offset
    if 0 <= index < len(ids):
        return ids[index]
    return None


def next_step_id(state: SessionState, ordering: StepOrdering) -> str | None:
    return _neighbour_id(state, ordering, 1)


def previous_step_id(state: SessionState, ordering: StepOrdering) -> str | None:
    return _neighbour_id(state, ordering, -1)


def is_first_step(state: SessionState, ordering: StepOrdering) -> bool:
    current = current_step_id(state, ordering)
    return current is not None and ordering.ids()[0] == current


def is_last_step(state: SessionState, ordering: StepOrdering) -> bool:
    current = current_step_id(state, ordering)
    return current is not None and ordering.ids()[-1] == current


class NavigationController:
    """Moves the session pointer. Forward moves rebuild the ordering; backward moves do not."""

    def __init__(self, registry: StepRegistry) -> None:
        self._registry = registry

    def steps(self, state: SessionState) -> StepOrdering:
        return self._registry.build_steps(state)

    def current_step_id(self, state: SessionState) -> str | None:
        return current_step_id(state, self.steps(state))

    def is_first_step(self, state: SessionState) -> bool:
        return is_first_step(state, self.steps(state))

    def is_last_step(self, state: SessionState) -> bool:
        return is_last_step(state, self.steps(state))

    def advance(self, state: SessionState) -> bool:
        """Move to the next step. Returns False (no-op) on the last step."""
        # Resolved before the rebuild: submit may have removed the step itself.
        previous = self._registry.build_steps(state)
        source = current_step_id(state, previous)
        self._registry.invalidate()
        ordering = self._registry.build_steps(state)
        if source is None or source in ordering:
            target = next_step_id(state, ordering)
        else:
            later = previous.ids()[previous.index(source) + 1 :]
            target = next((i for i in later if i in ordering), None)
        if target is None:
            logger.debug("advance: already on the last step")
            return False
        self._move(state, source, target)
        return True

    def retreat(self, state: SessionState) -> bool:
        """Move to the previous step. Returns False (no-op) on the first step."""
        ordering = self._registry.build_steps(state)
        target = previous_step_id(state, ordering)
        if target is None:
            logger.debug("retreat: already on the first step")
            return False
        self._move(state, current_step_id(state, ordering), target)
        return True

    @staticmethod
    def _move(state: SessionState, source: str | None, target: str) -> None:
        if source is not None:
            stash(state, source)
        state.current_step_id = target
        restore(state, target)
        state.touch()
        logger.info("Session %s: step %s -> %s", state.session_id, source, target)
