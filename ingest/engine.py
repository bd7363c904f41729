"""WizardEngine: one request cycle of the ingest wizard.

init-if-needed -> apply trigger (next / previous / ingest) -> render current step.
The final ingest commits every object independently; one failure never blocks the others.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from ingest.configuration import IngestConfiguration
from ingest.errors import ConfigurationError
from ingest.models import ConstructionTarget, Step, StepKind, StepOrdering
from ingest.navigation import (
    NavigationController,
    current_step_id,
    is_first_step,
    is_last_step,
)
from ingest.repository import Repository
from ingest.session import ObjectFactory, SessionState, initialize_session
from ingest.steps.actions import ActionResolver
from ingest.steps.registry import StepRegistry
from ingest.storage import stash

logger = logging.getLogger(__name__)


class Trigger(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    INGEST = "ingest"
    BACK = "back"  # leave the wizard after a failed start; never a transition

    @property
    def label(self) -> str:
        return _TRIGGER_LABELS[self]


_TRIGGER_LABELS = {
    Trigger.NEXT: "Next",
    Trigger.PREVIOUS: "Previous",
    Trigger.INGEST: "Ingest",
    Trigger.BACK: "Go back",
}


@dataclass
class WizardRequest:
    """What the user did on the previous page: which button, with which input."""

    trigger: Trigger | None = None
    values: dict[str, Any] = field(default_factory=dict)


@dataclass
class StepContext:
    """Rendering context handed to a step action."""

    step: Step
    values: dict[str, Any]
    errors: list[str]
    is_first: bool
    is_last: bool
    logger: logging.Logger


@dataclass
class StepView:
    """Rendered step: the action's form plus the triggers the engine attached."""

    step_id: str
    action_reference: str
    form: Any
    triggers: list[Trigger]
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommittedObject:
    id: str
    label: str
    location: str


@dataclass(frozen=True)
class CommitFailure:
    id: str
    label: str
    message: str

    def describe(self) -> str:
        return f'A problem occurred while ingesting "{self.label}" (ID: {self.id})'


@dataclass
class CommitReport:
    committed: list[CommittedObject] = field(default_factory=list)
    failures: list[CommitFailure] = field(default_factory=list)

    @property
    def redirect(self) -> str | None:
        """Location of the last successfully committed object."""
        return self.committed[-1].location if self.committed else None

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class WizardResult:
    """Outcome of one invocation."""

    status: Literal["form", "error", "committed"]
    state: SessionState | None
    view: StepView | None = None
    triggers: list[Trigger] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    message: str | None = None
    commit: CommitReport | None = None


def _collect_errors(result: Any) -> list[str]:
    if result is None or result is True:
        return []
    if result is False:
        return ["Invalid input"]
    if isinstance(result, str):
        return [result]
    return [str(e) for e in result]


class WizardEngine:
    """Drives steps from the registry over a SessionState, one invocation at a time."""

    def __init__(
        self,
        registry: StepRegistry,
        repository: Repository,
        factory: ObjectFactory | None = None,
        actions: ActionResolver | None = None,
    ) -> None:
        self._registry = registry
        self._repository = repository
        self._factory = factory
        self._actions = actions or ActionResolver()
        self._navigation = NavigationController(registry)

    @property
    def registry(self) -> StepRegistry:
        return self._registry

    @property
    def navigation(self) -> NavigationController:
        return self._navigation

    @property
    def actions(self) -> ActionResolver:
        return self._actions

    def initialize(
        self,
        configuration: IngestConfiguration | Mapping[str, Any] | None,
        state: SessionState | None = None,
        objects: list[ConstructionTarget] | None = None,
    ) -> SessionState:
        """Create the session on first use. Raises ConfigurationError."""
        return initialize_session(configuration, self._factory, objects=objects, state=state)

    def handle(
        self,
        state: SessionState | None,
        configuration: IngestConfiguration | Mapping[str, Any] | None,
        request: WizardRequest | None = None,
    ) -> WizardResult:
        """Run one request cycle. ConfigurationError never escapes; it becomes an error result."""
        request = request or WizardRequest()
        # The cached ordering belongs to a single request cycle.
        self._registry.invalidate()
        try:
            state = self.initialize(configuration, state)
        except ConfigurationError as e:
            logger.error("Cannot start ingest: %s", e)
            return WizardResult(
                status="error", state=None, message=str(e), triggers=[Trigger.BACK]
            )

        if state.committed:
            return WizardResult(
                status="committed", state=state, message="This ingest was already completed"
            )

        errors: list[str] = []
        trigger = request.trigger
        if trigger is Trigger.NEXT:
            errors = self._on_next(state, request.values)
        elif trigger is Trigger.PREVIOUS:
            self._on_previous(state, request.values)
        elif trigger is Trigger.INGEST:
            errors, report = self._on_ingest(state, request.values)
            if report is not None:
                return WizardResult(
                    status="committed",
                    state=state,
                    commit=report,
                    message=f"Ingested {len(report.committed)} of {len(state.objects)} object(s)",
                )
        elif trigger is Trigger.BACK:
            logger.debug("Ignoring %s trigger inside a running session", trigger.value)

        ordering = self._registry.build_steps(state)
        view = self.render(state, errors)
        triggers = view.triggers if view else self._triggers(state, ordering)
        return WizardResult(
            status="form", state=state, view=view, triggers=triggers, errors=errors
        )

    def render(self, state: SessionState, errors: list[str] | None = None) -> StepView | None:
        """Execute the current step's action and attach triggers. None when nothing to show."""
        ordering = self._registry.build_steps(state)
        step_id = current_step_id(state, ordering)
        if step_id is None:
            return None
        state.current_step_id = step_id
        step = ordering.get(step_id)
        if step.kind is not StepKind.INTERACTIVE:
            logger.debug("Step %s has unsupported kind %s; skipping", step.id, step.kind.value)
            return None
        assert step.action_reference is not None
        action = self._actions.resolve(step)
        context = StepContext(
            step=step,
            values=dict(state.pending_values),
            errors=list(errors or []),
            is_first=is_first_step(state, ordering),
            is_last=is_last_step(state, ordering),
            logger=logging.getLogger(f"steps.{step.id}"),
        )
        form = action(context, state, *step.args)
        view = StepView(
            step_id=step.id,
            action_reference=step.action_reference,
            form=form,
            triggers=self._triggers(state, ordering),
            errors=list(errors or []),
        )
        for alterer in self._registry.form_alterers():
            try:
                alterer.alter_step_form(step.action_reference, view, state)
            except Exception as e:
                logger.exception(
                    "Form alterer %s failed for %s: %s",
                    type(alterer).__name__,
                    step.action_reference,
                    e,
                )
        return view

    def commit(self, state: SessionState) -> CommitReport:
        """Persist each object on its own. Failures are reported, never raised."""
        report = CommitReport()
        for obj in state.objects:
            try:
                location = self._repository.persist(obj)
            except Exception as e:
                logger.error(
                    'A problem occurred while ingesting "%s" (ID: %s): %s', obj.label, obj.id, e
                )
                report.failures.append(CommitFailure(id=obj.id, label=obj.label, message=str(e)))
                continue
            report.committed.append(CommittedObject(id=obj.id, label=obj.label, location=location))
            logger.info('"%s" (ID: %s) has been ingested', obj.label, obj.id)
        state.committed = True
        state.touch()
        return report

    @staticmethod
    def _triggers(state: SessionState, ordering: StepOrdering) -> list[Trigger]:
        if not len(ordering):
            return [Trigger.INGEST]
        triggers: list[Trigger] = []
        if not is_first_step(state, ordering):
            triggers.append(Trigger.PREVIOUS)
        triggers.append(Trigger.INGEST if is_last_step(state, ordering) else Trigger.NEXT)
        return triggers

    def _current(self, state: SessionState) -> tuple[StepOrdering, Step | None]:
        ordering = self._registry.build_steps(state)
        step_id = current_step_id(state, ordering)
        if step_id is None:
            return ordering, None
        state.current_step_id = step_id
        return ordering, ordering.get(step_id)

    @staticmethod
    def _validate(step: Step, state: SessionState) -> list[str]:
        if step.handlers.validate is None:
            return []
        errors = _collect_errors(step.handlers.validate(state, state.pending_values))
        if errors:
            logger.info("Step %s did not validate: %s", step.id, errors)
        return errors

    @staticmethod
    def _submit(step: Step, state: SessionState) -> None:
        if step.handlers.submit is not None:
            step.handlers.submit(state, state.pending_values)

    def _on_next(self, state: SessionState, values: dict[str, Any]) -> list[str]:
        ordering, step = self._current(state)
        if step is None:
            return []
        state.pending_values = dict(values)
        if is_last_step(state, ordering):
            logger.warning("Next requested on last step %s; ingest is required instead", step.id)
            return []
        errors = self._validate(step, state)
        if errors:
            return errors
        self._submit(step, state)
        self._navigation.advance(state)
        return []

    def _on_previous(self, state: SessionState, values: dict[str, Any]) -> None:
        ordering, step = self._current(state)
        if step is None:
            return
        state.pending_values = dict(values)
        if not self._navigation.retreat(state):
            return
        assert state.current_step_id is not None
        target = ordering.get(state.current_step_id)
        if target.handlers.undo is not None:
            target.handlers.undo(state, state.pending_values)

    def _on_ingest(
        self, state: SessionState, values: dict[str, Any]
    ) -> tuple[list[str], CommitReport | None]:
        ordering, step = self._current(state)
        state.pending_values = dict(values)
        if step is not None:
            if not is_last_step(state, ordering):
                logger.warning("Ingest requested on step %s which is not the last one", step.id)
                return [], None
            errors = self._validate(step, state)
            if errors:
                return errors, None
            self._submit(step, state)
            stash(state, step.id)
        return [], self.commit(state)
