"""Step and construction-target models shared by the registry, navigation and engine."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ingest.errors import StepNotFoundError

RELS_EXT_NAMESPACE = "info:fedora/fedora-system:def/relations-external#"


class StepKind(str, Enum):
    INTERACTIVE = "interactive"
    BATCH = "batch"  # reserved, the engine skips these


@dataclass(frozen=True)
class StepHandlers:
    """Optional callables a provider attaches to a step at registration time.

    validate(state, values) -> iterable of error messages (empty = valid)
    submit(state, values)   -> None, runs after successful validation
    undo(state, values)     -> None, reverses submit when the user goes back
    """

    validate: Callable[..., Iterable[str] | None] | None = None
    submit: Callable[..., None] | None = None
    undo: Callable[..., None] | None = None


class Step(BaseModel):
    """One page of the wizard. Immutable; alter hooks replace entries with model_copy()."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    weight: int = 0
    kind: StepKind = StepKind.INTERACTIVE
    action_reference: str | None = None
    args: tuple[Any, ...] = ()
    required_resource: str | None = None
    handlers: StepHandlers = Field(default_factory=StepHandlers)

    @model_validator(mode="after")
    def _interactive_needs_action(self) -> "Step":
        if self.kind is StepKind.INTERACTIVE and not self.action_reference:
            raise ValueError(f"interactive step {self.id!r} has no action_reference")
        return self


class StepOrdering:
    """Steps sorted ascending by weight. Equal weights keep encounter order."""

    def __init__(self, steps: Iterable[Step] = ()) -> None:
        self._steps: tuple[Step, ...] = tuple(sorted(steps, key=lambda s: s.weight))
        self._ids: tuple[str, ...] = tuple(s.id for s in self._steps)

    def ids(self) -> tuple[str, ...]:
        return self._ids

    def get(self, step_id: str) -> Step:
        try:
            return self._steps[self._ids.index(step_id)]
        except ValueError:
            raise StepNotFoundError(step_id) from None

    def index(self, step_id: str) -> int:
        try:
            return self._ids.index(step_id)
        except ValueError:
            raise StepNotFoundError(step_id) from None

    @property
    def first(self) -> Step | None:
        return self._steps[0] if self._steps else None

    @property
    def last(self) -> Step | None:
        return self._steps[-1] if self._steps else None

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._ids

    def __repr__(self) -> str:
        return f"StepOrdering({list(self._ids)!r})"


class Relationship(BaseModel):
    """Relationship descriptor attached to an object at creation time."""

    model_config = ConfigDict(frozen=True)

    relationship: str
    pid: str
    namespace: str = RELS_EXT_NAMESPACE


class ConstructionTarget(BaseModel):
    """In-memory object under construction. Owned by the session until commit."""

    id: str
    label: str
    models: list[str] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)

    def add_relationship(self, relationship: str, pid: str) -> None:
        rel = Relationship(relationship=relationship, pid=pid)
        if rel not in self.relationships:
            self.relationships.append(rel)

    def get_relationships(self, relationship: str) -> list[str]:
        """Pids of all relationships with the given predicate."""
        return [r.pid for r in self.relationships if r.relationship == relationship]
