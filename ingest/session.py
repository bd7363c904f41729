"""Session state: the single mutable context threaded through one wizard session."""

import logging
import time
import uuid
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, field_validator

from ingest.configuration import IngestConfiguration, validate_configuration
from ingest.models import ConstructionTarget, Relationship

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "ingest"
DEFAULT_LABEL = "New Object"


class SessionState(BaseModel):
    """Objects under construction, shared configuration, per-step storage and position.

    Mutated in place by the active invocation; saved between invocations by a SessionStore.
    """

    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    current_step_id: str | None = None
    objects: list[ConstructionTarget]
    shared_storage: IngestConfiguration
    step_storage: dict[str, dict[str, Any]] = Field(default_factory=dict)
    pending_values: dict[str, Any] = Field(default_factory=dict)
    committed: bool = False
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)

    @field_validator("objects")
    @classmethod
    def _objects_not_empty(cls, v: list[ConstructionTarget]) -> list[ConstructionTarget]:
        if not v:
            raise ValueError("session must hold at least one object")
        return v

    @property
    def models(self) -> list[str]:
        return self.shared_storage.models

    @property
    def object(self) -> ConstructionTarget:
        """The first (usually only) object under construction."""
        return self.objects[0]

    def touch(self) -> None:
        self.updated_at = time.time()


@runtime_checkable
class ObjectFactory(Protocol):
    """Creates new in-memory construction targets."""

    def create(
        self,
        id_or_namespace: str,
        label: str,
        relationships: Sequence[Relationship],
        models: Sequence[str],
    ) -> ConstructionTarget:
        """Return a new, not yet persisted object."""


class DefaultObjectFactory:
    """A full identifier ("ns:name") is used as is; a bare namespace gets a generated name."""

    def create(
        self,
        id_or_namespace: str,
        label: str,
        relationships: Sequence[Relationship],
        models: Sequence[str],
    ) -> ConstructionTarget:
        if ":" in id_or_namespace:
            object_id = id_or_namespace
        else:
            object_id = f"{id_or_namespace}:{uuid.uuid4().hex}"
        return ConstructionTarget(
            id=object_id,
            label=label,
            models=list(models),
            relationships=list(relationships),
        )


def prepare_new_object(
    configuration: IngestConfiguration, factory: ObjectFactory
) -> ConstructionTarget:
    """Build the default object from configuration: collection and parent links, models."""
    relationships = [
        Relationship(relationship="isMemberOfCollection", pid=pid)
        for pid in configuration.collections
    ]
    if configuration.parent:
        relationships.append(Relationship(relationship="isMemberOf", pid=configuration.parent))
    id_or_namespace = configuration.id or configuration.namespace or DEFAULT_NAMESPACE
    label = configuration.label or DEFAULT_LABEL
    return factory.create(id_or_namespace, label, relationships, configuration.models)


def initialize_session(
    configuration: IngestConfiguration | Mapping[str, Any] | None,
    factory: ObjectFactory | None = None,
    objects: Sequence[ConstructionTarget] | None = None,
    state: SessionState | None = None,
) -> SessionState:
    """Create session state on first call; return the existing state unchanged afterwards.

    Configuration is validated before any object is constructed.
    """
    if state is not None:
        return state
    config = validate_configuration(configuration)
    if objects:
        built = list(objects)
    else:
        built = [prepare_new_object(config, factory or DefaultObjectFactory())]
    state = SessionState(objects=built, shared_storage=config)
    logger.info(
        "Ingest session %s initialized: models=%s objects=%s",
        state.session_id,
        config.models,
        [o.id for o in built],
    )
    return state
