"""Repository client contract and an in-process implementation."""

import logging
from typing import Protocol, runtime_checkable

from ingest.errors import CommitError
from ingest.models import ConstructionTarget

logger = logging.getLogger(__name__)


@runtime_checkable
class Repository(Protocol):
    """Durable object store. The engine calls persist() once per object and never retries."""

    def persist(self, obj: ConstructionTarget) -> str:
        """Store obj. Return a location for the stored object; raise on failure."""


class MemoryRepository:
    """Keeps committed objects in a dict keyed by id. Duplicate ids are rejected."""

    def __init__(self, base_location: str = "objects") -> None:
        self._base_location = base_location.rstrip("/")
        self._objects: dict[str, ConstructionTarget] = {}

    def persist(self, obj: ConstructionTarget) -> str:
        if obj.id in self._objects:
            raise CommitError(f"Object {obj.id} already exists")
        self._objects[obj.id] = obj.model_copy(deep=True)
        logger.debug("Stored object %s", obj.id)
        return f"{self._base_location}/{obj.id}"

    def get(self, object_id: str) -> ConstructionTarget | None:
        return self._objects.get(object_id)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)
