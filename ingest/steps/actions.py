"""Resolve a step's action_reference to the callable that builds its form."""

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

from ingest.errors import StepActionError
from ingest.models import Step

logger = logging.getLogger(__name__)

StepAction = Callable[..., Any]


class ActionResolver:
    """Lookup order: registered callables, then "module:function", then the
    step's required_resource module attribute named by the reference.
    """

    def __init__(self, resource_root: Path | None = None) -> None:
        self._resource_root = resource_root
        self._actions: dict[str, StepAction] = {}
        self._resources: dict[str, ModuleType] = {}

    def register(self, reference: str, action: StepAction) -> None:
        self._actions[reference] = action

    def load_resource(self, resource: str) -> ModuleType:
        """Import a .py file (absolute or relative to resource_root) or a dotted module. Cached."""
        if resource in self._resources:
            return self._resources[resource]
        if resource.endswith(".py"):
            path = Path(resource)
            if not path.is_absolute() and self._resource_root is not None:
                path = self._resource_root / path
            if not path.exists():
                raise StepActionError(f"Required resource not found: {path}")
            spec = importlib.util.spec_from_file_location(
                f"step_resource_{path.parent.name}_{path.stem}", path
            )
            if spec is None or spec.loader is None:
                raise StepActionError(f"Cannot load required resource {path}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[spec.name] = module
            spec.loader.exec_module(module)
        else:
            try:
                module = importlib.import_module(resource)
            except ImportError as e:
                raise StepActionError(f"Cannot import required resource {resource!r}: {e}") from e
        self._resources[resource] = module
        logger.debug("Loaded step resource %s", resource)
        return module

    def resolve(self, step: Step) -> StepAction:
        reference = step.action_reference
        if not reference:
            raise StepActionError(f"Step {step.id!r} has no action_reference")
        module = self.load_resource(step.required_resource) if step.required_resource else None
        if reference in self._actions:
            return self._actions[reference]
        if ":" in reference:
            module_name, _, attr = reference.partition(":")
            try:
                target = getattr(importlib.import_module(module_name), attr)
            except (ImportError, AttributeError) as e:
                raise StepActionError(
                    f"Cannot resolve action {reference!r} for step {step.id!r}: {e}"
                ) from e
        elif module is not None and hasattr(module, reference):
            target = getattr(module, reference)
        else:
            raise StepActionError(f"Cannot resolve action {reference!r} for step {step.id!r}")
        if not callable(target):
            raise StepActionError(f"Action {reference!r} for step {step.id!r} is not callable")
        return target
