"""StepRegistry: collect steps from providers, let alterers adjust them, order by weight."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from ingest.configuration import IngestConfiguration, validate_configuration
from ingest.errors import ConfigurationError
from ingest.models import Step, StepOrdering
from ingest.session import (
    DefaultObjectFactory,
    ObjectFactory,
    SessionState,
    prepare_new_object,
)
from ingest.steps.contract import (
    FormAlterProvider,
    HookKey,
    StepAlterProvider,
    StepContribution,
    StepProvider,
    build_hook_list,
)

logger = logging.getLogger(__name__)


class StepCache:
    """Single-slot cache for the last built ordering."""

    def __init__(self) -> None:
        self._ordering: StepOrdering | None = None

    def get(self) -> StepOrdering | None:
        return self._ordering

    def set(self, ordering: StepOrdering) -> None:
        self._ordering = ordering

    def invalidate(self) -> None:
        self._ordering = None


def _as_step(key: str | None, value: Any) -> Step | None:
    """Coerce a contributed value. The mapping key, when given, is the step id."""
    if not value:
        return None
    if isinstance(value, Step):
        step = value
    elif isinstance(value, Mapping):
        data = dict(value)
        if key is not None:
            data.setdefault("id", key)
        step = Step.model_validate(data)
    else:
        raise TypeError(f"Cannot build a step from {type(value).__name__}")
    if key is not None and step.id != key:
        logger.warning("Step id %r contributed under key %r; using the key", step.id, key)
        step = step.model_copy(update={"id": key})
    return step


def _coerce_contribution(contribution: StepContribution) -> dict[str, Step | None]:
    """Normalize a provider's return value to {id: Step | None}."""
    if not contribution:
        return {}
    out: dict[str, Step | None] = {}
    if isinstance(contribution, Mapping):
        for key, value in contribution.items():
            out[key] = _as_step(key, value)
        return out
    for value in contribution:
        step = _as_step(None, value)
        if step is not None:
            out[step.id] = step
    return out


class StepRegistry:
    """Builds the StepOrdering for a session from registered providers.

    Providers are consulted in registration order. The last ordering is cached
    until invalidate() is called.
    """

    def __init__(self, providers: Iterable[Any] = ()) -> None:
        self._providers: list[Any] = list(providers)
        self._cache = StepCache()

    def register(self, provider: Any) -> None:
        self._providers.append(provider)
        self._cache.invalidate()

    @property
    def providers(self) -> list[Any]:
        return list(self._providers)

    def form_alterers(self) -> list[FormAlterProvider]:
        return [p for p in self._providers if isinstance(p, FormAlterProvider)]

    def invalidate(self) -> None:
        self._cache.invalidate()

    def build_steps(self, state: SessionState) -> StepOrdering:
        """Return the ordering for state, from cache when available."""
        cached = self._cache.get()
        if cached is not None:
            return cached
        ordering = self._build(state)
        self._cache.set(ordering)
        return ordering

    def approximate_steps(
        self,
        configuration: IngestConfiguration | Mapping[str, Any] | None,
        factory: ObjectFactory | None = None,
    ) -> StepOrdering:
        """Steps a configuration would produce, without a real session. Empty when invalid.

        Does not touch the cache.
        """
        try:
            config = validate_configuration(configuration)
        except ConfigurationError as e:
            logger.debug("approximate_steps: invalid configuration: %s", e)
            return StepOrdering()
        obj = prepare_new_object(config, factory or DefaultObjectFactory())
        return self._build(SessionState(objects=[obj], shared_storage=config))

    def _build(self, state: SessionState) -> StepOrdering:
        hooks = build_hook_list(state.models)
        steps: dict[str, Step | None] = {}
        for hook in hooks:
            for provider in self._providers:
                if isinstance(provider, StepProvider):
                    steps.update(self._collect(provider, hook, state))
        collected: dict[str, Step] = {k: v for k, v in steps.items() if v}
        for hook in hooks:
            for provider in self._providers:
                if isinstance(provider, StepAlterProvider):
                    self._alter(provider, hook, collected, state)
        final: list[Step] = []
        for key, value in collected.items():
            try:
                step = _as_step(key, value)
            except (ValidationError, TypeError) as e:
                logger.error("Dropping step %r left invalid by alterers: %s", key, e)
                continue
            if step is not None:
                final.append(step)
        ordering = StepOrdering(final)
        logger.debug("Built steps for models %s: %s", state.models, list(ordering.ids()))
        return ordering

    @staticmethod
    def _collect(
        provider: StepProvider, hook: HookKey, state: SessionState
    ) -> dict[str, Step | None]:
        try:
            return _coerce_contribution(provider.get_ingest_steps(hook, state))
        except (ValidationError, TypeError) as e:
            logger.error(
                "Invalid steps from %s for hook %s: %s", type(provider).__name__, hook, e
            )
        except Exception as e:
            logger.exception(
                "Step provider %s failed for hook %s: %s", type(provider).__name__, hook, e
            )
        return {}

    @staticmethod
    def _alter(
        provider: StepAlterProvider,
        hook: HookKey,
        steps: dict[str, Step],
        state: SessionState,
    ) -> None:
        try:
            provider.alter_ingest_steps(hook, steps, state)
        except Exception as e:
            logger.exception(
                "Step alterer %s failed for hook %s: %s", type(provider).__name__, hook, e
            )
