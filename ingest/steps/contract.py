"""Step provider protocols: capability interfaces detected with isinstance().

A plugin class implements any subset; the registry and engine call them in
registration order.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

from ingest.models import Step

if TYPE_CHECKING:
    from ingest.engine import StepView
    from ingest.session import SessionState

STEP_HOOK = "ingest_steps"

StepContribution = Union[
    Mapping[str, Union[Step, Mapping[str, Any]]],
    Iterable[Union[Step, Mapping[str, Any]]],
    None,
]


@dataclass(frozen=True)
class HookKey:
    """Which hook is being invoked: the generic one (model=None) or a model-specific one."""

    name: str
    model: str | None = None

    def __str__(self) -> str:
        return self.name


def build_hook_list(models: Iterable[str]) -> list[HookKey]:
    """Generic hook first, then one per model in model order."""
    hooks = [HookKey(STEP_HOOK)]
    hooks.extend(HookKey(f"{model}_{STEP_HOOK}", model) for model in models)
    return hooks


@runtime_checkable
class StepProvider(Protocol):
    """Contributes steps for a hook."""

    def get_ingest_steps(self, hook: HookKey, state: "SessionState") -> StepContribution:
        """Return steps as {id: Step | dict}, a list of Step | dict, or None."""


@runtime_checkable
class StepAlterProvider(Protocol):
    """Adds, removes or replaces collected steps before they are ordered."""

    def alter_ingest_steps(
        self, hook: HookKey, steps: dict[str, Step], state: "SessionState"
    ) -> None:
        """Mutate steps (and state) in place."""


@runtime_checkable
class FormAlterProvider(Protocol):
    """Post-processes the rendered view of a step, keyed by its action reference."""

    def alter_step_form(
        self, action_reference: str, view: "StepView", state: "SessionState"
    ) -> None:
        """Mutate view in place. Ignore action references you do not handle."""


@runtime_checkable
class ConfigurableProvider(Protocol):
    """Receives the config: block of its manifest after instantiation."""

    def configure(self, config: dict[str, Any]) -> None:
        """Store settings. Called once by the loader."""
