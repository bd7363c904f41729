"""Shared helpers: in-test step providers, a recording action, engine construction."""

from typing import Any

import pytest

from ingest.engine import StepContext, WizardEngine
from ingest.models import Step
from ingest.repository import MemoryRepository
from ingest.session import SessionState
from ingest.settings import reload_settings
from ingest.steps import ActionResolver, HookKey, StepRegistry

THESIS_CONFIG: dict[str, Any] = {
    "models": ["modelA"],
    "collections": ["col:1"],
    "label": "Thesis",
}


class HookProvider:
    """Returns a fixed contribution per hook name and records every call."""

    def __init__(self, by_hook: dict[str, Any]) -> None:
        self.by_hook = by_hook
        self.calls: list[str] = []

    def get_ingest_steps(self, hook: HookKey, state: SessionState) -> Any:
        self.calls.append(hook.name)
        return self.by_hook.get(hook.name)


def render_values(context: StepContext, state: SessionState, *args: Any) -> dict[str, Any]:
    """Step action used by tests: echoes what the engine handed it."""
    return {"step": context.step.id, "values": dict(context.values), "args": args}


def make_engine(
    steps: list[Step] | dict[str, Any],
    repository: Any = None,
    hook: str = "modelA_ingest_steps",
    extra_providers: list[Any] | None = None,
) -> WizardEngine:
    providers: list[Any] = [HookProvider({hook: steps})]
    providers.extend(extra_providers or [])
    actions = ActionResolver()
    actions.register("form", render_values)
    return WizardEngine(
        registry=StepRegistry(providers),
        repository=repository if repository is not None else MemoryRepository(),
        actions=actions,
    )


@pytest.fixture
def thesis_steps() -> list[Step]:
    return [
        Step(id="files", weight=10, action_reference="form"),
        Step(id="metadata", weight=0, action_reference="form"),
    ]


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Ensure clean settings cache for each test."""
    reload_settings()
    yield
    reload_settings()
