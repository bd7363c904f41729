"""Console round-trip loop: render a step, collect input, send the chosen trigger back."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import questionary
from questionary import Choice

from console.constants import INGEST_COMMITTED, INGEST_CONFIG_ERROR, INGEST_QUIT
from console.forms import FormField, StepForm
from console.ui import STYLE, print_page, print_report
from ingest.engine import CommitReport, StepView, Trigger, WizardEngine, WizardRequest
from ingest.repository import MemoryRepository
from ingest.session import SessionState
from ingest.session_store import SessionStore
from ingest.settings import get_setting
from ingest.steps import ActionResolver, ProviderLoader, StepRegistry

logger = logging.getLogger(__name__)


@dataclass
class ConsoleResult:
    """Result of running the console wizard."""

    exit_code: int
    session_id: str | None = None
    report: CommitReport | None = None


def build_engine(project_root: Path, settings: dict) -> WizardEngine:
    """Discover step plugins and assemble an engine around them."""
    steps_dir = project_root / get_setting(settings, "steps.dir", "sandbox/steps")
    loader = ProviderLoader(steps_dir)
    loader.discover()
    providers = loader.load_all()
    repository = MemoryRepository(get_setting(settings, "repository.base_location", "objects"))
    return WizardEngine(
        registry=StepRegistry(providers),
        repository=repository,
        actions=ActionResolver(resource_root=steps_dir),
    )


def build_session_store(project_root: Path, settings: dict) -> SessionStore:
    return SessionStore(
        db_path=project_root / get_setting(settings, "session.db_path", "sandbox/data/sessions.db"),
        timeout_sec=float(get_setting(settings, "session.timeout_sec", 1800)),
        busy_timeout=int(get_setting(settings, "session.busy_timeout", 5000)),
    )


def run_console(
    engine: WizardEngine,
    store: SessionStore,
    configuration: dict[str, Any],
    session_id: str | None = None,
) -> ConsoleResult:
    """Drive the engine until the user ingests or leaves."""
    asyncio.run(store.purge_expired())
    state: SessionState | None = None
    if session_id:
        state = asyncio.run(store.load(session_id))
        if state is None:
            print(f"Session {session_id} not found or expired; starting over.")

    request = WizardRequest()
    while True:
        result = engine.handle(state, configuration, request)

        if result.status == "error":
            print(f"\n✗ {result.message}")
            return ConsoleResult(exit_code=INGEST_CONFIG_ERROR)

        state = result.state
        assert state is not None

        if result.status == "committed":
            asyncio.run(store.delete(state.session_id))
            if result.commit is not None:
                print_report(result.commit)
            else:
                print(result.message)
            return ConsoleResult(
                exit_code=INGEST_COMMITTED, session_id=state.session_id, report=result.commit
            )

        asyncio.run(store.save(state))

        values = _ask_view(result.view, result.errors)
        if values is None:
            print(f"\nSession saved as {state.session_id}.")
            return ConsoleResult(exit_code=INGEST_QUIT, session_id=state.session_id)

        trigger = _ask_trigger(result.triggers)
        if trigger is None:
            print(f"\nSession saved as {state.session_id}.")
            return ConsoleResult(exit_code=INGEST_QUIT, session_id=state.session_id)

        request = WizardRequest(trigger=trigger, values=values)


def _ask_view(view: StepView | None, errors: list[str]) -> dict[str, Any] | None:
    """Render the step and collect its values. Returns None if the user cancelled."""
    if view is None:
        return {}
    form = view.form
    if not isinstance(form, StepForm):
        print(f"\n[{view.step_id}] {form!r}")
        return {}

    print_page(form, errors)
    values: dict[str, Any] = {}
    for f in form.fields:
        answer = _ask_field(f)
        if answer is None:
            return None
        values[f.name] = answer
    return values


def _ask_field(f: FormField) -> Any:
    label = f"{f.label}:" if not f.required else f"{f.label} (required):"
    if f.kind == "select" and f.choices:
        default = f.default if f.default in f.choices else None
        return questionary.select(label, choices=f.choices, default=default, style=STYLE).ask()
    if f.kind == "confirm":
        return questionary.confirm(label, default=bool(f.default), style=STYLE).ask()
    default = "" if f.default is None else str(f.default)
    return questionary.text(label, default=default, instruction=f.help or None, style=STYLE).ask()


def _ask_trigger(triggers: list[Trigger]) -> Trigger | None:
    choices = [Choice(t.label, t) for t in triggers]
    return questionary.select("Continue:", choices=choices, style=STYLE).ask()