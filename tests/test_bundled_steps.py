"""End-to-end runs of the step plugins shipped in sandbox/steps."""

from pathlib import Path

import pytest

from console.forms import StepForm
from console.runner import build_engine
from ingest.engine import Trigger, WizardEngine, WizardRequest
from ingest.settings import get_default_settings

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_CONFIG = {"models": ["ingest:basicCModel"], "label": "Doc"}


@pytest.fixture
def engine() -> WizardEngine:
    return build_engine(_PROJECT_ROOT, get_default_settings())


@pytest.fixture
def upload(tmp_path: Path) -> Path:
    path = tmp_path / "thesis.pdf"
    path.write_bytes(b"%PDF-1.4\n")
    return path


def test_metadata_then_files_then_ingest(engine: WizardEngine, upload: Path) -> None:
    result = engine.handle(None, _CONFIG)
    state = result.state
    assert result.view.step_id == "metadata"
    assert isinstance(result.view.form, StepForm)
    assert result.view.form.fields[0].default == "Doc"
    assert "A file will be requested on the next page." in result.view.form.notes

    result = engine.handle(state, _CONFIG, WizardRequest(Trigger.NEXT, {"label": "  "}))
    assert result.view.step_id == "metadata"
    assert result.errors == ["Label is required"]

    result = engine.handle(
        state, _CONFIG, WizardRequest(Trigger.NEXT, {"label": "My thesis", "description": "d"})
    )
    assert result.view.step_id == "files"
    assert result.triggers == [Trigger.PREVIOUS, Trigger.INGEST]
    assert state.object.label == "My thesis"

    result = engine.handle(state, _CONFIG, WizardRequest(Trigger.INGEST, {"path": "/no/such/file"}))
    assert result.status == "form"
    assert result.errors and "not a readable file" in result.errors[0]

    result = engine.handle(state, _CONFIG, WizardRequest(Trigger.INGEST, {"path": str(upload)}))
    assert result.status == "committed"
    assert result.commit.ok
    (committed,) = result.commit.committed
    assert committed.label == "My thesis"
    assert committed.location == f"objects/{state.object.id}"
    assert state.object.properties["files"] == [str(upload.resolve())]
    assert state.object.properties["description"] == "d"


def test_going_back_undoes_metadata(engine: WizardEngine) -> None:
    state = engine.handle(None, _CONFIG).state
    engine.handle(state, _CONFIG, WizardRequest(Trigger.NEXT, {"label": "Renamed", "description": "d"}))
    assert state.object.label == "Renamed"

    result = engine.handle(state, _CONFIG, WizardRequest(Trigger.PREVIOUS, {}))
    assert result.view.step_id == "metadata"
    assert state.object.label == "Doc"
    assert "description" not in state.object.properties
    assert result.view.form.fields[0].default == "Renamed"


def test_skip_files_drops_step(engine: WizardEngine) -> None:
    config = {**_CONFIG, "skip_files": True}
    result = engine.handle(None, config)
    assert engine.registry.build_steps(result.state).ids() == ("metadata",)
    assert result.triggers == [Trigger.INGEST]
    assert result.view.form.notes == []


def test_other_model_gets_metadata_only(engine: WizardEngine) -> None:
    result = engine.handle(None, {"models": ["demo:imageCModel"]})
    assert engine.registry.approximate_steps({"models": ["demo:imageCModel"]}).ids() == (
        "metadata",
    )
    assert result.triggers == [Trigger.INGEST]
    assert result.view.form.notes == []
