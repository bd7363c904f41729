"""Metadata step: offered for every model through the generic hook."""

from pathlib import Path
from typing import Any

from ingest.models import Step, StepHandlers
from ingest.session import SessionState
from ingest.steps.contract import HookKey
from ingest.storage import get_step_storage

STEP_ID = "metadata"


def validate_metadata(state: SessionState, values: dict[str, Any]) -> list[str]:
    if not str(values.get("label", "")).strip():
        return ["Label is required"]
    return []


def submit_metadata(state: SessionState, values: dict[str, Any]) -> None:
    storage = get_step_storage(state, STEP_ID)
    storage.setdefault("original_label", state.object.label)
    state.object.label = str(values["label"]).strip()
    description = str(values.get("description", "")).strip()
    if description:
        state.object.properties["description"] = description


def undo_metadata(state: SessionState, values: dict[str, Any]) -> None:
    storage = get_step_storage(state, STEP_ID)
    if "original_label" in storage:
        state.object.label = storage["original_label"]
    state.object.properties.pop("description", None)


class BasicMetadataSteps:
    def __init__(self) -> None:
        self._weight = 0

    def configure(self, config: dict[str, Any]) -> None:
        self._weight = int(config.get("weight", 0))

    def get_ingest_steps(self, hook: HookKey, state: SessionState) -> dict[str, Step] | None:
        if hook.model is not None:
            return None
        return {
            STEP_ID: Step(
                id=STEP_ID,
                weight=self._weight,
                action_reference="metadata_form",
                required_resource=str(Path(__file__).with_name("forms.py")),
                handlers=StepHandlers(
                    validate=validate_metadata,
                    submit=submit_metadata,
                    undo=undo_metadata,
                ),
            )
        }
