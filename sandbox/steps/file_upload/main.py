"""Files step for selected models; also drops itself when the configuration says so."""

from pathlib import Path
from typing import Any

from console.forms import FormField, StepForm
from ingest.models import Step, StepHandlers
from ingest.session import SessionState
from ingest.steps.contract import HookKey

STEP_ID = "files"


def files_form(context, state):
    return StepForm(
        title="Attach a file",
        description=f"Objects: {', '.join(o.id for o in state.objects)}",
        fields=[
            FormField(
                name="path",
                label="File path",
                required=True,
                default=context.values.get("path", ""),
            )
        ],
    )


def validate_files(state: SessionState, values: dict[str, Any]) -> list[str]:
    path = str(values.get("path", "")).strip()
    if not path:
        return ["A file is required"]
    if not Path(path).expanduser().is_file():
        return [f"{path} is not a readable file"]
    return []


def submit_files(state: SessionState, values: dict[str, Any]) -> None:
    path = str(Path(str(values["path"]).strip()).expanduser().resolve())
    for obj in state.objects:
        obj.properties["files"] = [path]


def undo_files(state: SessionState, values: dict[str, Any]) -> None:
    for obj in state.objects:
        obj.properties.pop("files", None)


class FileUploadSteps:
    def __init__(self) -> None:
        self._weight = 10
        self._models: set[str] = set()

    def configure(self, config: dict[str, Any]) -> None:
        self._weight = int(config.get("weight", 10))
        self._models = set(config.get("models") or [])

    def get_ingest_steps(self, hook: HookKey, state: SessionState) -> list[Step]:
        if hook.model not in self._models:
            return []
        return [
            Step(
                id=STEP_ID,
                weight=self._weight,
                action_reference=f"{__name__}:files_form",
                handlers=StepHandlers(
                    validate=validate_files,
                    submit=submit_files,
                    undo=undo_files,
                ),
            )
        ]

    def alter_ingest_steps(
        self, hook: HookKey, steps: dict[str, Step], state: SessionState
    ) -> None:
        if state.shared_storage.get("skip_files"):
            steps.pop(STEP_ID, None)

    def alter_step_form(self, action_reference: str, view: Any, state: SessionState) -> None:
        if action_reference != "metadata_form" or not isinstance(view.form, StepForm):
            return
        if self._models.intersection(state.models) and not state.shared_storage.get("skip_files"):
            view.form.notes.append("A file will be requested on the next page.")
