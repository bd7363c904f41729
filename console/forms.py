"""Form description returned by the bundled step actions and rendered by the console."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class FormField(BaseModel):
    name: str
    label: str
    kind: Literal["text", "select", "confirm"] = "text"
    required: bool = False
    default: Any = None
    choices: list[str] = Field(default_factory=list)
    help: str = ""


class StepForm(BaseModel):
    title: str
    description: str = ""
    fields: list[FormField] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
