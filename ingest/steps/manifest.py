"""Step plugin manifest: Pydantic model and YAML loader.

Capabilities are determined by protocols the class implements, not by a manifest field.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class ProviderManifest(BaseModel):
    """Manifest schema for <steps_dir>/<id>/manifest.yaml."""

    id: str
    name: str
    version: str = "1.0.0"
    entrypoint: str  # module:ClassName
    description: str = ""
    # Documentation only: models whose hooks this plugin answers
    models: list[str] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True

    @field_validator("entrypoint")
    @classmethod
    def _validate_entrypoint(cls, v: str) -> str:
        module_name, sep, class_name = v.partition(":")
        if not sep or not module_name or not class_name:
            raise ValueError(f"entrypoint must be 'module:ClassName', got {v!r}")
        return v


def load_manifest(path: Path) -> ProviderManifest:
    """Read and validate manifest.yaml. Raises on invalid YAML or validation error."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a YAML object: {path}")
    return ProviderManifest.model_validate(data)
