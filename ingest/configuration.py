"""Ingest configuration: the write-once shared storage of a wizard session."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ingest.errors import ConfigurationError


class IngestConfiguration(BaseModel):
    """What to build. Unknown keys are kept so plugins can read their own settings."""

    model_config = ConfigDict(frozen=True, extra="allow")

    models: list[str] = Field(default_factory=list)
    collections: list[str] = Field(default_factory=list)
    label: str | None = None
    namespace: str | None = None
    id: str | None = None
    parent: str | None = None

    def get(self, key: str, default: Any = None) -> Any:
        """Read a declared or extra key."""
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)


def validate_configuration(
    configuration: IngestConfiguration | Mapping[str, Any] | None,
) -> IngestConfiguration:
    """Coerce and validate configuration. Raises ConfigurationError when models are missing."""
    if configuration is None:
        raise ConfigurationError("Ingest configuration not valid, no models were given")
    if isinstance(configuration, IngestConfiguration):
        config = configuration
    else:
        try:
            config = IngestConfiguration.model_validate(dict(configuration))
        except ValidationError as e:
            raise ConfigurationError(f"Ingest configuration not valid: {e}") from e
    if not config.models:
        raise ConfigurationError("Ingest configuration not valid, no models were given")
    return config
