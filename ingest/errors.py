"""Error taxonomy for the ingest step engine."""


class IngestError(Exception):
    """Base class for all step engine errors."""


class ConfigurationError(IngestError):
    """Required ingest configuration is missing or invalid. Fatal for the wizard."""


class CommitError(IngestError):
    """Repository refused to persist an object. Reported per object, never fatal."""


class StepActionError(IngestError):
    """An interactive step's action could not be resolved to a callable."""


class StepNotFoundError(IngestError, KeyError):
    """Lookup of a step id that is not part of the ordering."""

    def __init__(self, step_id: str) -> None:
        super().__init__(step_id)
        self.step_id = step_id

    def __str__(self) -> str:
        return f"Unknown step: {self.step_id!r}"
