"""Ingest step engine: plugin-contributed wizard steps, navigation, per-step storage, commit."""

from ingest.configuration import IngestConfiguration, validate_configuration
from ingest.engine import (
    CommitFailure,
    CommitReport,
    CommittedObject,
    StepContext,
    StepView,
    Trigger,
    WizardEngine,
    WizardRequest,
    WizardResult,
)
from ingest.errors import (
    CommitError,
    ConfigurationError,
    IngestError,
    StepActionError,
    StepNotFoundError,
)
from ingest.models import (
    ConstructionTarget,
    Relationship,
    Step,
    StepHandlers,
    StepKind,
    StepOrdering,
)
from ingest.navigation import NavigationController
from ingest.repository import MemoryRepository, Repository
from ingest.session import (
    DefaultObjectFactory,
    ObjectFactory,
    SessionState,
    initialize_session,
    prepare_new_object,
)
from ingest.steps import StepRegistry

__all__ = [
    "CommitError",
    "CommitFailure",
    "CommitReport",
    "CommittedObject",
    "ConfigurationError",
    "ConstructionTarget",
    "DefaultObjectFactory",
    "IngestConfiguration",
    "IngestError",
    "MemoryRepository",
    "NavigationController",
    "ObjectFactory",
    "Relationship",
    "Repository",
    "SessionState",
    "Step",
    "StepActionError",
    "StepContext",
    "StepHandlers",
    "StepKind",
    "StepNotFoundError",
    "StepOrdering",
    "StepRegistry",
    "StepView",
    "Trigger",
    "WizardEngine",
    "WizardRequest",
    "WizardResult",
    "initialize_session",
    "prepare_new_object",
    "validate_configuration",
]
