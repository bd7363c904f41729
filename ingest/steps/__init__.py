"""Step plugins: contract, manifest, loader, action resolution, registry."""

from ingest.steps.actions import ActionResolver
from ingest.steps.contract import (
    STEP_HOOK,
    ConfigurableProvider,
    FormAlterProvider,
    HookKey,
    StepAlterProvider,
    StepProvider,
    build_hook_list,
)
from ingest.steps.loader import ProviderLoader
from ingest.steps.manifest import ProviderManifest, load_manifest
from ingest.steps.registry import StepCache, StepRegistry

__all__ = [
    "STEP_HOOK",
    "ActionResolver",
    "ConfigurableProvider",
    "FormAlterProvider",
    "HookKey",
    "ProviderLoader",
    "ProviderManifest",
    "StepAlterProvider",
    "StepCache",
    "StepProvider",
    "StepRegistry",
    "build_hook_list",
    "load_manifest",
]
