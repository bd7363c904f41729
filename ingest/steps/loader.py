"""ProviderLoader: discover step plugins on disk, import and instantiate them."""

import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any

from ingest.steps.contract import (
    ConfigurableProvider,
    FormAlterProvider,
    StepAlterProvider,
    StepProvider,
)
from ingest.steps.manifest import ProviderManifest, load_manifest

logger = logging.getLogger(__name__)

_CAPABILITIES = (
    ("steps", StepProvider),
    ("alter", StepAlterProvider),
    ("form_alter", FormAlterProvider),
)


class ProviderLoader:
    """Plugin lifecycle: discover -> load -> configure. Registration order = directory name order."""

    def __init__(self, steps_dir: Path) -> None:
        self._steps_dir = steps_dir
        self._manifests: list[ProviderManifest] = []
        self._providers: dict[str, Any] = {}

    @property
    def manifests(self) -> list[ProviderManifest]:
        return list(self._manifests)

    @property
    def providers(self) -> list[Any]:
        return list(self._providers.values())

    def discover(self) -> None:
        """Scan steps_dir for manifest.yaml; load and filter enabled."""
        self._manifests = []
        if not self._steps_dir.exists():
            logger.warning("Steps directory %s does not exist", self._steps_dir)
            return
        for d in sorted(self._steps_dir.iterdir()):
            if not d.is_dir():
                continue
            manifest_path = d / "manifest.yaml"
            if not manifest_path.exists():
                continue
            try:
                manifest = load_manifest(manifest_path)
            except Exception as e:
                logger.exception("Invalid manifest %s: %s", manifest_path, e)
                continue
            if manifest.enabled:
                self._manifests.append(manifest)
            else:
                logger.info("Step plugin %s is disabled", manifest.id)

    def load_all(self) -> list[Any]:
        """Import each discovered plugin and instantiate its entrypoint class. Skip on failure."""
        self._providers = {}
        for manifest in self._manifests:
            try:
                provider = self._load_one(manifest)
            except Exception as e:
                logger.exception("Failed to load step plugin %s: %s", manifest.id, e)
                continue
            if isinstance(provider, ConfigurableProvider):
                try:
                    provider.configure(dict(manifest.config))
                except Exception as e:
                    logger.exception("configure failed for %s: %s", manifest.id, e)
                    continue
            caps = [name for name, proto in _CAPABILITIES if isinstance(provider, proto)]
            if not caps:
                logger.warning("Step plugin %s implements no provider protocol", manifest.id)
                continue
            self._providers[manifest.id] = provider
            logger.info("Loaded step plugin %s (%s)", manifest.id, ", ".join(caps))
        return self.providers

    def _load_one(self, manifest: ProviderManifest) -> Any:
        plugin_dir = self._steps_dir / manifest.id
        module_name, class_name = manifest.entrypoint.split(":", 1)
        py_path = plugin_dir / f"{module_name}.py"
        if not py_path.exists():
            raise FileNotFoundError(f"{py_path} not found")
        spec = importlib.util.spec_from_file_location(
            f"steps_{manifest.id}_{module_name}", py_path
        )
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load {py_path}")
        mod = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = mod
        spec.loader.exec_module(mod)
        cls = getattr(mod, class_name)
        return cls()
