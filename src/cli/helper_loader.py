"""Loading artifact helpers from "module:attribute" references."""

import importlib
import inspect
import logging
from typing import Any, Mapping

from src.sync_engine.capabilities import HelperRegistry
from src.sync_engine.models import ArtifactType

from .errors import HelperLoadError

logger = logging.getLogger(__name__)


class HelperLoader:
    """Builds a HelperRegistry from configured helper references.

    A reference names a module and an attribute in it, for example
    ``my_helpers.assets:AssetsHelper``. A class is instantiated with no
    arguments; any other object (module-level instance, module) is used
    as-is.

    Example:
        >>> registry = HelperLoader().load({"assets": "my_helpers.assets:AssetsHelper"})
        >>> ArtifactType.ASSETS in registry
        True
    """

    def load(self, references: Mapping[str, str]) -> HelperRegistry:
        """Import every referenced helper.

        Raises:
            HelperLoadError: If a reference is malformed or cannot be imported
        """
        registry = HelperRegistry()
        for name, reference in references.items():
            try:
                artifact_type = ArtifactType(name)
            except ValueError:
                raise HelperLoadError(name, reference, "unknown artifact type")
            registry.register(artifact_type, self.load_one(name, reference))
        logger.info(f"Loaded {len(registry.registered_types())} helper(s)")
        return registry

    def load_one(self, name: str, reference: str) -> Any:
        module_name, _, attribute = reference.partition(':')
        module_name = module_name.strip()
        attribute = attribute.strip()
        if not module_name or not attribute:
            raise HelperLoadError(name, reference, "expected 'module:attribute'")

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise HelperLoadError(name, reference, str(e)) from e

        target = module
        for part in attribute.split('.'):
            try:
                target = getattr(target, part)
            except AttributeError:
                raise HelperLoadError(name, reference, f"module has no attribute '{attribute}'")

        if inspect.isclass(target):
            try:
                target = target()
            except Exception as e:
                raise HelperLoadError(name, reference, f"cannot create helper: {e}") from e

        logger.debug(f"Loaded helper for '{name}' from {reference}")
        return target
