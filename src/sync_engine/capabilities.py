"""Artifact type capability table and helper registry.

Every artifact type is driven by the same generic runner. What differs
between types (names used in messages, whether the type has resources,
whether it exists on a base-tier service) lives in the CAPABILITIES table
below; the type-specific remote and filesystem work lives in a helper
object registered for the type.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from src.sync_engine.errors import UnknownArtifactTypeError
from src.sync_engine.models import ArtifactType, ArtifactTypeSelector

logger = logging.getLogger(__name__)


@runtime_checkable
class ArtifactHelper(Protocol):
    """Contract a helper offers to the sync engine.

    Only the methods an operation needs must exist; the runner raises
    OperationNotSupportedError for a missing one. Helpers report per-item
    outcomes by emitting events on ``context.event_bus`` and raise only when
    the whole operation fails (for example, when listing remote items
    fails).

    Pull/push/delete methods take ``(context, options)`` and return the list
    of items processed. ``delete_local_item`` and ``delete_local_resource``
    take ``(context, item, options)``. ``compare`` takes
    ``(context, target, source, options)`` and returns a mapping or object
    carrying ``diff_count`` and ``total_count``.

    Optional manifest support: ``get_manifest_path(context, name, options)``
    returns the local path of a named manifest, so a manifest being written
    is never deleted as a local-only item, and
    ``save_manifests(context, options)`` is called once after a pull or
    compare that was not aborted. The options carry ``write_manifest`` and
    ``deletions_manifest`` when those are requested.
    """

    def pull_all_items(self, context: Any, options: Dict[str, Any]) -> List[Any]:
        ...

    def pull_modified_items(self, context: Any, options: Dict[str, Any]) -> List[Any]:
        ...

    def delete_local_item(self, context: Any, item: Any, options: Dict[str, Any]) -> None:
        ...


@dataclass(frozen=True)
class ArtifactCapability:
    """Static description of one artifact type.

    Attributes:
        artifact_type: Artifact type described
        singular: Noun for one item, used in log messages
        plural: Noun for many items, used in headings
        supports_resources: Type has binary resources besides its items
        requires_full_tier: Type does not exist on a base-tier service
        depends_on: Type that must be synced first when this one is pulled
    """
    artifact_type: ArtifactType
    singular: str
    plural: str
    supports_resources: bool = False
    requires_full_tier: bool = False
    depends_on: Optional[ArtifactType] = None

    def heading(self, verb: str) -> str:
        return f"========== {verb.capitalize()} {self.plural} =========="


CAPABILITIES: Mapping[ArtifactType, ArtifactCapability] = {
    ArtifactType.IMAGE_PROFILES: ArtifactCapability(
        ArtifactType.IMAGE_PROFILES, "image profile", "image profiles"),
    ArtifactType.CATEGORIES: ArtifactCapability(
        ArtifactType.CATEGORIES, "category", "categories"),
    ArtifactType.ASSETS: ArtifactCapability(
        ArtifactType.ASSETS, "asset", "assets", supports_resources=True),
    ArtifactType.LAYOUTS: ArtifactCapability(
        ArtifactType.LAYOUTS, "layout", "layouts", requires_full_tier=True),
    ArtifactType.LAYOUT_MAPPINGS: ArtifactCapability(
        ArtifactType.LAYOUT_MAPPINGS, "layout mapping", "layout mappings", requires_full_tier=True),
    ArtifactType.RENDITIONS: ArtifactCapability(
        ArtifactType.RENDITIONS, "rendition", "renditions"),
    ArtifactType.TYPES: ArtifactCapability(
        ArtifactType.TYPES, "type", "types"),
    ArtifactType.DEFAULT_CONTENT: ArtifactCapability(
        ArtifactType.DEFAULT_CONTENT, "default content item", "default content"),
    ArtifactType.CONTENT: ArtifactCapability(
        ArtifactType.CONTENT, "content item", "content"),
    ArtifactType.SITES: ArtifactCapability(
        ArtifactType.SITES, "site", "sites", requires_full_tier=True),
    ArtifactType.PAGES: ArtifactCapability(
        ArtifactType.PAGES, "page", "pages", requires_full_tier=True,
        depends_on=ArtifactType.SITES),
    ArtifactType.PUBLISHING_PROFILES: ArtifactCapability(
        ArtifactType.PUBLISHING_PROFILES, "publishing profile", "publishing profiles"),
    ArtifactType.SITE_REVISIONS: ArtifactCapability(
        ArtifactType.SITE_REVISIONS, "site revision", "site revisions"),
    ArtifactType.PUBLISHING_SOURCES: ArtifactCapability(
        ArtifactType.PUBLISHING_SOURCES, "publishing source", "publishing sources"),
}


def get_capability(artifact_type: ArtifactType) -> ArtifactCapability:
    try:
        return CAPABILITIES[ArtifactType(artifact_type)]
    except (KeyError, ValueError):
        raise UnknownArtifactTypeError(str(artifact_type), "no capability entry")


def order_selectors(selectors: Iterable[ArtifactTypeSelector]) -> List[ArtifactTypeSelector]:
    """Sort selectors into the fixed priority order, dropping duplicates.

    When the same type is selected more than once, the first selector wins.
    """
    seen = set()
    unique = []
    for selector in selectors:
        if selector.artifact_type in seen:
            logger.debug(f"Ignoring duplicate selection of '{selector.name}'")
            continue
        seen.add(selector.artifact_type)
        unique.append(selector)
    return sorted(unique, key=lambda selector: selector.artifact_type.priority)


class HelperRegistry:
    """Lookup table from artifact type to its helper object.

    Example:
        >>> registry = HelperRegistry({ArtifactType.ASSETS: assets_helper})
        >>> capability, helper = registry.resolve(ArtifactType.ASSETS)
    """

    def __init__(self, helpers: Optional[Mapping[Any, Any]] = None):
        self._helpers: Dict[ArtifactType, Any] = {}
        for artifact_type, helper in (helpers or {}).items():
            self.register(artifact_type, helper)

    def register(self, artifact_type: Any, helper: Any) -> None:
        try:
            key = ArtifactType(artifact_type)
        except ValueError:
            raise UnknownArtifactTypeError(str(artifact_type), "cannot register a helper for it")
        self._helpers[key] = helper
        logger.debug(f"Registered helper {type(helper).__name__} for '{key.value}'")

    def __contains__(self, artifact_type: object) -> bool:
        try:
            return ArtifactType(artifact_type) in self._helpers
        except ValueError:
            return False

    def get(self, artifact_type: ArtifactType) -> Any:
        try:
            return self._helpers[ArtifactType(artifact_type)]
        except (KeyError, ValueError):
            raise UnknownArtifactTypeError(str(getattr(artifact_type, "value", artifact_type)), "no helper registered")

    def resolve(self, artifact_type: ArtifactType) -> Tuple[ArtifactCapability, Any]:
        return get_capability(artifact_type), self.get(artifact_type)

    def registered_types(self) -> List[ArtifactType]:
        return sorted(self._helpers, key=lambda artifact_type: artifact_type.priority)
