"""Generic per-type operation runner.

One runner invocation drives one helper call for one artifact type:

1. Resolve the helper and capability for the type
2. Subscribe scoped event handlers that count outcomes into an accumulator
3. Call the helper method matching the operation and options
4. For a pull with deletions requested, reconcile queued local-only items
5. Unsubscribe every handler, whatever happened in steps 3-4

If the helper call raises, the counts observed so far are kept in the
partial outcome attached to the TypeOperationError that is raised.
"""

import dataclasses
import logging
import os
import shutil
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.sync_engine.capabilities import ArtifactCapability, HelperRegistry
from src.sync_engine.context import SyncContext
from src.sync_engine.errors import OperationNotSupportedError, TypeOperationError
from src.sync_engine.events import EventKind, Handler, ItemEvent
from src.sync_engine.models import (
    ArtifactType,
    ArtifactTypeSelector,
    AssetScope,
    LocalOnlyCandidate,
    OperationKind,
    ReconcileResult,
    SyncOptions,
    TypeOutcome,
)
from src.sync_engine.reconciler import LocalOnlyReconciler

logger = logging.getLogger(__name__)


class _RunAccumulator:
    """Counts and candidates collected during one type's run."""

    def __init__(self, context: SyncContext, capability: ArtifactCapability, operation: OperationKind):
        self.context = context
        self.capability = capability
        self.operation = operation
        self.succeeded = 0
        self.failed = 0
        self.warnings = 0
        self.item_candidates: List[LocalOnlyCandidate] = []
        self.resource_candidates: List[LocalOnlyCandidate] = []
        # Updated after each reconciled batch so a later failure keeps it
        self.reconciled = ReconcileResult()

    def handlers(self) -> Dict[EventKind, Handler]:
        handlers: Dict[EventKind, Handler] = {
            EventKind.SYNCED: self._on_synced,
            EventKind.SYNCED_WITH_WARNING: self._on_warning,
            EventKind.SYNC_FAILED: self._on_failed,
            EventKind.RESOURCE_SYNCED: self._on_synced,
            EventKind.RESOURCE_SYNC_FAILED: self._on_failed,
            EventKind.LOCAL_ONLY: self._on_local_only,
            EventKind.RESOURCE_LOCAL_ONLY: self._on_local_only,
        }
        if self.operation == OperationKind.COMPARE:
            handlers.update({
                EventKind.DIFF: self._on_compare,
                EventKind.ADDED: self._on_compare,
                EventKind.REMOVED: self._on_compare,
            })
        return handlers

    def _noun(self, event: ItemEvent) -> str:
        if event.kind in (EventKind.RESOURCE_SYNCED, EventKind.RESOURCE_SYNC_FAILED):
            return "resource"
        return self.capability.singular

    def _on_synced(self, event: ItemEvent) -> None:
        self.succeeded += 1
        self.context.tally.items_succeeded += 1
        logger.info(
            f"{self._noun(event).capitalize()} {self.operation.past_tense}: {event.item.label}"
        )

    def _on_warning(self, event: ItemEvent) -> None:
        self.warnings += 1
        self.context.tally.items_warned += 1
        detail = f": {event.error_message}" if event.error is not None else ""
        logger.warning(
            f"{self._noun(event).capitalize()} {event.item.label} "
            f"{self.operation.past_tense} with a warning{detail}"
        )

    def _on_failed(self, event: ItemEvent) -> None:
        self.failed += 1
        self.context.tally.items_failed += 1
        logger.error(
            f"Error: {self._noun(event)} {event.item.label} could not be "
            f"{self.operation.past_tense}: {event.error_message or 'unknown error'}"
        )

    def _on_local_only(self, event: ItemEvent) -> None:
        if self.context.is_protected(event.item.path):
            logger.debug(f"Keeping manifest file {event.item.path}")
            return
        is_resource = event.kind == EventKind.RESOURCE_LOCAL_ONLY
        candidate = LocalOnlyCandidate(event.item, is_resource=is_resource)
        if is_resource:
            self.resource_candidates.append(candidate)
        else:
            self.item_candidates.append(candidate)

    def _on_compare(self, event: ItemEvent) -> None:
        logger.info(f"{self.capability.singular.capitalize()} {event.kind.value}: {event.item.label}")

    def outcome(
        self,
        artifact_type: ArtifactType,
        compared: Tuple[int, int] = (0, 0),
        site_id: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> TypeOutcome:
        reconciled = self.reconciled
        return TypeOutcome(
            artifact_type=artifact_type,
            succeeded_count=self.succeeded,
            failed_count=self.failed,
            warning_count=self.warnings,
            deleted_count=reconciled.deleted,
            delete_failed_count=reconciled.failed,
            diff_count=compared[0],
            total_count=compared[1],
            site_id=site_id,
            error=error,
        )


class TypeOperationRunner:
    """Runs one operation for one artifact type through its helper.

    Example:
        >>> runner = TypeOperationRunner(registry, LocalOnlyReconciler(confirmer))
        >>> outcome = runner.run(context, ArtifactTypeSelector.of("assets"), OperationKind.PULL)
        >>> print(f"{outcome.succeeded_count} pulled, {outcome.failed_count} failed")
    """

    def __init__(self, registry: HelperRegistry, reconciler: Optional[LocalOnlyReconciler] = None):
        self.registry = registry
        self.reconciler = reconciler or LocalOnlyReconciler()

    def run(
        self,
        context: SyncContext,
        selector: ArtifactTypeSelector,
        operation: OperationKind,
        options: Optional[SyncOptions] = None,
    ) -> TypeOutcome:
        """Run ``operation`` for the selected type.

        Args:
            context: Sync context shared by the invocation
            selector: Artifact type to run, with its narrowing flags
            operation: Operation to run
            options: Options for the invocation

        Returns:
            TypeOutcome with the counts observed during the run

        Raises:
            TypeOperationError: If the helper call failed; carries the
                partial outcome and chains the original error
        """
        options = options or SyncOptions()
        operation = OperationKind(operation)
        capability, helper = self.registry.resolve(selector.artifact_type)
        helper_options = self._helper_options(selector, options)
        accumulator = _RunAccumulator(context, capability, operation)
        compared = (0, 0)
        deleting = operation == OperationKind.PULL and options.deletions

        logger.info(capability.heading(_progressive(operation)))

        with context.event_bus.subscribed(accumulator.handlers()):
            try:
                if deleting:
                    self._protect_manifests(context, helper, options, helper_options)
                result = self._invoke(helper, capability, context, operation, options, helper_options)
                if operation == OperationKind.COMPARE:
                    compared = _compare_counts(result)
                elif deleting:
                    self._reconcile(context, helper, capability, accumulator, options, helper_options)
            except Exception as e:
                outcome = accumulator.outcome(selector.artifact_type, compared, options.site_id, error=e)
                logger.debug(
                    f"{capability.plural} {operation.value} failed after "
                    f"{outcome.succeeded_count} succeeded, {outcome.failed_count} failed"
                )
                raise TypeOperationError(selector.name, e, outcome) from e

        return accumulator.outcome(selector.artifact_type, compared, options.site_id)

    def _helper_options(self, selector: ArtifactTypeSelector, options: SyncOptions) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        if selector.artifact_type == ArtifactType.ASSETS:
            scope = selector.asset_scope or AssetScope.WEB_ASSETS
            overrides["asset_types"] = scope.value
        return options.to_helper_options(**overrides)

    def _invoke(
        self,
        helper: Any,
        capability: ArtifactCapability,
        context: SyncContext,
        operation: OperationKind,
        options: SyncOptions,
        helper_options: Dict[str, Any],
    ) -> Any:
        if operation == OperationKind.COMPARE:
            compare = _method(helper, capability, "compare")
            return compare(context, options.compare_target, options.compare_source, helper_options)

        method_name = _method_name(operation, options)
        method = _method(helper, capability, method_name)
        logger.debug(f"Calling {type(helper).__name__}.{method_name}")
        return method(context, helper_options)

    def _protect_manifests(
        self,
        context: SyncContext,
        helper: Any,
        options: SyncOptions,
        helper_options: Dict[str, Any],
    ) -> None:
        """Protect the local files of manifests written during this pull.

        The helper knows where a named manifest lives; without a
        ``get_manifest_path`` method the name is taken as a path.
        """
        get_manifest_path = getattr(helper, "get_manifest_path", None)
        for name in (options.write_manifest, options.deletions_manifest):
            if not name:
                continue
            path = get_manifest_path(context, name, helper_options) if callable(get_manifest_path) else name
            if path:
                context.protect_path(path)
                logger.debug(f"Protecting manifest file {path} from local deletion")

    def _reconcile(
        self,
        context: SyncContext,
        helper: Any,
        capability: ArtifactCapability,
        accumulator: _RunAccumulator,
        options: SyncOptions,
        helper_options: Dict[str, Any],
    ) -> None:
        batches = []
        if accumulator.item_candidates:
            after_delete = None
            if capability.artifact_type == ArtifactType.SITES and hasattr(helper, "get_site_folder"):
                after_delete = _site_folder_remover(helper)
            batches.append((
                accumulator.item_candidates,
                _method(helper, capability, "delete_local_item"),
                capability.singular,
                after_delete,
            ))
        if accumulator.resource_candidates:
            batches.append((
                accumulator.resource_candidates,
                _method(helper, capability, "delete_local_resource"),
                "resource",
                None,
            ))

        for candidates, delete_fn, noun, after_delete in batches:
            result = self.reconciler.reconcile(
                context,
                candidates,
                delete_fn,
                quiet=options.quiet,
                options=helper_options,
                noun=noun,
                after_delete=after_delete,
            )
            accumulator.reconciled = accumulator.reconciled.merge(result)


def _progressive(operation: OperationKind) -> str:
    return {
        OperationKind.PULL: "pulling",
        OperationKind.PUSH: "pushing",
        OperationKind.DELETE: "deleting",
        OperationKind.COMPARE: "comparing",
    }[operation]


def _method_name(operation: OperationKind, options: SyncOptions) -> str:
    if operation == OperationKind.DELETE:
        return "delete_remote_items"
    prefix = operation.value
    if options.manifest:
        return f"{prefix}_manifest_items"
    if options.ignore_timestamps or (operation == OperationKind.PULL and options.deletions):
        return f"{prefix}_all_items"
    return f"{prefix}_modified_items"


def _method(helper: Any, capability: ArtifactCapability, name: str) -> Callable[..., Any]:
    method = getattr(helper, name, None)
    if not callable(method):
        raise OperationNotSupportedError(capability.artifact_type.value, name)
    return method


def _compare_counts(result: Any) -> Tuple[int, int]:
    if result is None:
        return 0, 0
    if isinstance(result, dict):
        diff = result.get("diff_count", result.get("diffCount", 0))
        total = result.get("total_count", result.get("totalCount", 0))
    else:
        diff = getattr(result, "diff_count", getattr(result, "diffCount", 0))
        total = getattr(result, "total_count", getattr(result, "totalCount", 0))
    return int(diff or 0), int(total or 0)


def _site_folder_remover(helper: Any) -> Callable[[Any, Any, Dict[str, Any]], None]:
    """Build the hook removing a deleted site's pages folder."""

    def remove(context: Any, site: Any, options: Dict[str, Any]) -> None:
        folder = helper.get_site_folder(context, site, options)
        if folder and os.path.isdir(folder):
            shutil.rmtree(folder)
            logger.info(f"Deleted pages folder {folder} of deleted site")

    return remove


def with_site(options: SyncOptions, site_id: Optional[str]) -> SyncOptions:
    """Return a copy of ``options`` scoped to one site."""
    return dataclasses.replace(options, site_id=site_id)
