"""Sync orchestrator driving the per-type runners in priority order.

The orchestrator owns the sync context for one invocation. It sorts the
selected artifact types into the fixed priority order, runs each type
through the TypeOperationRunner one at a time, and folds the outcomes into
a SessionResult. A type-level failure is recorded and the run continues,
unless continue-on-error is off, in which case the run is aborted and the
original error is kept for the reporter.
"""

import logging
import os
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from src.sync_engine.capabilities import HelperRegistry, get_capability, order_selectors
from src.sync_engine.context import SyncContext
from src.sync_engine.errors import SyncError, SyncOptionsError, TypeOperationError
from src.sync_engine.models import (
    ArtifactType,
    ArtifactTypeSelector,
    ItemDescriptor,
    OperationKind,
    SessionResult,
    SyncOptions,
    TypeOutcome,
)
from src.sync_engine.reconciler import Confirmer, LocalOnlyReconciler
from src.sync_engine.runner import TypeOperationRunner, with_site

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """Lifecycle of one orchestrator run."""
    IDLE = "idle"
    RUNNING = "running"
    ABORTED = "aborted"
    COMPLETED = "completed"


class _Abort(Exception):
    """Internal signal ending the type loop after a fatal type failure."""

    def __init__(self, error: BaseException):
        super().__init__(str(error))
        self.error = error


class SyncOrchestrator:
    """Runs the selected artifact types and collects their outcomes.

    Example:
        >>> orchestrator = SyncOrchestrator(TypeOperationRunner(registry), continue_on_error=True)
        >>> session = orchestrator.run(context, [ArtifactTypeSelector.of("assets")], OperationKind.PULL)
        >>> session.total_succeeded
        3
    """

    def __init__(self, runner: TypeOperationRunner, continue_on_error: bool = True):
        """Initialize orchestrator.

        Args:
            runner: Runner used for every artifact type
            continue_on_error: Default policy when a type fails; may be
                overridden per run
        """
        self.runner = runner
        self.continue_on_error = continue_on_error
        self.state = RunState.IDLE

    def run(
        self,
        context: SyncContext,
        selectors: Iterable[ArtifactTypeSelector],
        operation: OperationKind,
        options: Optional[SyncOptions] = None,
        continue_on_error: Optional[bool] = None,
    ) -> SessionResult:
        """Run ``operation`` for every selected artifact type.

        Args:
            context: Sync context for the invocation
            selectors: Selected artifact types, in any order
            operation: Operation to run for each type
            options: Options for the invocation
            continue_on_error: Overrides the orchestrator's default policy

        Returns:
            SessionResult with one outcome per runner invocation

        Raises:
            SyncOptionsError: If the options are contradictory; raised
                before any type runs
        """
        options = options or SyncOptions()
        operation = OperationKind(operation)
        keep_going = self.continue_on_error if continue_on_error is None else continue_on_error

        validate_options(operation, options)

        ordered = self._plan(context, list(selectors), operation)
        session = SessionResult(operation=operation, options=options)

        self.state = RunState.RUNNING
        logger.info(
            f"Starting {operation.value} of {len(ordered)} artifact type(s) "
            f"(continue_on_error={keep_going})"
        )

        try:
            for selector in ordered:
                if selector.artifact_type == ArtifactType.PAGES:
                    self._run_pages(context, selector, operation, options, keep_going, session)
                else:
                    self._run_type(context, selector, operation, options, keep_going, session)
        except _Abort as abort:
            session.aborted = True
            session.abort_error = abort.error
            self.state = RunState.ABORTED
            logger.error(f"Aborting {operation.value}: {abort.error}")
        else:
            self.state = RunState.COMPLETED
            if operation in (OperationKind.PULL, OperationKind.COMPARE):
                self._save_manifests(context, ordered, options)

        logger.info(
            f"{operation.value.capitalize()} finished: {session.total_succeeded} succeeded, "
            f"{session.total_failed} failed, {session.total_deleted} deleted"
        )
        return session

    def _plan(
        self,
        context: SyncContext,
        selectors: List[ArtifactTypeSelector],
        operation: OperationKind,
    ) -> List[ArtifactTypeSelector]:
        selected = {selector.artifact_type for selector in selectors}

        if operation == OperationKind.PULL:
            for selector in list(selectors):
                dependency = get_capability(selector.artifact_type).depends_on
                if dependency is not None and dependency not in selected:
                    logger.info(f"Pulling {dependency.value} as well, {selector.name} depend on it")
                    selectors.append(ArtifactTypeSelector(dependency))
                    selected.add(dependency)

        planned = []
        for selector in order_selectors(selectors):
            if context.base_tier and get_capability(selector.artifact_type).requires_full_tier:
                logger.info(f"Skipping {selector.name}: not available on a base-tier service")
                continue
            planned.append(selector)
        return planned

    def _run_type(
        self,
        context: SyncContext,
        selector: ArtifactTypeSelector,
        operation: OperationKind,
        options: SyncOptions,
        keep_going: bool,
        session: SessionResult,
    ) -> None:
        try:
            outcome = self.runner.run(context, selector, operation, options)
        except TypeOperationError as e:
            self._record_failure(selector, e.outcome, e.cause, keep_going, session)
            return
        except SyncError as e:
            outcome = TypeOutcome(selector.artifact_type, site_id=options.site_id, error=e)
            self._record_failure(selector, outcome, e, keep_going, session)
            return
        session.outcomes.append(outcome)

    def _run_pages(
        self,
        context: SyncContext,
        selector: ArtifactTypeSelector,
        operation: OperationKind,
        options: SyncOptions,
        keep_going: bool,
        session: SessionResult,
    ) -> None:
        if options.site_id:
            site_ids = [options.site_id]
        else:
            try:
                site_ids = self._site_ids(context, options)
            except Exception as e:
                outcome = TypeOutcome(selector.artifact_type, error=e)
                self._record_failure(selector, outcome, e, keep_going, session)
                return

        if not site_ids:
            logger.info("No sites found, skipping pages")
            return

        for site_id in site_ids:
            logger.info(f"Running pages for site {site_id}")
            self._run_type(context, selector, operation, with_site(options, site_id), keep_going, session)

    def _site_ids(self, context: SyncContext, options: SyncOptions) -> List[str]:
        if not context.site_list:
            if ArtifactType.SITES not in self.runner.registry:
                return []
            sites_helper = self.runner.registry.get(ArtifactType.SITES)
            list_sites = getattr(sites_helper, "list_sites", None)
            if callable(list_sites):
                context.site_list = list(list_sites(context, options.to_helper_options()) or [])

        site_ids = []
        for site in context.site_list:
            descriptor = ItemDescriptor.from_item(site)
            site_id = descriptor.id or descriptor.name
            if site_id:
                site_ids.append(site_id)
            else:
                logger.warning(f"Ignoring site without id or name: {site!r}")
        return site_ids

    def _record_failure(
        self,
        selector: ArtifactTypeSelector,
        outcome: TypeOutcome,
        error: BaseException,
        keep_going: bool,
        session: SessionResult,
    ) -> None:
        session.outcomes.append(outcome)
        where = f" (site {outcome.site_id})" if outcome.site_id else ""
        logger.error(f"Error: {selector.name}{where} failed: {error}")
        logger.debug("Type failure detail", exc_info=error)
        if not keep_going:
            raise _Abort(error)

    def _save_manifests(
        self,
        context: SyncContext,
        ordered: List[ArtifactTypeSelector],
        options: SyncOptions,
    ) -> None:
        """Let each helper that ran write out its manifests.

        A failure is logged and never fails the run.
        """
        if not (options.write_manifest or options.deletions_manifest):
            return
        helper_options = options.to_helper_options()
        saved = set()
        for selector in ordered:
            if selector.artifact_type not in self.runner.registry:
                continue
            helper = self.runner.registry.get(selector.artifact_type)
            save_manifests = getattr(helper, "save_manifests", None)
            if not callable(save_manifests) or id(helper) in saved:
                continue
            saved.add(id(helper))
            try:
                save_manifests(context, helper_options)
            except Exception as e:
                logger.error(f"Error saving manifests for {selector.name}: {e}")


def validate_options(operation: OperationKind, options: SyncOptions) -> None:
    """Reject contradictory option combinations before anything runs.

    Raises:
        SyncOptionsError: If the combination is invalid
    """
    if options.manifest and options.deletions:
        raise SyncOptionsError("cannot be combined with --deletions", option="manifest")
    if options.deletions_manifest and not options.deletions:
        raise SyncOptionsError("requires --deletions", option="write-deletions-manifest")
    if operation == OperationKind.COMPARE:
        if not options.compare_source:
            raise SyncOptionsError("compare needs a source", option="source")
        if not options.compare_target:
            raise SyncOptionsError("compare needs a target", option="target")
    if operation != OperationKind.PULL and options.deletions:
        logger.warning(f"--deletions has no effect on {operation.value}")


def run_sync(
    context: SyncContext,
    selectors: Iterable[Union[ArtifactTypeSelector, str, ArtifactType]],
    operation: OperationKind,
    helpers: Union[HelperRegistry, Mapping[Any, Any]],
    options: Optional[SyncOptions] = None,
    continue_on_error: bool = True,
    confirmer: Optional[Confirmer] = None,
) -> SessionResult:
    """Run one sync session with a default runner and reconciler.

    Args:
        context: Sync context for the invocation
        selectors: Selected artifact types (selectors or type names)
        operation: Operation to run
        helpers: Helper registry, or mapping of artifact type to helper
        options: Options for the invocation
        continue_on_error: Keep running the remaining types after a failure
        confirmer: Confirmer for interactive local-only deletion

    Returns:
        SessionResult for the run
    """
    registry = helpers if isinstance(helpers, HelperRegistry) else HelperRegistry(helpers)
    runner = TypeOperationRunner(registry, LocalOnlyReconciler(confirmer))
    orchestrator = SyncOrchestrator(runner, continue_on_error=continue_on_error)
    normalized = [
        selector if isinstance(selector, ArtifactTypeSelector) else ArtifactTypeSelector.of(selector)
        for selector in selectors
    ]
    if context.working_dir and not os.path.isdir(context.working_dir):
        logger.warning(f"Working directory {context.working_dir} does not exist")
    return orchestrator.run(context, normalized, operation, options)
