"""Local-only reconciliation for pull operations.

When a helper reports that an item exists locally but not on the remote
service, the item is queued as a local-only candidate. Once the helper's
pull has returned, the reconciler decides which candidates to delete:

- Quiet mode: every candidate is deleted without asking
- Interactive mode: the user confirms each candidate, all prompts first,
  then only the confirmed candidates are deleted

Each deletion is attempted independently. Failures are logged and counted
and never stop the remaining candidates.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from src.sync_engine.models import LocalOnlyCandidate, ReconcileResult

logger = logging.getLogger(__name__)

DeleteFn = Callable[[Any, Any, Dict[str, Any]], Any]
AfterDeleteFn = Callable[[Any, Any, Dict[str, Any]], Any]


class Confirmer(Protocol):
    """Asks whether each local-only candidate should be deleted.

    Implementations return a mapping from candidate key (id, falling back to
    path) to the answer. Missing keys count as "no".
    """

    def confirm(self, candidates: Sequence[LocalOnlyCandidate]) -> Dict[str, bool]:
        ...


class AutoConfirmer:
    """Confirmer that gives the same answer for every candidate.

    Used for batch runs and as a test double.
    """

    def __init__(self, answer: bool = False):
        self.answer = answer
        self.asked: List[str] = []

    def confirm(self, candidates: Sequence[LocalOnlyCandidate]) -> Dict[str, bool]:
        keys = [candidate.key for candidate in candidates if candidate.key]
        self.asked.extend(keys)
        return {key: self.answer for key in keys}


class LocalOnlyReconciler:
    """Deletes local-only items, with or without confirmation.

    Example:
        >>> reconciler = LocalOnlyReconciler(confirmer=AutoConfirmer(True))
        >>> result = reconciler.reconcile(context, candidates, helper.delete_local_item, quiet=False)
        >>> print(f"Deleted {result.deleted}, failed {result.failed}")
    """

    def __init__(self, confirmer: Optional[Confirmer] = None):
        """Initialize reconciler.

        Args:
            confirmer: Confirmer used in interactive mode. Without one,
                interactive mode deletes nothing.
        """
        self.confirmer = confirmer
        logger.debug("LocalOnlyReconciler initialized")

    def reconcile(
        self,
        context: Any,
        candidates: Sequence[LocalOnlyCandidate],
        delete_fn: DeleteFn,
        quiet: bool = False,
        options: Optional[Dict[str, Any]] = None,
        noun: str = "item",
        after_delete: Optional[AfterDeleteFn] = None,
    ) -> ReconcileResult:
        """Delete the local-only candidates the mode allows.

        Args:
            context: Sync context passed through to delete_fn
            candidates: Candidates queued during the helper's operation
            delete_fn: Helper function deleting one local item or resource
            quiet: If True, delete every candidate without prompting
            options: Helper options passed through to delete_fn
            noun: Item noun used in log messages
            after_delete: Optional hook called for each deleted candidate

        Returns:
            ReconcileResult with deleted, failed, skipped and invalid counts
        """
        options = options or {}
        result = ReconcileResult()

        if not candidates:
            logger.debug("No local-only candidates to reconcile")
            return result

        logger.info(
            f"Reconciling {len(candidates)} local-only {noun}(s) "
            f"(quiet={quiet})"
        )

        valid = []
        for candidate in candidates:
            if candidate.is_valid:
                valid.append(candidate)
            else:
                result.invalid += 1
                logger.warning(
                    f"Invalid local-only entry ({candidate.item.label}): "
                    f"no id or path, skipping"
                )

        if quiet:
            to_delete = valid
        else:
            to_delete = self._confirmed(valid)
            result.skipped = len(valid) - len(to_delete)

        for candidate in to_delete:
            self._delete_one(context, candidate, delete_fn, options, noun, after_delete, result)

        logger.info(
            f"Local-only reconciliation complete: "
            f"{result.deleted} deleted, {result.failed} failed, "
            f"{result.skipped} kept, {result.invalid} invalid"
        )
        return result

    def _confirmed(self, candidates: List[LocalOnlyCandidate]) -> List[LocalOnlyCandidate]:
        if not candidates:
            return []
        if self.confirmer is None:
            logger.warning(
                f"No confirmer available, keeping {len(candidates)} local-only item(s)"
            )
            return []

        answers = self.confirmer.confirm(candidates)
        return [candidate for candidate in candidates if answers.get(candidate.key) is True]

    def _delete_one(
        self,
        context: Any,
        candidate: LocalOnlyCandidate,
        delete_fn: DeleteFn,
        options: Dict[str, Any],
        noun: str,
        after_delete: Optional[AfterDeleteFn],
        result: ReconcileResult,
    ) -> None:
        item = candidate.item
        target = item.raw if item.raw is not None else item
        try:
            delete_fn(context, target, options)
        except Exception as e:
            result.failed += 1
            if item.id:
                logger.error(f"Failed to delete local {noun} {item.label} ({item.key}): {e}")
            else:
                logger.error(f"Failed to delete local file {item.path}: {e}")
            return

        result.deleted += 1
        result.deleted_items.append(item)
        if item.id:
            logger.info(f"Deleted local {noun} {item.label} ({item.key})")
        else:
            logger.info(f"Deleted local file {item.path}")

        if after_delete is not None:
            try:
                after_delete(context, target, options)
            except Exception as e:
                logger.error(f"Cleanup after deleting {noun} {item.label} failed: {e}")
