"""Data models for the sync engine.

This module defines all data models used by the sync engine.
All models use dataclasses for clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, Optional, Union


class ExitCode(IntEnum):
    """Process exit codes.

    - SUCCESS (0): Operation completed, nothing failed
    - GENERAL_ERROR (1): Run aborted, invalid options or unexpected error
    - PARTIAL_FAILURE (2): Run completed but some items or types failed
    - AUTH_ERROR (3): Credentials missing or rejected
    - CONFIG_ERROR (4): Options file or helper configuration is invalid

    Example:
        >>> sys.exit(ExitCode.PARTIAL_FAILURE)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    PARTIAL_FAILURE = 2
    AUTH_ERROR = 3
    CONFIG_ERROR = 4


class ArtifactType(str, Enum):
    """Synchronizable artifact kinds.

    Declaration order is the fixed sync priority: later types may depend on
    artifacts synced by earlier ones (pages need their sites resolved first).
    """
    IMAGE_PROFILES = "image-profiles"
    CATEGORIES = "categories"
    ASSETS = "assets"
    LAYOUTS = "layouts"
    LAYOUT_MAPPINGS = "layout-mappings"
    RENDITIONS = "renditions"
    TYPES = "types"
    DEFAULT_CONTENT = "default-content"
    CONTENT = "content"
    SITES = "sites"
    PAGES = "pages"
    PUBLISHING_PROFILES = "publishing-profiles"
    SITE_REVISIONS = "site-revisions"
    PUBLISHING_SOURCES = "publishing-sources"

    @property
    def priority(self) -> int:
        return list(ArtifactType).index(self)


class AssetScope(str, Enum):
    """Which assets an assets run covers."""
    CONTENT_ASSETS = "content-assets"
    WEB_ASSETS = "web-assets"
    BOTH = "both"


class OperationKind(str, Enum):
    """Operations the orchestrator can run for each artifact type."""
    PULL = "pull"
    PUSH = "push"
    DELETE = "delete"
    COMPARE = "compare"

    @property
    def past_tense(self) -> str:
        return {
            OperationKind.PULL: "pulled",
            OperationKind.PUSH: "pushed",
            OperationKind.DELETE: "deleted",
            OperationKind.COMPARE: "compared",
        }[self]


class SessionStatus(str, Enum):
    """Final status of a sync session."""
    SUCCESS = "success"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    ABORTED = "aborted"
    NOTHING_TO_DO = "nothing_to_do"


@dataclass(frozen=True)
class ArtifactTypeSelector:
    """One requested artifact type plus the flags narrowing it.

    Chosen once per invocation from the command options and never changed
    during the run.

    Attributes:
        artifact_type: The artifact kind to sync
        asset_scope: Which assets to include (only meaningful for assets)

    Example:
        >>> selector = ArtifactTypeSelector(ArtifactType.ASSETS, AssetScope.BOTH)
        >>> selector.name
        'assets'
    """
    artifact_type: ArtifactType
    asset_scope: Optional[AssetScope] = None

    @property
    def name(self) -> str:
        return self.artifact_type.value

    @classmethod
    def of(cls, value: Union[str, ArtifactType], asset_scope: Optional[AssetScope] = None) -> "ArtifactTypeSelector":
        """Build a selector from an artifact type or its string name.

        Raises:
            ValueError: If the name is not a known artifact type
        """
        return cls(ArtifactType(value), asset_scope)


@dataclass(frozen=True)
class SyncOptions:
    """Semantic options produced by the command line for one invocation.

    Attributes:
        ignore_timestamps: Sync every item, not only the modified ones
        deletions: Reconcile local-only items after a pull
        quiet: Delete local-only items without prompting
        verbose: Per-item output goes to the console as well as the log
        manifest: Restrict the operation to the items of this manifest
        write_manifest: Name of a manifest being written during the run
        deletions_manifest: Name of a deletions manifest being written
        site_id: Restrict page operations to this site
        compare_source: Source directory or URL for compare
        compare_target: Target directory or URL for compare
        extra: Additional helper-specific options, passed through untouched
    """
    ignore_timestamps: bool = False
    deletions: bool = False
    quiet: bool = False
    verbose: bool = False
    manifest: Optional[str] = None
    write_manifest: Optional[str] = None
    deletions_manifest: Optional[str] = None
    site_id: Optional[str] = None
    compare_source: Optional[str] = None
    compare_target: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def to_helper_options(self, **overrides: Any) -> Dict[str, Any]:
        """Build the options dict handed to a helper call."""
        opts: Dict[str, Any] = dict(self.extra)
        opts.update({
            "ignore_timestamps": self.ignore_timestamps,
            "deletions": self.deletions,
        })
        if self.manifest:
            opts["manifest"] = self.manifest
        if self.write_manifest:
            opts["write_manifest"] = self.write_manifest
        if self.deletions_manifest:
            opts["deletions_manifest"] = self.deletions_manifest
        if self.site_id:
            opts["site_id"] = self.site_id
        opts.update(overrides)
        return opts


@dataclass
class SyncTally:
    """Mutable per-invocation item counters.

    Written only by the event handlers of the runner that is currently
    active.
    """
    items_succeeded: int = 0
    items_failed: int = 0
    items_warned: int = 0


@dataclass(frozen=True)
class ItemDescriptor:
    """Identity of an item or resource reported by a helper.

    Any subset of id, name and path may be present.

    Attributes:
        id: Remote identifier of the item
        name: Display name of the item
        path: Local path of the item, relative to the working directory
        raw: The object the helper emitted, handed back on delete calls
    """
    id: Optional[str] = None
    name: Optional[str] = None
    path: Optional[str] = None
    raw: Any = None

    @property
    def key(self) -> Optional[str]:
        """Identifier used for prompts: id, falling back to path."""
        return self.id or self.path or None

    @property
    def label(self) -> str:
        return self.name or self.id or self.path or "<unnamed>"

    @classmethod
    def from_item(cls, item: Any) -> "ItemDescriptor":
        """Normalize whatever a helper emitted into a descriptor.

        Accepts descriptors, mappings, plain strings (treated as a name or
        id) and objects with id/name/path attributes. Never raises.
        """
        if isinstance(item, ItemDescriptor):
            return item
        if item is None:
            return cls()
        if isinstance(item, str):
            return cls(id=None, name=item, path=None, raw=item)
        if isinstance(item, Mapping):
            return cls(
                id=_as_text(item.get("id")),
                name=_as_text(item.get("name")),
                path=_as_text(item.get("path")),
                raw=item,
            )
        return cls(
            id=_as_text(getattr(item, "id", None)),
            name=_as_text(getattr(item, "name", None)),
            path=_as_text(getattr(item, "path", None)),
            raw=item,
        )


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        # Localized names, e.g. {"en": "Home"}
        first = next(iter(value.values()), None)
        return str(first) if first is not None else None
    return str(value)


@dataclass(frozen=True)
class LocalOnlyCandidate:
    """An item or resource queued for possible local deletion.

    Created when a LOCAL_ONLY or RESOURCE_LOCAL_ONLY event is observed and
    discarded once the reconciler has applied a decision to it.
    """
    item: ItemDescriptor
    is_resource: bool = False

    @property
    def key(self) -> Optional[str]:
        return self.item.key

    @property
    def is_valid(self) -> bool:
        return self.item.key is not None


@dataclass
class ReconcileResult:
    """Result of reconciling one batch of local-only candidates.

    Attributes:
        deleted: Number of candidates deleted
        failed: Number of delete attempts that failed
        skipped: Number of candidates the user declined
        invalid: Number of candidates with neither id nor path
        deleted_items: Descriptors of the deleted candidates

    Example:
        >>> result = ReconcileResult(deleted=2, failed=1)
        >>> result.attempted
        3
    """
    deleted: int = 0
    failed: int = 0
    skipped: int = 0
    invalid: int = 0
    deleted_items: List[ItemDescriptor] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.deleted + self.failed

    def merge(self, other: "ReconcileResult") -> "ReconcileResult":
        return ReconcileResult(
            deleted=self.deleted + other.deleted,
            failed=self.failed + other.failed,
            skipped=self.skipped + other.skipped,
            invalid=self.invalid + other.invalid,
            deleted_items=self.deleted_items + other.deleted_items,
        )


@dataclass(frozen=True)
class TypeOutcome:
    """Result of one runner invocation for one artifact type.

    succeeded_count and failed_count are exactly the number of success and
    failure events observed during the run. A type-level failure sets
    ``error`` and leaves the counts as they were when it happened.

    Attributes:
        artifact_type: Artifact type that was run
        succeeded_count: Items (and resources) reported as synced
        failed_count: Items (and resources) reported as failed
        warning_count: Items synced with a warning
        deleted_count: Local-only items deleted by reconciliation
        delete_failed_count: Local-only deletions that failed
        diff_count: Items that differ (compare only)
        total_count: Items compared (compare only)
        site_id: Site the run was scoped to (pages only)
        error: The type-level failure, if the helper call failed

    Example:
        >>> outcome = TypeOutcome(ArtifactType.ASSETS, succeeded_count=2, failed_count=1)
        >>> outcome.failed
        False
    """
    artifact_type: ArtifactType
    succeeded_count: int = 0
    failed_count: int = 0
    warning_count: int = 0
    deleted_count: int = 0
    delete_failed_count: int = 0
    diff_count: int = 0
    total_count: int = 0
    site_id: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class SessionResult:
    """Fold of all type outcomes of one invocation.

    Created at the end of the orchestrator loop and consumed once by the
    result reporter.

    Attributes:
        operation: Operation that was run
        outcomes: One TypeOutcome per runner invocation, in run order
        aborted: True if a type failed while continue-on-error was off
        abort_error: The error that aborted the run, unmodified
        options: Options the session ran with
    """
    operation: OperationKind
    outcomes: List[TypeOutcome] = field(default_factory=list)
    aborted: bool = False
    abort_error: Optional[BaseException] = None
    options: SyncOptions = field(default_factory=SyncOptions)

    @property
    def total_succeeded(self) -> int:
        return sum(outcome.succeeded_count for outcome in self.outcomes)

    @property
    def total_failed(self) -> int:
        """Item failures, failed deletions, and one error per failed type."""
        return sum(
            outcome.failed_count + outcome.delete_failed_count + (1 if outcome.failed else 0)
            for outcome in self.outcomes
        )

    @property
    def total_deleted(self) -> int:
        return sum(outcome.deleted_count for outcome in self.outcomes)

    @property
    def total_warnings(self) -> int:
        return sum(outcome.warning_count for outcome in self.outcomes)

    @property
    def total_diffs(self) -> int:
        return sum(outcome.diff_count for outcome in self.outcomes)

    @property
    def total_compared(self) -> int:
        return sum(outcome.total_count for outcome in self.outcomes)

    @property
    def failed_types(self) -> List[TypeOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

    @property
    def did_nothing(self) -> bool:
        """True when no item succeeded and nothing failed.

        Deletions and warnings alone do not count as work done. A compare
        did nothing when it compared no items.
        """
        if self.operation == OperationKind.COMPARE:
            return self.total_compared == 0 and self.total_failed == 0
        return self.total_succeeded == 0 and self.total_failed == 0


@dataclass(frozen=True)
class SyncReport:
    """Final user-facing result of a session.

    Attributes:
        message: Summary message for the console
        is_error: Whether the message should be shown as an error
        exit_code: Process exit code
        status: Session status the message was derived from
    """
    message: str
    is_error: bool
    exit_code: int
    status: SessionStatus
