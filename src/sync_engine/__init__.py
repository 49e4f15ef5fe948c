"""Multi-artifact sync engine.

This package coordinates externally supplied artifact helpers across one
invocation: it listens to the item events they emit, runs each selected
artifact type in a fixed priority order, reconciles items that exist only
locally, and folds everything into one session result and report.
"""

from .events import EventBus, EventKind, ItemEvent
from .context import SyncContext
from .capabilities import ArtifactCapability, ArtifactHelper, HelperRegistry, CAPABILITIES
from .models import (
    ArtifactType,
    ArtifactTypeSelector,
    AssetScope,
    ExitCode,
    ItemDescriptor,
    OperationKind,
    SessionResult,
    SessionStatus,
    SyncOptions,
    SyncReport,
    TypeOutcome,
)
from .reconciler import AutoConfirmer, Confirmer, LocalOnlyReconciler
from .runner import TypeOperationRunner
from .orchestrator import RunState, SyncOrchestrator, run_sync
from .reporter import ResultReporter
from .errors import (
    SyncError,
    TypeOperationError,
    OperationNotSupportedError,
    UnknownArtifactTypeError,
    SyncOptionsError,
)

__all__ = [
    'EventBus',
    'EventKind',
    'ItemEvent',
    'SyncContext',
    'ArtifactCapability',
    'ArtifactHelper',
    'HelperRegistry',
    'CAPABILITIES',
    'ArtifactType',
    'ArtifactTypeSelector',
    'AssetScope',
    'ExitCode',
    'ItemDescriptor',
    'OperationKind',
    'SessionResult',
    'SessionStatus',
    'SyncOptions',
    'SyncReport',
    'TypeOutcome',
    'AutoConfirmer',
    'Confirmer',
    'LocalOnlyReconciler',
    'TypeOperationRunner',
    'RunState',
    'SyncOrchestrator',
    'run_sync',
    'ResultReporter',
    'SyncError',
    'TypeOperationError',
    'OperationNotSupportedError',
    'UnknownArtifactTypeError',
    'SyncOptionsError',
]
