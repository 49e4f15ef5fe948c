"""Typed exception hierarchy for sync engine errors.

This module defines all custom exceptions raised by the sync engine.
All exceptions inherit from the SyncError base class for easy catching and
include descriptive messages with context to help with debugging.

Only type-level failures travel through these exceptions. Item-level
failures and local deletion failures are reported through events and
counters, never raised past the component that observed them.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from src.sync_engine.models import TypeOutcome


class SyncError(Exception):
    """Base exception for all artifact-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class TypeOperationError(SyncError):
    """Raised when a helper's primary call fails for one artifact type.

    The partial outcome (counts observed before the failure) is attached so
    the orchestrator can keep it in the session result. The original
    exception is chained as ``__cause__`` and exposed as ``cause``.
    """

    def __init__(self, artifact_type: str, cause: BaseException, outcome: "TypeOutcome"):
        super().__init__(str(cause) or f"{artifact_type} operation failed")
        self.artifact_type = artifact_type
        self.cause = cause
        self.outcome = outcome


class OperationNotSupportedError(SyncError):
    """Raised when a helper does not implement the method an operation needs."""

    def __init__(self, artifact_type: str, method_name: str):
        super().__init__(
            f"Helper for '{artifact_type}' does not support '{method_name}'"
        )
        self.artifact_type = artifact_type
        self.method_name = method_name


class UnknownArtifactTypeError(SyncError):
    """Raised when an artifact type has no capability entry or no helper."""

    def __init__(self, artifact_type: str, reason: Optional[str] = None):
        message = f"Unknown artifact type '{artifact_type}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.artifact_type = artifact_type
        self.reason = reason


class SyncOptionsError(SyncError):
    """Raised when a combination of sync options is invalid."""

    def __init__(self, message: str, option: Optional[str] = None):
        if option:
            full_message = f"Invalid option '{option}': {message}"
        else:
            full_message = f"Invalid options: {message}"
        super().__init__(full_message)
        self.option = option
        self.original_message = message
