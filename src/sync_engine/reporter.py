"""Turns a SessionResult into the final user-facing message and exit code."""

import logging

from src.sync_engine.models import (
    ExitCode,
    OperationKind,
    SessionResult,
    SessionStatus,
    SyncReport,
)

logger = logging.getLogger(__name__)

LOG_HINT = "See the log for details."


class ResultReporter:
    """Summarizes a session, in priority order:

    1. Aborted: the aborting error's message, as an error
    2. Nothing done: a "nothing to do" message, not an error
    3. Otherwise: the succeeded and failed counts; an error if anything failed

    Example:
        >>> report = ResultReporter().summarize(session)
        >>> report.message
        'Pull complete: 3 succeeded, 1 failed. See the log for details.'
        >>> report.exit_code
        <ExitCode.PARTIAL_FAILURE: 2>
    """

    def summarize(self, session: SessionResult) -> SyncReport:
        if session.aborted:
            error = session.abort_error
            message = (str(error) or type(error).__name__) if error is not None else "Operation aborted."
            return SyncReport(message, True, ExitCode.GENERAL_ERROR, SessionStatus.ABORTED)

        if session.did_nothing:
            return SyncReport(self._nothing_message(session), False, ExitCode.SUCCESS,
                              SessionStatus.NOTHING_TO_DO)

        if session.operation == OperationKind.COMPARE:
            message = (
                f"Compare complete: {session.total_compared} artifacts compared, "
                f"{session.total_diffs} differences."
            )
        else:
            message = (
                f"{self._prefix(session)}: {session.total_succeeded} succeeded, "
                f"{session.total_failed} failed"
            )
            if session.total_deleted:
                message += f", {session.total_deleted} deleted locally"
            if session.total_warnings:
                message += f", {session.total_warnings} with warnings"
            message += "."

        failed = session.total_failed > 0
        if failed:
            names = sorted({outcome.artifact_type.value for outcome in session.failed_types})
            if names:
                message += f" Failed: {', '.join(names)}."
        if not session.options.verbose:
            message += f" {LOG_HINT}"

        if failed:
            return SyncReport(message, True, ExitCode.PARTIAL_FAILURE, SessionStatus.COMPLETED_WITH_ERRORS)
        return SyncReport(message, False, ExitCode.SUCCESS, SessionStatus.SUCCESS)

    def _prefix(self, session: SessionResult) -> str:
        verb = session.operation.value.capitalize()
        if session.options.manifest:
            return f"{verb} of manifest {session.options.manifest} complete"
        return f"{verb} complete"

    def _nothing_message(self, session: SessionResult) -> str:
        operation = session.operation
        if operation == OperationKind.COMPARE:
            return "Compare complete: no artifacts to compare."
        if operation == OperationKind.DELETE:
            return "Nothing was deleted."
        if session.options.manifest:
            return f"No items of manifest {session.options.manifest} to {operation.value}."
        if session.options.ignore_timestamps:
            return f"No items found to {operation.value}."
        return (
            f"No modified items to {operation.value}. "
            f"Use --ignore-timestamps to {operation.value} all items."
        )
