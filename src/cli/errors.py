"""Typed exception hierarchy for CLI-related errors.

This module defines all custom exceptions used by the CLI.
All exceptions inherit from CLIError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import List, Optional

from src.sync_engine.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class ConfigNotFoundError(CLIError):
    """Raised when a required configuration file is not found."""

    def __init__(self, config_path: str):
        super().__init__(
            f"Configuration file not found at {config_path}"
        )
        self.config_path = config_path


class ConfigError(CLIError):
    """Raised when the options file is invalid or malformed."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Options error in field '{config_field}': {message}"
        else:
            full_message = f"Options error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class HelperLoadError(CLIError):
    """Raised when an artifact helper cannot be imported or created."""

    def __init__(self, artifact_type: str, reference: str, reason: Optional[str] = None):
        message = f"Cannot load helper '{reference}' for '{artifact_type}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.artifact_type = artifact_type
        self.reference = reference
        self.reason = reason


class CredentialsError(CLIError):
    """Raised when required credentials are missing from the environment."""

    def __init__(self, missing: List[str]):
        super().__init__(
            f"Missing credentials: {', '.join(missing)}"
        )
        self.missing = missing


class InitError(CLIError):
    """Raised when initialization fails."""

    def __init__(self, message: str):
        super().__init__(message)
