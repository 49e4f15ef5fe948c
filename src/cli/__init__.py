"""Command-line interface for artifact sync.

This package provides the `artifact-sync` CLI tool that turns command-line
options into a sync engine run: it loads the options file, credentials and
artifact helpers, runs the requested operation and reports the result with
an exit code.
"""

from .sync_command import SyncCommand
from .init_command import InitCommand
from .models import ExitCode, ServiceTier, ToolOptions, Credentials
from .config import OptionsLoader
from .credentials import Authenticator
from .helper_loader import HelperLoader
from .prompts import TerminalConfirmer
from .errors import (
    CLIError,
    ConfigNotFoundError,
    ConfigError,
    HelperLoadError,
    CredentialsError,
    InitError,
)

__all__ = [
    'SyncCommand',
    'InitCommand',
    'ExitCode',
    'ServiceTier',
    'ToolOptions',
    'Credentials',
    'OptionsLoader',
    'Authenticator',
    'HelperLoader',
    'TerminalConfirmer',
    'CLIError',
    'ConfigNotFoundError',
    'ConfigError',
    'HelperLoadError',
    'CredentialsError',
    'InitError',
]
