"""Sync command orchestration for CLI.

This module provides the SyncCommand class that runs one pull, push,
delete or compare invocation. It coordinates OptionsLoader, Authenticator,
HelperLoader, the sync engine and OutputHandler, and translates every
outcome into an exit code.
"""

import dataclasses
import logging
import os
from typing import List, Optional

from src.cli.config import OptionsLoader
from src.cli.credentials import Authenticator
from src.cli.errors import (
    CLIError,
    ConfigError,
    ConfigNotFoundError,
    CredentialsError,
    HelperLoadError,
)
from src.cli.helper_loader import HelperLoader
from src.cli.models import ExitCode, ServiceTier, ToolOptions
from src.cli.output import OutputHandler
from src.cli.prompts import TerminalConfirmer
from src.sync_engine.capabilities import HelperRegistry
from src.sync_engine.context import SyncContext
from src.sync_engine.errors import SyncOptionsError
from src.sync_engine.models import ArtifactTypeSelector, OperationKind, SyncOptions
from src.sync_engine.orchestrator import SyncOrchestrator
from src.sync_engine.reconciler import Confirmer, LocalOnlyReconciler
from src.sync_engine.reporter import ResultReporter
from src.sync_engine.runner import TypeOperationRunner

logger = logging.getLogger(__name__)


class SyncCommand:
    """Runs one sync operation for the CLI.

    The workflow:
        1. Load options from .artifact-sync/options.yaml
        2. Load credentials from the environment
        3. Load the configured artifact helpers
        4. Build the sync context and run the orchestrator
        5. Summarize the session and return its exit code

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> sync_cmd = SyncCommand(output_handler=output)
        >>> exit_code = sync_cmd.run(OperationKind.PULL, [ArtifactTypeSelector.of("assets")])
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        working_dir: str = ".",
        options_path: Optional[str] = None,
        output_handler: Optional[OutputHandler] = None,
        authenticator: Optional[Authenticator] = None,
        helper_loader: Optional[HelperLoader] = None,
        registry: Optional[HelperRegistry] = None,
        confirmer: Optional[Confirmer] = None,
        reporter: Optional[ResultReporter] = None,
    ):
        """Initialize sync command with dependencies.

        Args:
            working_dir: Local working directory holding the artifacts
            options_path: Path to the options YAML file (defaults to the
                working directory's .artifact-sync/options.yaml)
            output_handler: OutputHandler for terminal output (optional)
            authenticator: Authenticator for credentials (optional)
            helper_loader: HelperLoader for configured helpers (optional)
            registry: Preloaded helpers; skips helper loading (optional)
            confirmer: Confirmer for local-only deletions (optional)
            reporter: ResultReporter for the final message (optional)

        Note:
            All dependencies are optional to support testing. In production,
            they are created on first use.
        """
        self.working_dir = working_dir
        self.options_path = options_path or OptionsLoader.default_path(working_dir)
        # An explicitly named options file must exist; the default one is optional
        self.require_options = options_path is not None
        self.output_handler = output_handler or OutputHandler()
        self.authenticator = authenticator
        self.helper_loader = helper_loader or HelperLoader()
        self.registry = registry
        self.confirmer = confirmer
        self.reporter = reporter or ResultReporter()

    def run(
        self,
        operation: OperationKind,
        selectors: List[ArtifactTypeSelector],
        sync_options: Optional[SyncOptions] = None,
        continue_on_error: Optional[bool] = None,
    ) -> ExitCode:
        """Execute one sync operation.

        Args:
            operation: Operation to run
            selectors: Selected artifact types
            sync_options: Options for the invocation
            continue_on_error: Overrides the options file's policy if given

        Returns:
            ExitCode indicating success or specific failure type
        """
        sync_options = sync_options or SyncOptions()
        try:
            logger.info(f"Loading options from {self.options_path}")
            if self.require_options and not os.path.isfile(self.options_path):
                raise ConfigNotFoundError(self.options_path)
            tool_options = OptionsLoader.load(self.options_path)

            if not self.authenticator:
                self.authenticator = Authenticator()
            credentials = self.authenticator.get_credentials(tool_options)
            logger.info(f"Using {credentials.url} as {credentials.user}")

            registry = self.registry
            if registry is None:
                if not tool_options.helpers:
                    raise ConfigError(
                        f"no helpers configured in {self.options_path}", 'helpers'
                    )
                registry = self.helper_loader.load(tool_options.helpers)

            sync_options = self._apply_defaults(operation, sync_options, tool_options)
            context = SyncContext(
                working_dir=self.working_dir,
                endpoint=credentials.url,
                identity=credentials.user,
                base_tier=tool_options.tier == ServiceTier.BASE,
                properties={'credentials': credentials},
            )

            confirmer = self.confirmer or TerminalConfirmer(
                self.output_handler.console,
                before_prompt=self.output_handler.stop_spinner,
            )
            runner = TypeOperationRunner(registry, LocalOnlyReconciler(confirmer))
            orchestrator = SyncOrchestrator(runner, continue_on_error=tool_options.continue_on_error)

            with self.output_handler.spinner(f"Running {operation.value}..."):
                session = orchestrator.run(
                    context,
                    selectors,
                    operation,
                    sync_options,
                    continue_on_error=continue_on_error,
                )

            report = self.reporter.summarize(session)
            self.output_handler.print_session_summary(session)
            self.output_handler.print_report(report)
            return ExitCode(report.exit_code)

        except CredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info(
                "Set ARTIFACT_SYNC_URL and ARTIFACT_SYNC_USER, or url and username in the options file"
            )
            return ExitCode.AUTH_ERROR

        except (ConfigError, ConfigNotFoundError, HelperLoadError) as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.CONFIG_ERROR

        except (SyncOptionsError, CLIError) as e:
            logger.error(f"Error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception(f"Unexpected error during {operation.value}")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _apply_defaults(
        self,
        operation: OperationKind,
        sync_options: SyncOptions,
        tool_options: ToolOptions,
    ) -> SyncOptions:
        """Fill manifest names the command line left out from the options file."""
        if operation != OperationKind.PULL:
            return sync_options
        changes = {}
        if not sync_options.write_manifest and tool_options.write_manifest:
            changes['write_manifest'] = tool_options.write_manifest
        if (
            sync_options.deletions
            and not sync_options.deletions_manifest
            and tool_options.deletions_manifest
        ):
            changes['deletions_manifest'] = tool_options.deletions_manifest
        if not changes:
            return sync_options
        return dataclasses.replace(sync_options, **changes)
