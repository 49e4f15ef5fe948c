"""Integration tests for pull and push journeys.

A journey goes from the command line through SyncCommand, the orchestrator
and the runner to helpers loaded by reference from the options file.
"""

from io import StringIO

import pytest
from rich.console import Console
from typer.testing import CliRunner

from src.cli.main import app
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand
from src.sync_engine.models import ArtifactType, ArtifactTypeSelector, AssetScope, OperationKind
from src.sync_engine.reconciler import AutoConfirmer

JOURNEY_OPTIONS = """\
helpers:
  assets: tests.fixtures.fake_helpers:JourneyAssetsHelper
  content: tests.fixtures.fake_helpers:JourneyContentHelper
"""

runner = CliRunner()


@pytest.mark.integration
class TestPullJourney:
    """Pull assets and content; one asset is rejected."""

    def test_sync_command_journey(self, service_env, working_dir, write_options):
        write_options(JOURNEY_OPTIONS)
        console_file = StringIO()
        output = OutputHandler(verbosity=1, console=Console(file=console_file, width=200, no_color=True))
        cmd = SyncCommand(working_dir=str(working_dir), output_handler=output, confirmer=AutoConfirmer())

        exit_code = cmd.run(
            OperationKind.PULL,
            [
                ArtifactTypeSelector(ArtifactType.CONTENT),
                ArtifactTypeSelector(ArtifactType.ASSETS, AssetScope.CONTENT_ASSETS),
            ],
        )

        text = console_file.getvalue()
        assert exit_code == ExitCode.PARTIAL_FAILURE
        assert "Pull complete: 3 succeeded, 1 failed." in text
        assert "Pull Summary" in text
        assert text.index("assets") < text.index("content")

    def test_cli_journey(self, service_env, working_dir, write_options):
        write_options(JOURNEY_OPTIONS)

        result = runner.invoke(app, ["--dir", str(working_dir), "pull", "-a", "-c"])

        assert result.exit_code == ExitCode.PARTIAL_FAILURE
        assert "3 succeeded, 1 failed" in result.output

    def test_cli_journey_missing_credentials(self, working_dir, write_options, monkeypatch):
        write_options(JOURNEY_OPTIONS)
        for name in ("ARTIFACT_SYNC_URL", "ARTIFACT_SYNC_USER", "ARTIFACT_SYNC_PASSWORD"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr("src.cli.credentials.load_dotenv", lambda *args, **kwargs: None)

        result = runner.invoke(app, ["--dir", str(working_dir), "pull", "-c"])

        assert result.exit_code == ExitCode.AUTH_ERROR
        assert "ARTIFACT_SYNC_URL" in result.output

    def test_cli_push_content_only(self, service_env, working_dir, write_options):
        write_options(JOURNEY_OPTIONS)

        result = runner.invoke(app, ["--dir", str(working_dir), "push", "-c"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Push complete: 1 succeeded, 0 failed." in result.output

    def test_cli_journey_without_helper(self, service_env, working_dir, write_options):
        write_options(JOURNEY_OPTIONS)

        result = runner.invoke(app, ["--dir", str(working_dir), "pull", "-t", "-c"])

        assert result.exit_code == ExitCode.PARTIAL_FAILURE
        assert "Failed: types." in result.output
