"""Unit tests for cli.sync_command module."""

import os
from io import StringIO
from unittest.mock import Mock

import pytest
from rich.console import Console

from src.cli.errors import CredentialsError
from src.cli.models import Credentials, ExitCode, ToolOptions
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand
from src.sync_engine.capabilities import HelperRegistry
from src.sync_engine.models import ArtifactTypeSelector, OperationKind, SyncOptions
from src.sync_engine.reconciler import AutoConfirmer
from tests.fixtures.fake_helpers import ScriptedHelper, failed, synced


def write_options(working_dir, text):
    options_dir = os.path.join(working_dir, ".artifact-sync")
    os.makedirs(options_dir, exist_ok=True)
    path = os.path.join(options_dir, "options.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return path


@pytest.fixture
def console_file():
    return StringIO()


@pytest.fixture
def output(console_file):
    return OutputHandler(console=Console(file=console_file, width=200, no_color=True))


@pytest.fixture
def authenticator():
    auth = Mock()
    auth.get_credentials.return_value = Credentials(url="https://cms.example.com/api", user="tester")
    return auth


def make_command(tmp_path, output, authenticator, helpers=None, **kwargs):
    registry = HelperRegistry(helpers) if helpers is not None else None
    return SyncCommand(
        working_dir=str(tmp_path),
        output_handler=output,
        authenticator=authenticator,
        registry=registry,
        confirmer=AutoConfirmer(answer=False),
        **kwargs,
    )


def selectors(*names):
    return [ArtifactTypeSelector.of(name) for name in names]


class TestSuccessfulRuns:
    """Runs that reach the reporter."""

    def test_success_exit_code_and_message(self, tmp_path, output, authenticator, console_file):
        helpers = {"types": ScriptedHelper(events=[synced({"id": "t1"}), synced({"id": "t2"})])}
        cmd = make_command(tmp_path, output, authenticator, helpers)

        exit_code = cmd.run(OperationKind.PULL, selectors("types"))

        assert exit_code == ExitCode.SUCCESS
        assert "Pull complete: 2 succeeded, 0 failed." in console_file.getvalue()

    def test_partial_failure(self, tmp_path, output, authenticator, console_file):
        helpers = {"types": ScriptedHelper(events=[synced({"id": "t1"}), failed({"id": "t2"})])}
        cmd = make_command(tmp_path, output, authenticator, helpers)

        exit_code = cmd.run(OperationKind.PULL, selectors("types"))

        assert exit_code == ExitCode.PARTIAL_FAILURE
        assert "1 succeeded, 1 failed" in console_file.getvalue()

    def test_nothing_to_do(self, tmp_path, output, authenticator):
        cmd = make_command(tmp_path, output, authenticator, {"types": ScriptedHelper()})

        exit_code = cmd.run(OperationKind.PUSH, selectors("types"))

        assert exit_code == ExitCode.SUCCESS

    def test_context_carries_credentials(self, tmp_path, output, authenticator):
        seen = []

        class ContextHelper(ScriptedHelper):
            def push_modified_items(self, context, options):
                seen.append(context)
                return super().push_modified_items(context, options)

        cmd = make_command(tmp_path, output, authenticator, {"types": ContextHelper()})

        cmd.run(OperationKind.PUSH, selectors("types"))

        assert seen[0].endpoint == "https://cms.example.com/api"
        assert seen[0].identity == "tester"
        assert seen[0].properties["credentials"].user == "tester"
        assert seen[0].working_dir == str(tmp_path)


class TestOptionsFile:
    """Behavior driven by .artifact-sync/options.yaml."""

    def test_helpers_loaded_from_options(self, tmp_path, output, authenticator, console_file):
        write_options(str(tmp_path), "helpers:\n  assets: tests.fixtures.fake_helpers:JourneyAssetsHelper\n")
        cmd = make_command(tmp_path, output, authenticator)

        exit_code = cmd.run(OperationKind.PULL, selectors("assets"))

        assert exit_code == ExitCode.PARTIAL_FAILURE
        assert "2 succeeded, 1 failed" in console_file.getvalue()

    def test_stop_on_error_from_options(self, tmp_path, output, authenticator, console_file):
        write_options(str(tmp_path), "continue_on_error: false\n")
        content = ScriptedHelper(events=[synced({"id": "c1"})])
        helpers = {"types": ScriptedHelper(error=ConnectionError("service unavailable")), "content": content}
        cmd = make_command(tmp_path, output, authenticator, helpers)

        exit_code = cmd.run(OperationKind.PULL, selectors("types", "content"))

        assert exit_code == ExitCode.GENERAL_ERROR
        assert content.calls == []
        assert "service unavailable" in console_file.getvalue()

    def test_command_line_overrides_options_policy(self, tmp_path, output, authenticator):
        write_options(str(tmp_path), "continue_on_error: false\n")
        content = ScriptedHelper(events=[synced({"id": "c1"})])
        helpers = {"types": ScriptedHelper(error=RuntimeError("boom")), "content": content}
        cmd = make_command(tmp_path, output, authenticator, helpers)

        exit_code = cmd.run(OperationKind.PULL, selectors("types", "content"), continue_on_error=True)

        assert exit_code == ExitCode.PARTIAL_FAILURE
        assert content.call_names == ["pull_modified_items"]

    def test_base_tier_skips_layouts(self, tmp_path, output, authenticator):
        write_options(str(tmp_path), "tier: base\n")
        layouts = ScriptedHelper(events=[synced({"id": "l1"})])
        types = ScriptedHelper(events=[synced({"id": "t1"})])
        cmd = make_command(tmp_path, output, authenticator, {"layouts": layouts, "types": types})

        exit_code = cmd.run(OperationKind.PULL, selectors("layouts", "types"))

        assert exit_code == ExitCode.SUCCESS
        assert layouts.calls == []
        assert types.calls

    def test_missing_explicit_options_file(self, tmp_path, output, authenticator, console_file):
        cmd = make_command(
            tmp_path, output, authenticator, {"types": ScriptedHelper()},
            options_path=str(tmp_path / "missing.yaml"),
        )

        exit_code = cmd.run(OperationKind.PULL, selectors("types"))

        assert exit_code == ExitCode.CONFIG_ERROR
        assert "not found" in console_file.getvalue()

    def test_invalid_options_file(self, tmp_path, output, authenticator):
        write_options(str(tmp_path), "tier: [unclosed\n")
        cmd = make_command(tmp_path, output, authenticator, {"types": ScriptedHelper()})

        assert cmd.run(OperationKind.PULL, selectors("types")) == ExitCode.CONFIG_ERROR

    def test_no_helpers_configured(self, tmp_path, output, authenticator, console_file):
        cmd = make_command(tmp_path, output, authenticator)

        exit_code = cmd.run(OperationKind.PULL, selectors("types"))

        assert exit_code == ExitCode.CONFIG_ERROR
        assert "no helpers configured" in console_file.getvalue()

    def test_unloadable_helper(self, tmp_path, output, authenticator):
        write_options(str(tmp_path), "helpers:\n  types: no_such_module_xyz:Helper\n")
        cmd = make_command(tmp_path, output, authenticator)

        assert cmd.run(OperationKind.PULL, selectors("types")) == ExitCode.CONFIG_ERROR


class TestErrorMapping:
    """Exceptions are translated into exit codes."""

    def test_missing_credentials(self, tmp_path, output, authenticator, console_file):
        authenticator.get_credentials.side_effect = CredentialsError(["ARTIFACT_SYNC_URL"])
        cmd = make_command(tmp_path, output, authenticator, {"types": ScriptedHelper()})

        exit_code = cmd.run(OperationKind.PULL, selectors("types"))

        assert exit_code == ExitCode.AUTH_ERROR
        assert "ARTIFACT_SYNC_URL" in console_file.getvalue()

    def test_contradictory_options(self, tmp_path, output, authenticator, console_file):
        helper = ScriptedHelper()
        cmd = make_command(tmp_path, output, authenticator, {"types": helper})

        exit_code = cmd.run(
            OperationKind.PULL, selectors("types"), SyncOptions(manifest="release", deletions=True)
        )

        assert exit_code == ExitCode.GENERAL_ERROR
        assert helper.calls == []
        assert "--deletions" in console_file.getvalue()

    def test_unexpected_error(self, tmp_path, output, authenticator, console_file):
        reporter = Mock()
        reporter.summarize.side_effect = RuntimeError("reporter exploded")
        cmd = make_command(tmp_path, output, authenticator, {"types": ScriptedHelper()}, reporter=reporter)

        exit_code = cmd.run(OperationKind.PULL, selectors("types"))

        assert exit_code == ExitCode.GENERAL_ERROR
        assert "Unexpected error: reporter exploded" in console_file.getvalue()


class TestApplyDefaults:
    """Test cases for manifest defaults taken from the options file."""

    @pytest.fixture
    def cmd(self, tmp_path):
        return SyncCommand(working_dir=str(tmp_path))

    def test_write_manifest_default_on_pull(self, cmd):
        options = cmd._apply_defaults(
            OperationKind.PULL, SyncOptions(), ToolOptions(write_manifest="pulled.json")
        )

        assert options.write_manifest == "pulled.json"

    def test_command_line_value_wins(self, cmd):
        options = cmd._apply_defaults(
            OperationKind.PULL, SyncOptions(write_manifest="mine.json"), ToolOptions(write_manifest="pulled.json")
        )

        assert options.write_manifest == "mine.json"

    def test_deletions_manifest_only_with_deletions(self, cmd):
        tool_options = ToolOptions(deletions_manifest="gone.json")

        without = cmd._apply_defaults(OperationKind.PULL, SyncOptions(), tool_options)
        with_deletions = cmd._apply_defaults(OperationKind.PULL, SyncOptions(deletions=True), tool_options)

        assert without.deletions_manifest is None
        assert with_deletions.deletions_manifest == "gone.json"

    def test_push_unchanged(self, cmd):
        sync_options = SyncOptions()

        options = cmd._apply_defaults(OperationKind.PUSH, sync_options, ToolOptions(write_manifest="pulled.json"))

        assert options is sync_options
