"""Unit tests for cli.config module (OptionsLoader)."""

import os

import pytest

from src.cli.config import OptionsLoader
from src.cli.errors import ConfigError
from src.cli.models import ServiceTier, ToolOptions


def write(path, text):
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return str(path)


class TestLoad:
    """Test cases for OptionsLoader.load."""

    def test_missing_file_gives_defaults(self, tmp_path):
        options = OptionsLoader.load(str(tmp_path / "missing.yaml"))

        assert options == ToolOptions()

    @pytest.mark.parametrize("text", ["", "   \n", "~\n"])
    def test_empty_file_gives_defaults(self, tmp_path, text):
        path = write(tmp_path / "options.yaml", text)

        assert OptionsLoader.load(path) == ToolOptions()

    def test_full_file(self, tmp_path):
        path = write(tmp_path / "options.yaml", """\
continue_on_error: false
url: https://cms.example.com/api
username: alice
tier: base
helpers:
  assets: my_helpers.assets:AssetsHelper
write_manifest: pulled.json
deletions_manifest: gone.json
""")

        options = OptionsLoader.load(path)

        assert options.continue_on_error is False
        assert options.url == "https://cms.example.com/api"
        assert options.username == "alice"
        assert options.tier == ServiceTier.BASE
        assert options.helpers == {"assets": "my_helpers.assets:AssetsHelper"}
        assert options.write_manifest == "pulled.json"
        assert options.deletions_manifest == "gone.json"

    def test_blank_string_is_none(self, tmp_path):
        path = write(tmp_path / "options.yaml", "url: '  '\n")

        assert OptionsLoader.load(path).url is None

    def test_invalid_yaml(self, tmp_path):
        path = write(tmp_path / "options.yaml", "helpers: {assets: [\n")

        with pytest.raises(ConfigError, match="Invalid YAML syntax"):
            OptionsLoader.load(path)

    def test_not_a_dictionary(self, tmp_path):
        path = write(tmp_path / "options.yaml", "- assets\n- types\n")

        with pytest.raises(ConfigError, match="got list"):
            OptionsLoader.load(path)

    @pytest.mark.parametrize("text, field", [
        ("continue_on_error: maybe\n", "continue_on_error"),
        ("tier: premium\n", "tier"),
        ("helpers: [a, b]\n", "helpers"),
        ("helpers:\n  widgets: m:W\n", "helpers"),
        ("helpers:\n  assets: no_colon\n", "helpers"),
        ("url: 42\n", "url"),
    ])
    def test_invalid_fields(self, tmp_path, text, field):
        path = write(tmp_path / "options.yaml", text)

        with pytest.raises(ConfigError) as exc_info:
            OptionsLoader.load(path)

        assert exc_info.value.config_field == field

    def test_directory_instead_of_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            OptionsLoader.load(str(tmp_path))


class TestSave:
    """Test cases for OptionsLoader.save."""

    def test_save_then_load(self, tmp_path):
        path = OptionsLoader.default_path(str(tmp_path))
        options = ToolOptions(
            continue_on_error=False,
            url="https://cms.example.com/api",
            helpers={"types": "my_helpers.types:TypesHelper"},
        )

        OptionsLoader.save(path, options)

        assert os.path.isfile(path)
        assert OptionsLoader.load(path) == options

    def test_none_values_not_written(self, tmp_path):
        path = str(tmp_path / "options.yaml")

        OptionsLoader.save(path, ToolOptions())

        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert "url" not in text
        assert "tier: standard" in text


def test_default_path():
    assert OptionsLoader.default_path("work") == os.path.join("work", ".artifact-sync", "options.yaml")
