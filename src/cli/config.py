"""Options file loading and validation.

This module handles loading and saving tool options from the YAML file
.artifact-sync/options.yaml in the working directory. A missing or empty
file yields the default options.
"""

import logging
import os
from typing import Any, Dict

import yaml

from src.sync_engine.models import ArtifactType

from .errors import ConfigError
from .models import ServiceTier, ToolOptions

logger = logging.getLogger(__name__)


class OptionsLoader:
    """Handles options file loading, validation, and saving.

    Options file structure:
        continue_on_error: true
        url: https://cms.example.com/api
        username: alice
        tier: standard
        helpers:
          assets: my_helpers.assets:AssetsHelper
          content: my_helpers.content:ContentHelper
        write_manifest: manifest.json
        deletions_manifest: deletions.json
    """

    DEFAULT_OPTIONS_DIR = '.artifact-sync'
    DEFAULT_OPTIONS_FILE = 'options.yaml'

    @classmethod
    def default_path(cls, working_dir: str = ".") -> str:
        return os.path.join(working_dir, cls.DEFAULT_OPTIONS_DIR, cls.DEFAULT_OPTIONS_FILE)

    @classmethod
    def load(cls, options_path: str) -> ToolOptions:
        """Load and parse options from a YAML file.

        Args:
            options_path: Path to the YAML options file

        Returns:
            ToolOptions with parsed options (defaults if the file is missing)

        Raises:
            ConfigError: If the file cannot be read or is invalid
        """
        try:
            with open(options_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            logger.debug(f"No options file at {options_path}, using defaults")
            return ToolOptions()
        except PermissionError:
            raise ConfigError(f"Permission denied reading {options_path}")
        except OSError as e:
            raise ConfigError(f"Cannot read {options_path}: {e}")

        if not content.strip():
            return ToolOptions()

        try:
            options_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if options_dict is None:
            return ToolOptions()

        if not isinstance(options_dict, dict):
            raise ConfigError(
                f"Options must be a YAML dictionary, got {type(options_dict).__name__}"
            )

        options = cls.parse_options(options_dict)
        logger.info(f"Loaded options from {options_path}")
        return options

    @classmethod
    def save(cls, options_path: str, options: ToolOptions) -> None:
        """Save options to a YAML file.

        Raises:
            ConfigError: If the file cannot be written
        """
        options_dict: Dict[str, Any] = {
            'continue_on_error': options.continue_on_error,
            'url': options.url,
            'username': options.username,
            'tier': options.tier.value,
            'helpers': dict(options.helpers),
            'write_manifest': options.write_manifest,
            'deletions_manifest': options.deletions_manifest,
        }
        options_dict = {key: value for key, value in options_dict.items() if value is not None}

        yaml_str = yaml.safe_dump(
            options_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        options_dir = os.path.dirname(options_path)
        try:
            if options_dir:
                os.makedirs(options_dir, exist_ok=True)
            with open(options_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except OSError as e:
            raise ConfigError(f"Cannot write {options_path}: {e}")

    @classmethod
    def parse_options(cls, options_dict: Dict[str, Any]) -> ToolOptions:
        """Validate an options dictionary and build ToolOptions.

        Raises:
            ConfigError: If a field has the wrong type or an unknown value
        """
        continue_on_error = options_dict.get('continue_on_error', True)
        if not isinstance(continue_on_error, bool):
            raise ConfigError(
                f"must be true or false, got {type(continue_on_error).__name__}",
                'continue_on_error'
            )

        url = cls._optional_string(options_dict, 'url')
        username = cls._optional_string(options_dict, 'username')
        write_manifest = cls._optional_string(options_dict, 'write_manifest')
        deletions_manifest = cls._optional_string(options_dict, 'deletions_manifest')

        tier_value = options_dict.get('tier', ServiceTier.STANDARD.value)
        try:
            tier = ServiceTier(tier_value)
        except ValueError:
            allowed = ', '.join(tier.value for tier in ServiceTier)
            raise ConfigError(f"must be one of {allowed}, got '{tier_value}'", 'tier')

        helpers = options_dict.get('helpers') or {}
        if not isinstance(helpers, dict):
            raise ConfigError(
                f"must be a dictionary, got {type(helpers).__name__}",
                'helpers'
            )
        for name, reference in helpers.items():
            try:
                ArtifactType(name)
            except ValueError:
                raise ConfigError(f"unknown artifact type '{name}'", 'helpers')
            if not isinstance(reference, str) or ':' not in reference:
                raise ConfigError(
                    f"helper for '{name}' must be a 'module:attribute' string",
                    'helpers'
                )

        return ToolOptions(
            continue_on_error=continue_on_error,
            url=url,
            username=username,
            tier=tier,
            helpers=dict(helpers),
            write_manifest=write_manifest,
            deletions_manifest=deletions_manifest,
        )

    @staticmethod
    def _optional_string(options_dict: Dict[str, Any], key: str):
        value = options_dict.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ConfigError(f"must be a string, got {type(value).__name__}", key)
        value = value.strip()
        return value or None
