"""InitCommand for options file initialization.

This module implements the init command that writes
.artifact-sync/options.yaml for a working directory from the service URL,
user, tier and helper references given on the command line.
"""

import logging
import os
from typing import Dict, List, Optional
from urllib.parse import urlparse

from .config import OptionsLoader
from .errors import ConfigError, InitError
from .models import ServiceTier

logger = logging.getLogger(__name__)


class InitCommand:
    """Handles creation of the options file.

    Example:
        >>> init = InitCommand(working_dir="./site")
        >>> init.run(
        ...     url="https://cms.example.com/api",
        ...     username="alice",
        ...     helper_specs=["assets=my_helpers.assets:AssetsHelper"],
        ... )
        './site/.artifact-sync/options.yaml'
    """

    def __init__(self, working_dir: str = ".", options_path: Optional[str] = None):
        """Initialize the init command.

        Args:
            working_dir: Local working directory holding the artifacts
            options_path: Options file to write (defaults to the working
                directory's .artifact-sync/options.yaml)
        """
        self.working_dir = working_dir
        self.options_path = options_path or OptionsLoader.default_path(working_dir)

    def run(
        self,
        url: Optional[str] = None,
        username: Optional[str] = None,
        tier: ServiceTier = ServiceTier.STANDARD,
        helper_specs: Optional[List[str]] = None,
        continue_on_error: bool = True,
        force: bool = False,
    ) -> str:
        """Write the options file.

        Args:
            url: Service URL stored as the fallback for ARTIFACT_SYNC_URL
            username: User stored as the fallback for ARTIFACT_SYNC_USER
            tier: Feature tier of the service
            helper_specs: Helper references as "type=module:attribute"
            continue_on_error: Default error policy for later runs
            force: Overwrite an existing options file

        Returns:
            Path of the written options file

        Raises:
            InitError: If the file exists, the URL is malformed, or the
                file cannot be written
            ConfigError: If a helper reference or type is invalid
        """
        if os.path.exists(self.options_path) and not force:
            raise InitError(
                f"Options file already exists at {self.options_path}\n"
                "Use --force to overwrite it."
            )

        if url:
            self._validate_url(url)

        options = OptionsLoader.parse_options({
            'continue_on_error': continue_on_error,
            'url': url.rstrip('/') if url else None,
            'username': username,
            'tier': ServiceTier(tier).value,
            'helpers': self.parse_helper_specs(helper_specs or []),
        })

        if not os.path.isdir(self.working_dir):
            os.makedirs(self.working_dir, exist_ok=True)
            logger.info(f"Created working directory {self.working_dir}")

        try:
            OptionsLoader.save(self.options_path, options)
        except ConfigError as e:
            raise InitError(f"Failed to save options: {e}")

        logger.info(
            f"Options saved to {self.options_path} "
            f"({len(options.helpers)} helper(s), tier {options.tier.value})"
        )
        return self.options_path

    @staticmethod
    def parse_helper_specs(helper_specs: List[str]) -> Dict[str, str]:
        """Turn "type=module:attribute" strings into a helpers mapping.

        Raises:
            ConfigError: If an entry lacks the '=' separator or either side is empty
        """
        helpers: Dict[str, str] = {}
        for spec in helper_specs:
            name, sep, reference = spec.partition('=')
            if not sep or not name.strip() or not reference.strip():
                raise ConfigError(f"expected 'type=module:attribute', got '{spec}'", 'helpers')
            helpers[name.strip()] = reference.strip()
        return helpers

    def _validate_url(self, url: str) -> None:
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https'):
            raise InitError(
                f"Invalid URL scheme: '{parsed.scheme or '(missing)'}'\n"
                "URL must start with http:// or https://"
            )
        if not parsed.netloc.strip():
            raise InitError("Invalid URL: missing domain name")
