"""Loading remote service credentials.

Credentials are read from environment variables, after loading a .env
file with python-dotenv. The options file may supply the URL and user as
fallbacks; the password only ever comes from the environment.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from .errors import CredentialsError
from .models import Credentials, ToolOptions

logger = logging.getLogger(__name__)

URL_VAR = 'ARTIFACT_SYNC_URL'
USER_VAR = 'ARTIFACT_SYNC_USER'
PASSWORD_VAR = 'ARTIFACT_SYNC_PASSWORD'


class Authenticator:
    """Loads and validates credentials from environment variables.

    Credentials are never cached or logged.

    Environment variables:
        ARTIFACT_SYNC_URL: Service URL (required unless set in options)
        ARTIFACT_SYNC_USER: User name (required unless set in options)
        ARTIFACT_SYNC_PASSWORD: Password (optional; helpers may prompt)

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials(ToolOptions())
        >>> print(f"Connecting to {creds.url}")
    """

    def __init__(self, dotenv_path: Optional[str] = None):
        """Initialize the authenticator by loading a .env file if present."""
        load_dotenv(dotenv_path)

    def get_credentials(self, options: Optional[ToolOptions] = None) -> Credentials:
        """Get credentials from the environment, falling back to options.

        Raises:
            CredentialsError: If the URL or user is missing
        """
        options = options or ToolOptions()
        url = os.getenv(URL_VAR) or options.url
        user = os.getenv(USER_VAR) or options.username
        password = os.getenv(PASSWORD_VAR)

        missing = []
        if not url:
            missing.append(URL_VAR)
        if not user:
            missing.append(USER_VAR)
        if missing:
            raise CredentialsError(missing)

        if not password:
            logger.debug(f"{PASSWORD_VAR} not set")
        return Credentials(url=url.rstrip('/'), user=user, password=password)  # type: ignore[union-attr]
