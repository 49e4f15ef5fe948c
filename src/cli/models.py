"""Data models for CLI operations.

This module defines the data models used by the CLI module. Engine
models (ExitCode, SyncOptions, ...) live in src/sync_engine/models.py;
ExitCode is re-exported here for the command layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from src.sync_engine.models import ExitCode

__all__ = ['ExitCode', 'ServiceTier', 'ToolOptions', 'Credentials']


class ServiceTier(str, Enum):
    """Feature tier of the remote content service."""
    BASE = "base"
    STANDARD = "standard"


@dataclass
class ToolOptions:
    """Options loaded from .artifact-sync/options.yaml.

    Attributes:
        continue_on_error: Keep running the remaining artifact types after one fails
        url: Fallback service URL when ARTIFACT_SYNC_URL is not set
        username: Fallback user when ARTIFACT_SYNC_USER is not set
        tier: Feature tier of the service; base tier has no sites or layouts
        helpers: Artifact type name -> "module:attribute" helper reference
        write_manifest: Default manifest written during pulls
        deletions_manifest: Default deletions manifest written during pulls

    Example:
        >>> options = ToolOptions(continue_on_error=False)
        >>> options.tier
        <ServiceTier.STANDARD: 'standard'>
    """
    continue_on_error: bool = True
    url: Optional[str] = None
    username: Optional[str] = None
    tier: ServiceTier = ServiceTier.STANDARD
    helpers: Dict[str, str] = field(default_factory=dict)
    write_manifest: Optional[str] = None
    deletions_manifest: Optional[str] = None


@dataclass(frozen=True)
class Credentials:
    """Remote service credentials. The password is never logged."""
    url: str
    user: str
    password: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(url={self.url!r}, user={self.user!r}, password=***)"
