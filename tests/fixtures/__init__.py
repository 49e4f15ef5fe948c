"""Test fixtures for the sync engine and CLI tests.

This module provides scripted artifact helpers that replay item events on
the context's event bus, plus shorthands for building scripted events.
"""

from .fake_helpers import (
    ScriptedHelper,
    FileBackedHelper,
    JourneyAssetsHelper,
    JourneyContentHelper,
    synced,
    failed,
    warned,
    local_only,
    resource_local_only,
)

__all__ = [
    "ScriptedHelper",
    "FileBackedHelper",
    "JourneyAssetsHelper",
    "JourneyContentHelper",
    "synced",
    "failed",
    "warned",
    "local_only",
    "resource_local_only",
]
