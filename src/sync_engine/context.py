"""Per-invocation sync context.

The context is created once by the command layer, owned by the
orchestrator, and passed by reference into every runner and helper call.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from src.sync_engine.events import EventBus
from src.sync_engine.models import SyncTally


@dataclass
class SyncContext:
    """State shared by every artifact type's run within one invocation.

    Attributes:
        working_dir: Local working directory holding the artifacts
        endpoint: Base URL of the remote content service
        identity: Authenticated user name
        tally: Item counters, written only by the active run's handlers
        event_bus: Bus the helpers emit item events on
        site_list: Sites used for page operations, resolved lazily
        base_tier: True if the remote service does not offer sites/layouts
        protected_paths: Local paths never deleted by reconciliation
        properties: Free-form values for helpers (session tokens etc.)

    Example:
        >>> context = SyncContext(working_dir="./work", endpoint="https://cms.example.com/api")
        >>> context.tally.items_succeeded
        0
    """
    working_dir: str = "."
    endpoint: Optional[str] = None
    identity: Optional[str] = None
    tally: SyncTally = field(default_factory=SyncTally)
    event_bus: EventBus = field(default_factory=EventBus)
    site_list: List[Any] = field(default_factory=list)
    base_tier: bool = False
    protected_paths: Set[str] = field(default_factory=set)
    properties: Dict[str, Any] = field(default_factory=dict)

    def protect_path(self, path: str) -> None:
        self.protected_paths.add(self._normalize(path))

    def is_protected(self, path: Optional[str]) -> bool:
        if not path:
            return False
        return self._normalize(path) in self.protected_paths

    def _normalize(self, path: str) -> str:
        if not os.path.isabs(path):
            path = os.path.join(self.working_dir, path)
        return os.path.normpath(path)
