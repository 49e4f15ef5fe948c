"""Per-invocation event bus shared by the helpers and the sync engine.

Helpers report item-level outcomes by emitting events on the bus found at
``context.event_bus``. The engine listens only for the duration of one
artifact type's run, using a scoped subscription so that listeners never
outlive the run that registered them.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from src.sync_engine.models import ItemDescriptor

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Event vocabulary emitted by helpers."""
    SYNCED = "synced"
    SYNCED_WITH_WARNING = "synced-warning"
    SYNC_FAILED = "sync-failed"
    RESOURCE_SYNCED = "resource-synced"
    RESOURCE_SYNC_FAILED = "resource-sync-failed"
    LOCAL_ONLY = "local-only"
    RESOURCE_LOCAL_ONLY = "resource-local-only"
    # compare only
    DIFF = "diff"
    ADDED = "added"
    REMOVED = "removed"


SUCCESS_KINDS = frozenset({EventKind.SYNCED, EventKind.RESOURCE_SYNCED})
FAILURE_KINDS = frozenset({EventKind.SYNC_FAILED, EventKind.RESOURCE_SYNC_FAILED})
LOCAL_ONLY_KINDS = frozenset({EventKind.LOCAL_ONLY, EventKind.RESOURCE_LOCAL_ONLY})
COMPARE_KINDS = frozenset({EventKind.DIFF, EventKind.ADDED, EventKind.REMOVED})


@dataclass(frozen=True)
class ItemEvent:
    """One outcome reported by a helper.

    Attributes:
        kind: What happened
        item: The item or resource it happened to
        error: Failure detail, for the failure kinds
    """
    kind: EventKind
    item: ItemDescriptor
    error: Optional[BaseException] = None

    @property
    def error_message(self) -> str:
        if self.error is None:
            return ""
        return str(self.error) or type(self.error).__name__


Handler = Callable[[ItemEvent], None]


class EventBus:
    """Publish/subscribe channel for item events.

    Handlers for the same kind are called in registration order. Handlers
    must not raise; ``emit`` does not guard against them, so a raising
    handler surfaces in the helper call that emitted the event.

    Example:
        >>> bus = EventBus()
        >>> seen = []
        >>> with bus.subscribed({EventKind.SYNCED: seen.append}):
        ...     bus.emit(EventKind.SYNCED, {"id": "a1", "name": "logo.png"})
        >>> len(seen), bus.has_listeners()
        (1, False)
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventKind, List[Handler]] = {}

    def subscribe(self, kind: EventKind, handler: Handler) -> None:
        self._handlers.setdefault(EventKind(kind), []).append(handler)

    def unsubscribe(self, kind: EventKind, handler: Handler) -> None:
        """Remove one registration of ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(EventKind(kind))
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            logger.debug(f"Handler not registered for '{kind}', nothing to remove")
            return
        if not handlers:
            del self._handlers[EventKind(kind)]

    def emit(self, kind: EventKind, item: Any = None, error: Optional[BaseException] = None) -> None:
        """Deliver an event to every handler registered for ``kind``.

        Args:
            kind: Event kind
            item: Item descriptor, mapping, object or name of the item
            error: Failure detail for the failure kinds
        """
        event = ItemEvent(EventKind(kind), ItemDescriptor.from_item(item), error)
        # Copy so a handler unsubscribing itself does not skip the next one
        for handler in list(self._handlers.get(event.kind, ())):
            handler(event)

    def listener_count(self, kind: EventKind) -> int:
        return len(self._handlers.get(EventKind(kind), ()))

    def has_listeners(self) -> bool:
        return any(self._handlers.values())

    @contextmanager
    def subscribed(self, handlers: Mapping[EventKind, Handler]) -> Iterator["EventBus"]:
        """Register ``handlers`` for the duration of the ``with`` block.

        Every registration is removed on exit, whether the block returned,
        raised, or was interrupted part-way through registering.
        """
        registered = []
        try:
            for kind, handler in handlers.items():
                self.subscribe(kind, handler)
                registered.append((kind, handler))
            yield self
        finally:
            for kind, handler in reversed(registered):
                self.unsubscribe(kind, handler)
