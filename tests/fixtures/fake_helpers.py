"""Scripted artifact helpers for sync engine tests.

A ScriptedHelper replays a fixed list of events on the context's event bus
whenever one of its operation methods is called, and records every call so
tests can check which method the runner picked. Delete calls are recorded
and can be made to fail for chosen item keys.

The Journey* classes take no constructor arguments so they can be loaded by
reference from an options file (tests.fixtures.fake_helpers:JourneyAssetsHelper).
"""

import os
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from src.sync_engine.events import EventKind

ScriptedEvent = Tuple[EventKind, Any, Optional[BaseException]]


def synced(item: Any) -> ScriptedEvent:
    return (EventKind.SYNCED, item, None)


def failed(item: Any, message: str = "remote rejected the item") -> ScriptedEvent:
    return (EventKind.SYNC_FAILED, item, RuntimeError(message))


def warned(item: Any, message: str = "item has a warning") -> ScriptedEvent:
    return (EventKind.SYNCED_WITH_WARNING, item, RuntimeError(message))


def local_only(item: Any) -> ScriptedEvent:
    return (EventKind.LOCAL_ONLY, item, None)


def resource_local_only(item: Any) -> ScriptedEvent:
    return (EventKind.RESOURCE_LOCAL_ONLY, item, None)


class ScriptedHelper:
    """Helper double that replays scripted events.

    Args:
        events: Events emitted by every operation call, in order
        error: Raised after the events have been emitted, if given
        fail_deletes: Item keys whose local deletion raises
        sites: Returned by list_sites
        compare_result: Returned by compare
    """

    def __init__(
        self,
        events: Optional[Sequence[ScriptedEvent]] = None,
        error: Optional[BaseException] = None,
        fail_deletes: Iterable[str] = (),
        sites: Optional[List[Any]] = None,
        compare_result: Any = None,
    ):
        self.events = list(events or [])
        self.error = error
        self.fail_deletes = set(fail_deletes)
        self.sites = sites if sites is not None else []
        self.compare_result = compare_result
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.deleted_items: List[Any] = []
        self.deleted_resources: List[Any] = []
        self.listener_counts: List[int] = []

    @property
    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def _run(self, name: str, context: Any, options: Dict[str, Any]) -> List[Any]:
        self.calls.append((name, dict(options)))
        self.listener_counts.append(context.event_bus.listener_count(EventKind.SYNCED))
        items = []
        for kind, item, error in self.events:
            context.event_bus.emit(kind, item, error)
            items.append(item)
        if self.error is not None:
            raise self.error
        return items

    def pull_all_items(self, context, options):
        return self._run("pull_all_items", context, options)

    def pull_modified_items(self, context, options):
        return self._run("pull_modified_items", context, options)

    def pull_manifest_items(self, context, options):
        return self._run("pull_manifest_items", context, options)

    def push_all_items(self, context, options):
        return self._run("push_all_items", context, options)

    def push_modified_items(self, context, options):
        return self._run("push_modified_items", context, options)

    def push_manifest_items(self, context, options):
        return self._run("push_manifest_items", context, options)

    def delete_remote_items(self, context, options):
        return self._run("delete_remote_items", context, options)

    def compare(self, context, target, source, options):
        self._run("compare", context, dict(options, target=target, source=source))
        return self.compare_result

    def delete_local_item(self, context, item, options):
        self._check_delete(item)
        self.deleted_items.append(item)

    def delete_local_resource(self, context, resource, options):
        self._check_delete(resource)
        self.deleted_resources.append(resource)

    def list_sites(self, context, options):
        return list(self.sites)

    def _check_delete(self, item: Any) -> None:
        key = item.get("id") or item.get("path") if isinstance(item, dict) else item
        if key in self.fail_deletes:
            raise OSError(f"cannot delete {key}")


class FileBackedHelper(ScriptedHelper):
    """ScriptedHelper whose local deletions remove real files.

    Item paths are relative to the context's working directory.
    """

    def delete_local_item(self, context, item, options):
        self._check_delete(item)
        os.remove(os.path.join(context.working_dir, item["path"]))
        self.deleted_items.append(item)


class JourneyAssetsHelper(ScriptedHelper):
    """Assets helper: two items pulled, one rejected."""

    def __init__(self):
        super().__init__(events=[
            synced({"id": "a1", "name": "logo.png", "path": "assets/logo.png"}),
            synced({"id": "a2", "name": "banner.jpg", "path": "assets/banner.jpg"}),
            failed({"id": "a3", "name": "huge.mov", "path": "assets/huge.mov"}, "file too large"),
        ])


class JourneyContentHelper(ScriptedHelper):
    """Content helper: one item pulled."""

    def __init__(self):
        super().__init__(events=[
            synced({"id": "c1", "name": {"en": "Home article"}}),
        ])


class BrokenHelper:
    """Helper whose constructor fails."""

    def __init__(self):
        raise RuntimeError("missing service client")
