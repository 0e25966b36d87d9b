"""EventRelay — push-style platform callbacks to one listener per topic.

Each topic is a :class:`RelayTopicChannel` owning at most one active
:class:`RelaySubscription` and the platform registration that feeds it.

Key behaviours:
* ``subscribe`` releases the previous platform registration before
  installing the new one, under the channel lock; there are never two
  live registrations for a topic.
* Delivery happens under the same lock and only to the current
  subscription, so a callback racing a re-subscribe is dropped rather than
  delivered to the replaced listener.
* A listener that raises is logged and auto-unsubscribed.
* Display-input events are limited to HDMI inputs, except removals: the
  kind of a removed input can no longer be queried.
"""

from __future__ import annotations

import logging as _logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

from tvhome.core.app_catalog import ApplicationCatalogQuery
from tvhome.core.interfaces.platform import (
    KeyEventSourceInterface,
    LauncherAppsCallback,
    LauncherAppsInterface,
    TvInputCallback,
    TvInputManagerInterface,
)
from tvhome.core.models.device import RemoteKeyEvent
from tvhome.core.models.event import Event
from tvhome.core.models.state import RelayTopic

_log = _logging.getLogger(__name__)

Listener = Callable[[Event], None]

# --- Event actions -----------------------------------------------------------

CATALOG_ADDED = "added"
CATALOG_REMOVED = "removed"
CATALOG_CHANGED = "changed"
CATALOG_BATCH_AVAILABLE = "batch-available"

INPUT_ADDED = "added"
INPUT_REMOVED = "removed"
INPUT_UPDATED = "updated"
INPUT_STATE_CHANGED = "state-changed"


@dataclass(eq=False)
class RelaySubscription:
    """Handle returned by :meth:`RelayTopicChannel.subscribe`."""

    topic: RelayTopic
    listener: Listener
    sub_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    active: bool = True


class RelayTopicChannel(ABC):
    """Single-listener channel for one :class:`RelayTopic`."""

    topic: RelayTopic

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._current: RelaySubscription | None = None
        self._registration: Any = None

    # ------------------------------------------------------------------
    # Subscribe / unsubscribe
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> RelaySubscription:
        """Make *listener* the only receiver for this topic."""
        with self._lock:
            self._release_locked()
            sub = RelaySubscription(topic=self.topic, listener=listener)
            self._registration = self._register(sub)
            self._current = sub
            _log.info("Subscribed %s listener %s", self.topic.value, sub.sub_id)
            return sub

    def unsubscribe(self, handle: RelaySubscription) -> None:
        """Release *handle*; a handle that was already replaced is a no-op."""
        with self._lock:
            if handle is not self._current:
                handle.active = False
                return
            self._release_locked()

    def close(self) -> None:
        with self._lock:
            self._release_locked()

    @property
    def current(self) -> RelaySubscription | None:
        with self._lock:
            return self._current

    @property
    def is_active(self) -> bool:
        return self.current is not None

    # ------------------------------------------------------------------
    # Delivery (platform threads)
    # ------------------------------------------------------------------

    def _deliver(self, sub: RelaySubscription, action: str, payload: dict[str, Any]) -> None:
        event = Event(topic=self.topic, action=action, payload=payload)
        with self._lock:
            if sub is not self._current or not sub.active:
                _log.debug("Dropping %s/%s for released listener", self.topic.value, action)
                return
            try:
                sub.listener(event)
            except Exception:
                _log.exception(
                    "Listener %s for '%s' raised; auto-unsubscribing",
                    sub.listener,
                    self.topic.value,
                )
                self._release_locked()

    def _release_locked(self) -> None:
        sub, registration = self._current, self._registration
        self._current = None
        self._registration = None
        if sub is None:
            return
        sub.active = False
        try:
            self._unregister(registration)
        except Exception:
            _log.exception("Releasing %s registration failed", self.topic.value)
        _log.debug("Released %s listener %s", self.topic.value, sub.sub_id)

    # ------------------------------------------------------------------
    # Platform registration hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _register(self, sub: RelaySubscription) -> Any:
        """Install a platform callback feeding *sub*; return the registration."""

    @abstractmethod
    def _unregister(self, registration: Any) -> None:
        """Remove a registration returned by :meth:`_register`."""


# ---------------------------------------------------------------------------
# Catalog changes
# ---------------------------------------------------------------------------

class _CatalogCallback(LauncherAppsCallback):
    def __init__(self, channel: CatalogChannel, sub: RelaySubscription) -> None:
        self._channel = channel
        self._sub = sub

    def on_package_added(self, package_id: str) -> None:
        self._channel._on_resolved(self._sub, CATALOG_ADDED, package_id)

    def on_package_changed(self, package_id: str) -> None:
        self._channel._on_resolved(self._sub, CATALOG_CHANGED, package_id)

    def on_package_removed(self, package_id: str) -> None:
        self._channel._deliver(self._sub, CATALOG_REMOVED, {"package_id": package_id})

    def on_packages_available(self, package_ids: list[str]) -> None:
        self._channel._on_batch(self._sub, package_ids)


class CatalogChannel(RelayTopicChannel):
    topic = RelayTopic.CATALOG_CHANGE

    def __init__(self, launcher_apps: LauncherAppsInterface, catalog: ApplicationCatalogQuery) -> None:
        super().__init__()
        self._launcher_apps = launcher_apps
        self._catalog = catalog

    def _register(self, sub: RelaySubscription) -> LauncherAppsCallback:
        callback = _CatalogCallback(self, sub)
        self._launcher_apps.register_callback(callback)
        return callback

    def _unregister(self, registration: LauncherAppsCallback) -> None:
        self._launcher_apps.unregister_callback(registration)

    def _on_resolved(self, sub: RelaySubscription, action: str, package_id: str) -> None:
        app = self._lookup(package_id)
        if app is None:
            _log.debug("Package %s has no launch target; %s not forwarded", package_id, action)
            return
        self._deliver(sub, action, {"application": app})

    def _on_batch(self, sub: RelaySubscription, package_ids: list[str]) -> None:
        apps = [app for app in map(self._lookup, package_ids) if app is not None]
        if apps:
            self._deliver(sub, CATALOG_BATCH_AVAILABLE, {"applications": apps})

    def _lookup(self, package_id: str):
        try:
            return self._catalog.get(package_id)
        except Exception as exc:
            _log.warning("Lookup of %s failed: %s", package_id, exc)
            return None


# ---------------------------------------------------------------------------
# Display-input changes
# ---------------------------------------------------------------------------

class _InputCallback(TvInputCallback):
    def __init__(self, channel: DisplayInputChannel, sub: RelaySubscription) -> None:
        self._channel = channel
        self._sub = sub

    def on_input_added(self, input_id: str) -> None:
        self._channel._on_hdmi(self._sub, INPUT_ADDED, input_id)

    def on_input_updated(self, input_id: str) -> None:
        self._channel._on_hdmi(self._sub, INPUT_UPDATED, input_id)

    def on_input_removed(self, input_id: str) -> None:
        self._channel._deliver(self._sub, INPUT_REMOVED, {"input_id": input_id})

    def on_input_state_changed(self, input_id: str, state: int) -> None:
        self._channel._on_hdmi(self._sub, INPUT_STATE_CHANGED, input_id, state)


class DisplayInputChannel(RelayTopicChannel):
    topic = RelayTopic.DISPLAY_INPUT_CHANGE

    def __init__(self, tv_inputs: TvInputManagerInterface) -> None:
        super().__init__()
        self._tv_inputs = tv_inputs

    def _register(self, sub: RelaySubscription) -> TvInputCallback:
        callback = _InputCallback(self, sub)
        self._tv_inputs.register_callback(callback)
        return callback

    def _unregister(self, registration: TvInputCallback) -> None:
        self._tv_inputs.unregister_callback(registration)

    def _on_hdmi(
        self, sub: RelaySubscription, action: str, input_id: str, state: int | None = None
    ) -> None:
        try:
            display_input = self._tv_inputs.get_input(input_id)
        except Exception as exc:
            _log.debug("Input lookup for %s failed: %s", input_id, exc)
            return
        if display_input is None or not display_input.is_hdmi:
            return
        if action == INPUT_STATE_CHANGED:
            self._deliver(sub, action, {"input_id": input_id, "state": state})
        else:
            self._deliver(sub, action, {"input": display_input})


# ---------------------------------------------------------------------------
# Remote keys
# ---------------------------------------------------------------------------

class RemoteKeyChannel(RelayTopicChannel):
    topic = RelayTopic.REMOTE_KEY

    def __init__(self, key_source: KeyEventSourceInterface) -> None:
        super().__init__()
        self._key_source = key_source

    def _register(self, sub: RelaySubscription) -> Callable[[RemoteKeyEvent], None]:
        def on_key(key_event: RemoteKeyEvent) -> None:
            self._deliver(sub, key_event.action.value, {"event": key_event})

        self._key_source.register_callback(on_key)
        return on_key

    def _unregister(self, registration: Callable[[RemoteKeyEvent], None]) -> None:
        self._key_source.unregister_callback(registration)


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

class EventRelay:
    """The three relay topics behind one object.

    Args:
        tv_inputs: Source of display-input callbacks.
        launcher_apps: Source of package callbacks.
        key_source: Source of remote key events.
        catalog: Resolves package ids to :class:`Application` records.
    """

    def __init__(
        self,
        tv_inputs: TvInputManagerInterface,
        launcher_apps: LauncherAppsInterface,
        key_source: KeyEventSourceInterface,
        catalog: ApplicationCatalogQuery,
    ) -> None:
        self.catalog = CatalogChannel(launcher_apps, catalog)
        self.display_inputs = DisplayInputChannel(tv_inputs)
        self.remote_keys = RemoteKeyChannel(key_source)
        self._channels: dict[RelayTopic, RelayTopicChannel] = {
            RelayTopic.CATALOG_CHANGE: self.catalog,
            RelayTopic.DISPLAY_INPUT_CHANGE: self.display_inputs,
            RelayTopic.REMOTE_KEY: self.remote_keys,
        }

    def channel(self, topic: RelayTopic) -> RelayTopicChannel:
        return self._channels[topic]

    def subscribe(self, topic: RelayTopic, listener: Listener) -> RelaySubscription:
        return self._channels[topic].subscribe(listener)

    def unsubscribe(self, handle: RelaySubscription) -> None:
        self._channels[handle.topic].unsubscribe(handle)

    def close(self) -> None:
        """Release every topic (shutdown)."""
        for channel in self._channels.values():
            channel.close()
