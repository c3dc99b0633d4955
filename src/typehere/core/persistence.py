"""Key/value persistence used by the note store and preferences.

Adapters store JSON text under string keys and notify subscribers when
*another* adapter instance (another window, tab or process) changes a
key. Writes from the subscribing instance itself are never echoed back.
"""

import json
import logging
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar

from typehere.core.types import TypehereError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeCallback = Callable[[str | None], None]


class StorageError(TypehereError):
    """Raised by adapters when a value cannot be written or read."""


class KeyValueStore(Protocol):
    """Durable key/value storage with change notification."""

    def get(self, key: str) -> str | None:
        pass

    def set(self, key: str, value: str) -> None:
        pass

    def subscribe(self, key: str, callback: ChangeCallback) -> Callable[[], None]:
        pass


class Subscribers:
    """Per-key callback registry shared by adapter implementations."""

    def __init__(self) -> None:
        self._callbacks: dict[str, list[ChangeCallback]] = {}

    def add(self, key: str, callback: ChangeCallback) -> Callable[[], None]:
        self._callbacks.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._callbacks.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def notify(self, key: str, value: str | None) -> None:
        for callback in list(self._callbacks.get(key, [])):
            try:
                callback(value)
            except Exception:
                logger.error("Change listener for %s failed", key, exc_info=True)


class MemoryBackend:
    """Shared storage for a group of in-memory adapters."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.stores: list["MemoryKeyValueStore"] = []


class MemoryKeyValueStore:
    """In-memory adapter; instances sharing a backend behave like tabs."""

    def __init__(self, backend: MemoryBackend | None = None) -> None:
        self.backend = backend or MemoryBackend()
        self.backend.stores.append(self)
        self._subscribers = Subscribers()

    def get(self, key: str) -> str | None:
        return self.backend.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.backend.data[key] = value
        for store in self.backend.stores:
            if store is not self:
                store._subscribers.notify(key, value)

    def subscribe(self, key: str, callback: ChangeCallback) -> Callable[[], None]:
        return self._subscribers.add(key, callback)


class PersistentValue(Generic[T]):
    """A JSON value stored under one key, kept in sync with other instances.

    Read failures fall back to ``default``; write failures are logged and
    the in-memory value is kept so the session stays usable.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        default: T,
        *,
        encode: Callable[[T], str] = json.dumps,
        decode: Callable[[str], T] = json.loads,
    ):
        self.store = store
        self.key = key
        self.default = default
        self._encode = encode
        self._decode = decode
        self._listeners: list[Callable[[T], None]] = []
        # False only when the key has never been written.
        self.exists = True
        self._value = self._load()
        self._unsubscribe = store.subscribe(key, self._on_remote_change)

    def _parse(self, raw: str | None) -> T:
        if raw is None:
            return self.default
        try:
            return self._decode(raw)
        except (TypeError, ValueError):
            logger.error("Failed to parse stored value for %s", self.key, exc_info=True)
            return self.default

    def _load(self) -> T:
        try:
            raw = self.store.get(self.key)
        except StorageError:
            logger.error("Failed to read %s", self.key, exc_info=True)
            return self.default
        if raw is None:
            self.exists = False
        return self._parse(raw)

    def _on_remote_change(self, raw: str | None) -> None:
        self._value = self._parse(raw)
        for listener in list(self._listeners):
            listener(self._value)

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Store ``value``; returns False if it could not be persisted."""
        self._value = value
        try:
            self.store.set(self.key, self._encode(value))
        except (StorageError, TypeError, ValueError):
            logger.error("Failed to save %s", self.key, exc_info=True)
            return False
        return True

    def on_change(self, listener: Callable[[T], None]) -> None:
        """Register a listener for values written by other instances."""
        self._listeners.append(listener)

    def close(self) -> None:
        self._unsubscribe()


def dumps_compact(value: Any) -> str:
    """Compact JSON used for stored and exported payloads."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
