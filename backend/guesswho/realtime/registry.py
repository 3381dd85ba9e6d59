from __future__ import annotations

from dataclasses import dataclass
from threading import RLock

from ..game.models import Room


@dataclass(frozen=True)
class Binding:
    room: Room
    player_name: str


class ConnectionRegistry:
    """Live connection ids and their (room, player) binding.

    Entering a room is two steps: ``reserve`` before the room is touched and
    ``bind`` once it has been entered. A ``release`` in between makes ``bind``
    fail, so the caller can undo the join for a connection that is gone.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._bindings: dict[str, Binding | None] = {}
        self._pending: set[str] = set()

    def open(self, connection: str) -> None:
        with self._lock:
            self._bindings.setdefault(connection, None)

    def is_open(self, connection: str) -> bool:
        with self._lock:
            return connection in self._bindings

    def get(self, connection: str) -> Binding | None:
        with self._lock:
            return self._bindings.get(connection)

    def reserve(self, connection: str) -> bool:
        with self._lock:
            if connection not in self._bindings or self._bindings[connection] is not None:
                return False
            if connection in self._pending:
                return False
            self._pending.add(connection)
            return True

    def cancel(self, connection: str) -> None:
        with self._lock:
            self._pending.discard(connection)

    def bind(self, connection: str, binding: Binding) -> bool:
        with self._lock:
            if connection not in self._pending:
                return False
            self._pending.discard(connection)
            self._bindings[connection] = binding
            return True

    def release(self, connection: str) -> Binding | None:
        with self._lock:
            self._pending.discard(connection)
            return self._bindings.pop(connection, None)
