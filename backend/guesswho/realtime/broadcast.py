from __future__ import annotations

import logging
from typing import Protocol

from flask_socketio import SocketIO

from ..game.models import Room

logger = logging.getLogger(__name__)


class Broadcaster(Protocol):
    def send(self, connection: str, event: dict) -> None: ...

    def broadcast(self, room: Room, event: dict) -> None: ...


class SocketIOBroadcaster:
    """Writes events to client connections.

    Callers hold the room lock while broadcasting, so members of one room see
    events in the order the room processed them.
    """

    def __init__(self, socketio: SocketIO, namespace: str = "/") -> None:
        self._socketio = socketio
        self._namespace = namespace

    def send(self, connection: str, event: dict) -> None:
        self._socketio.emit(event["type"], event, to=connection, namespace=self._namespace)

    def broadcast(self, room: Room, event: dict) -> None:
        for player in list(room.players):
            try:
                self.send(player.connection, event)
            except Exception:
                # A dead connection must not starve the rest of the room.
                logger.warning(
                    "[broadcast-fail] room=%s player=%s type=%s", room.code, player.name, event["type"], exc_info=True
                )
