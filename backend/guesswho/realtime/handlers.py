from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping

from flask import request
from flask_socketio import SocketIO

from ..game.constants import DEFAULT_ROUNDS, MAX_NAME_LENGTH
from ..game.errors import AlreadyInRoom, GameError, MalformedMessage
from ..game.models import ROUND_TIMEOUT, Room
from ..game.service import GameService
from . import events
from .registry import Binding, ConnectionRegistry

logger = logging.getLogger(__name__)

INBOUND_TYPES = ("create_room", "join_room", "start_game", "guess")


def _validate_name(name: Any) -> str:
    if not isinstance(name, str):
        raise MalformedMessage("Please enter a name.")
    n = name.strip()
    if not n:
        raise MalformedMessage("Please enter a name.")
    if len(n) > MAX_NAME_LENGTH:
        raise MalformedMessage(f"Names are limited to {MAX_NAME_LENGTH} characters.")
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        raise MalformedMessage("Names cannot contain < or >.")
    for ch in n:
        if ord(ch) < 32:
            raise MalformedMessage("Names cannot contain control characters.")
    if n == ROUND_TIMEOUT:
        raise MalformedMessage("That name is reserved.")
    return n


def _parse_rounds(raw: Any) -> int:
    # Zero means "not chosen", same as a missing field.
    if raw is None or (raw == 0 and not isinstance(raw, bool)):
        return DEFAULT_ROUNDS
    # bool is an int subclass; reject it explicitly.
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise MalformedMessage("Rounds must be a positive whole number.")
    return raw


def _parse_code(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedMessage("Please enter a room code.")
    return raw.strip().upper()


class MessageDispatcher:
    """Routes inbound records to the game service for one connection at a time."""

    def __init__(self, service: GameService, registry: ConnectionRegistry) -> None:
        self.service = service
        self.registry = registry
        self._handlers: dict[str, Callable[[str, Mapping[str, Any]], None]] = {
            "create_room": self._create_room,
            "join_room": self._join_room,
            "start_game": self._start_game,
            "guess": self._guess,
        }

    def dispatch(self, connection: str, data: Any, msg_type: str | None = None) -> None:
        if not isinstance(data, Mapping):
            # start_game carries no fields; some clients send nothing at all.
            if data is None and msg_type is not None:
                data = {}
            else:
                logger.debug("[drop] sid=%s non-mapping payload", connection)
                return

        msg_type = msg_type or data.get("type")
        handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
        if handler is None:
            logger.debug("[drop] sid=%s unknown type=%r", connection, msg_type)
            return

        try:
            handler(connection, data)
        except GameError as exc:
            logger.info("[error] sid=%s type=%s code=%s", connection, msg_type, exc.code)
            self.service.broadcaster.send(connection, events.error(exc))

    def connect(self, connection: str) -> None:
        self.registry.open(connection)

    def disconnect(self, connection: str) -> None:
        binding = self.registry.release(connection)
        if binding is None:
            return
        self.service.remove_player(binding.room, binding.player_name)

    def _create_room(self, connection: str, data: Mapping[str, Any]) -> None:
        def enter() -> tuple[Room, str]:
            name = _validate_name(data.get("playerName"))
            rounds = _parse_rounds(data.get("rounds"))
            return self.service.create_room(connection, name, rounds), name

        self._enter(connection, enter)

    def _join_room(self, connection: str, data: Mapping[str, Any]) -> None:
        def enter() -> tuple[Room, str]:
            name = _validate_name(data.get("playerName"))
            code = _parse_code(data.get("code"))
            return self.service.join_room(connection, name, code), name

        self._enter(connection, enter)

    def _enter(self, connection: str, enter: Callable[[], tuple[Room, str]]) -> None:
        if not self.registry.is_open(connection):
            logger.debug("[drop] sid=%s not connected", connection)
            return
        if not self.registry.reserve(connection):
            raise AlreadyInRoom()
        try:
            room, name = enter()
        except BaseException:
            self.registry.cancel(connection)
            raise
        if not self.registry.bind(connection, Binding(room=room, player_name=name)):
            # The connection closed while the room was being entered.
            logger.info("[gone] sid=%s room=%s player=%s", connection, room.code, name)
            self.service.remove_player(room, name)

    def _start_game(self, connection: str, data: Mapping[str, Any]) -> None:
        binding = self.registry.get(connection)
        if binding is None:
            return
        self.service.start_game(binding.room, binding.player_name)

    def _guess(self, connection: str, data: Mapping[str, Any]) -> None:
        binding = self.registry.get(connection)
        if binding is None:
            return
        text = data.get("text")
        if not isinstance(text, str):
            return
        self.service.guess(binding.room, binding.player_name, text)


def register_socketio_handlers(socketio: SocketIO, dispatcher: MessageDispatcher) -> None:
    def _make_handler(msg_type: str):
        def _handler(data=None):
            dispatcher.dispatch(request.sid, data, msg_type=msg_type)

        _handler.__name__ = f"on_{msg_type}"
        return _handler

    for msg_type in INBOUND_TYPES:
        socketio.on_event(msg_type, _make_handler(msg_type))

    # Plain `send()` packets carry the type inside the record.
    def on_message(data=None):
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except ValueError:
                return
        dispatcher.dispatch(request.sid, data)

    socketio.on_event("message", on_message)
    socketio.on_event("json", on_message)

    @socketio.on("connect")
    def on_connect(auth=None):
        dispatcher.connect(request.sid)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        logger.debug("[disconnect] sid=%s reason=%s", request.sid, reason)
        dispatcher.disconnect(request.sid)
