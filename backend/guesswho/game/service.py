from __future__ import annotations

import logging
import math
import random
import time
import uuid
from typing import Callable

from ..realtime import events
from ..realtime.broadcast import Broadcaster
from .catalog import PhotoCatalog
from .constants import (
    COUNTDOWN_INTERVAL_SEC,
    MIN_PLAYERS,
    REVEAL_INTERVAL_SEC,
    ROUND_DURATION_SEC,
    TIMEOUT_ADVANCE_DELAY_SEC,
    WIN_ADVANCE_DELAY_SEC,
)
from .errors import GameInProgress, NameTaken, NotEnoughPlayers, RoomNotFound
from .models import ROUND_TIMEOUT, ChatEntry, Circle, Player, Room, normalize_answer
from .scoring import points_for_elapsed
from .store import RoomStore
from .timers import Scheduler

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class GameService:
    """Authoritative room and round lifecycle.

    Every public method and every timer callback takes ``room.lock`` before
    touching the room, so a guess, a tick and a disconnect never interleave.
    """

    def __init__(
        self,
        store: RoomStore,
        catalog: PhotoCatalog,
        broadcaster: Broadcaster,
        scheduler: Scheduler,
        clock: Callable[[], int] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self._clock = clock or now_ms
        self._rng = rng or random.Random()

    def now(self) -> int:
        return self._clock()

    def catalog_size(self) -> int:
        return len(self.catalog.list_photos())

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------

    def create_room(self, connection: str, player_name: str, rounds: int) -> Room:
        photos = self.catalog.list_photos()
        room = self.store.create_room(player_name, connection, rounds, photos)
        with room.lock:
            self.broadcaster.send(connection, events.room_created(room, photo_count=len(photos)))
            self.broadcaster.broadcast(room, events.lobby(room))
        return room

    def join_room(self, connection: str, player_name: str, code: str) -> Room:
        room = self.store.get_room(code)
        if room is None:
            raise RoomNotFound()

        with room.lock:
            if room.closed:
                raise RoomNotFound()
            if room.state != "lobby":
                raise GameInProgress()
            if room.find_player(player_name) is not None:
                raise NameTaken()

            room.players.append(Player(name=player_name, connection=connection))
            logger.info("[room-join] code=%s player=%s players=%d", room.code, player_name, len(room.players))

            self.broadcaster.send(connection, events.room_joined(room))
            self.broadcaster.broadcast(room, events.lobby(room))
        return room

    def start_game(self, room: Room, player_name: str) -> bool:
        with room.lock:
            if room.closed or room.state != "lobby" or player_name != room.host:
                return False
            if len(room.players) < MIN_PLAYERS:
                raise NotEnoughPlayers()

            room.state = "playing"
            room.current_round_index = 0
            logger.info("[game-start] code=%s players=%d rounds=%d", room.code, len(room.players), room.total_rounds)
            self._open_round(room)
            return True

    def remove_player(self, room: Room, player_name: str) -> bool:
        """Remove a departed player. Safe to call more than once."""
        with room.lock:
            player = room.find_player(player_name)
            if player is None:
                return False

            room.players.remove(player)
            logger.info("[room-leave] code=%s player=%s remaining=%d", room.code, player_name, len(room.players))

            if not room.players:
                self._close_room(room)
            else:
                self.broadcaster.broadcast(room, events.player_left(room, player_name))
            return True

    def _close_room(self, room: Room) -> None:
        room.timers.cancel_all()
        room.closed = True
        self.store.remove_if_empty(room)
        logger.info("[room-close] code=%s", room.code)

    # ------------------------------------------------------------------
    # Guessing
    # ------------------------------------------------------------------

    def guess(self, room: Room, player_name: str, text: str) -> ChatEntry | None:
        with room.lock:
            if room.closed or not room.round_open:
                return None
            player = room.find_player(player_name)
            if player is None:
                return None

            text = (text or "").strip()
            if not text:
                return None

            entry = ChatEntry(
                id=uuid.uuid4().hex,
                player_name=player_name,
                text=text,
                timestamp=self.now(),
            )

            if normalize_answer(text) == room.current_photo.answer:
                entry.is_correct = True
                self._resolve_won(room, player)

            room.chat_log.append(entry)
            self.broadcaster.broadcast(room, events.chat(entry))
            return entry

    def _resolve_won(self, room: Room, player: Player) -> None:
        room.round_winner = player.name
        room.timers.cancel_all()

        elapsed_sec = (self.now() - (room.round_started_at_ms or self.now())) / 1000
        points = points_for_elapsed(elapsed_sec)
        player.score += points
        logger.info(
            "[round-won] code=%s round=%d winner=%s points=%d elapsed=%.1fs",
            room.code,
            room.current_round_index,
            player.name,
            points,
            elapsed_sec,
        )

        self.broadcaster.broadcast(room, events.round_won(room, player.name, points))
        self._schedule_advance(room, WIN_ADVANCE_DELAY_SEC)

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def generate_circle(self) -> Circle:
        return Circle(
            x=0.12 + self._rng.random() * 0.76,
            y=0.12 + self._rng.random() * 0.76,
            radius=0.025 + self._rng.random() * 0.02,
        )

    def time_left(self, room: Room) -> int:
        if room.round_deadline_ms is None:
            return 0
        return max(0, math.ceil((room.round_deadline_ms - self.now()) / 1000))

    def _open_round(self, room: Room) -> None:
        room.timers.cancel_all()

        room.round_serial += 1
        room.circles = [self.generate_circle()]
        room.chat_log = []
        room.round_winner = None
        room.round_started_at_ms = self.now()
        room.round_deadline_ms = room.round_started_at_ms + ROUND_DURATION_SEC * 1000

        serial = room.round_serial
        code = room.code
        room.timers.reveal = self.scheduler.call_every(
            REVEAL_INTERVAL_SEC, lambda: self._on_reveal_tick(room, serial), label=f"reveal:{code}"
        )
        room.timers.countdown = self.scheduler.call_every(
            COUNTDOWN_INTERVAL_SEC, lambda: self._on_countdown_tick(room, serial), label=f"countdown:{code}"
        )
        room.timers.timeout = self.scheduler.call_later(
            ROUND_DURATION_SEC, lambda: self._on_round_timeout(room, serial), label=f"timeout:{code}"
        )

        logger.info("[round-start] code=%s round=%d/%d", code, room.current_round_index + 1, room.total_rounds)
        self.broadcaster.broadcast(room, events.round_start(room, time_left=ROUND_DURATION_SEC))

    def _is_current(self, room: Room, serial: int) -> bool:
        return not room.closed and room.state == "playing" and room.round_serial == serial

    def _on_reveal_tick(self, room: Room, serial: int) -> None:
        with room.lock:
            if not self._is_current(room, serial) or room.round_winner is not None:
                return
            room.circles.append(self.generate_circle())
            self.broadcaster.broadcast(room, events.circles(room))

    def _on_countdown_tick(self, room: Room, serial: int) -> None:
        with room.lock:
            if not self._is_current(room, serial) or room.round_winner is not None:
                return
            self.broadcaster.broadcast(room, events.round_time(self.time_left(room)))

    def _on_round_timeout(self, room: Room, serial: int) -> None:
        with room.lock:
            if not self._is_current(room, serial) or room.round_winner is not None:
                return
            room.round_winner = ROUND_TIMEOUT
            room.timers.cancel_all()
            logger.info("[round-timeout] code=%s round=%d", room.code, room.current_round_index)

            self.broadcaster.broadcast(room, events.round_timeout(room))
            self._schedule_advance(room, TIMEOUT_ADVANCE_DELAY_SEC)

    def _schedule_advance(self, room: Room, delay: float) -> None:
        serial = room.round_serial
        room.timers.advance = self.scheduler.call_later(
            delay, lambda: self._on_advance(room, serial), label=f"advance:{room.code}"
        )

    def _on_advance(self, room: Room, serial: int) -> None:
        with room.lock:
            if not self._is_current(room, serial):
                return
            self._next_round(room)

    def _next_round(self, room: Room) -> None:
        room.timers.cancel_all()

        if room.current_round_index + 1 >= room.total_rounds:
            room.state = "finished"
            logger.info("[game-over] code=%s", room.code)
            self.broadcaster.broadcast(room, events.game_over(room))
            return

        room.current_round_index += 1
        self._open_round(room)
