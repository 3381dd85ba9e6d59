from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Sequence

from .constants import ROOM_CODE_ALPHABET, ROOM_CODE_ATTEMPTS, ROOM_CODE_LENGTH
from .errors import NoPhotosAvailable, RoomCodeExhausted
from .models import PhotoEntry, Player, Room

logger = logging.getLogger(__name__)


class RoomStore:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._rng = rng or random.SystemRandom()

    def _generate_code(self) -> str:
        return "".join(self._rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))

    def select_photos(self, catalog: Sequence[PhotoEntry], requested_rounds: int) -> list[PhotoEntry]:
        shuffled = list(catalog)
        self._rng.shuffle(shuffled)
        return shuffled[: min(requested_rounds, len(shuffled))]

    def create_room(
        self,
        host_name: str,
        host_connection: str,
        requested_rounds: int,
        catalog: Sequence[PhotoEntry],
    ) -> Room:
        if not catalog:
            raise NoPhotosAvailable()

        photos = self.select_photos(catalog, requested_rounds)

        with self._lock:
            for _ in range(ROOM_CODE_ATTEMPTS):
                code = self._generate_code()
                if code not in self._rooms:
                    break
            else:
                raise RoomCodeExhausted()

            room = Room(code=code, host=host_name, photos=photos)
            room.players.append(Player(name=host_name, connection=host_connection))
            self._rooms[code] = room

        logger.info("[room-create] code=%s host=%s rounds=%d", code, host_name, room.total_rounds)
        return room

    def get_room(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def remove_if_empty(self, room: Room) -> bool:
        """Drop ``room`` from the store when it has no players left."""
        if room.players:
            return False
        with self._lock:
            # Only remove the exact instance, never a later room reusing the code.
            if self._rooms.get(room.code) is room:
                del self._rooms[room.code]
                return True
            return False

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())
