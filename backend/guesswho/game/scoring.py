from __future__ import annotations

import math

from .constants import MAX_POINTS, MIN_POINTS
from .models import Room


def points_for_elapsed(elapsed_sec: float) -> int:
    """Points for a correct guess made ``elapsed_sec`` after the round opened.

    Rounds half up, so 2.5s left on the clock is worth 3 rather than 2.
    """
    return max(MIN_POINTS, math.floor(MAX_POINTS - elapsed_sec + 0.5))


def scoreboard(room: Room) -> list[dict]:
    # sorted() is stable: ties keep join order.
    ranked = sorted(room.players, key=lambda p: p.score, reverse=True)
    return [{"name": p.name, "score": p.score} for p in ranked]
