"""Outbound event records.

Every record carries its ``type`` and is emitted as a Socket.IO event of the
same name.
"""
from __future__ import annotations

from ..game.errors import GameError
from ..game.models import ChatEntry, Room
from ..game.scoring import scoreboard


def room_created(room: Room, photo_count: int) -> dict:
    return {"type": "room_created", "code": room.code, "photoCount": photo_count}


def room_joined(room: Room) -> dict:
    return {"type": "room_joined", "code": room.code}


def lobby(room: Room) -> dict:
    return {"type": "lobby", "players": room.player_names(), "host": room.host}


def error(exc: GameError) -> dict:
    return {"type": "error", "message": exc.message, "code": exc.code}


def round_start(room: Room, time_left: int) -> dict:
    return {
        "type": "round_start",
        "roundIndex": room.current_round_index,
        "totalRounds": room.total_rounds,
        "photoRef": room.current_photo.image_ref,
        "circles": [c.to_dict() for c in room.circles],
        "scoreboard": scoreboard(room),
        "timeLeft": time_left,
    }


def circles(room: Room) -> dict:
    return {"type": "circles", "circles": [c.to_dict() for c in room.circles]}


def round_time(time_left: int) -> dict:
    return {"type": "round_time", "timeLeft": time_left}


def chat(entry: ChatEntry) -> dict:
    return {"type": "chat", "message": entry.to_dict()}


def round_won(room: Room, winner: str, points: int) -> dict:
    photo = room.current_photo
    return {
        "type": "round_won",
        "winner": winner,
        "answer": photo.answer,
        "points": points,
        "photoRef": photo.image_ref,
        "scoreboard": scoreboard(room),
    }


def round_timeout(room: Room) -> dict:
    photo = room.current_photo
    return {
        "type": "round_timeout",
        "answer": photo.answer,
        "photoRef": photo.image_ref,
        "scoreboard": scoreboard(room),
    }


def player_left(room: Room, player_name: str) -> dict:
    return {"type": "player_left", "playerName": player_name, "players": room.player_names()}


def game_over(room: Room) -> dict:
    return {"type": "game_over", "scoreboard": scoreboard(room)}


def room_public_state(room: Room, time_left: int | None = None) -> dict:
    # Answers stay server-side.
    payload = {
        "code": room.code,
        "host": room.host,
        "state": room.state,
        "players": room.player_names(),
        "roundIndex": room.current_round_index,
        "totalRounds": room.total_rounds,
        "scoreboard": scoreboard(room),
    }
    if time_left is not None:
        payload["timeLeft"] = time_left
    return payload
