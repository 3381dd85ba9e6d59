from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game.service import GameService
from ..realtime import events

bp = Blueprint("rooms", __name__)


def _service() -> GameService:
    return current_app.extensions["guesswho"]


def _public_state(service: GameService, room) -> dict:
    with room.lock:
        time_left = service.time_left(room) if room.round_open else None
        return events.room_public_state(room, time_left=time_left)


@bp.get("/rooms")
def list_rooms():
    service = _service()
    payload = [_public_state(service, r) for r in service.store.list_rooms()]
    return jsonify({"rooms": payload})


@bp.get("/rooms/<code>")
def get_room(code: str):
    service = _service()
    room = service.store.get_room(code.strip().upper())
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(_public_state(service, room))
