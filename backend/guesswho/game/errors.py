from __future__ import annotations


class GameError(Exception):
    """A caller-local failure, reported only to the connection that caused it."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def code(self) -> str:
        return type(self).__name__


class NoPhotosAvailable(GameError):
    default_message = "No photos found in the photo library. Add images first!"


class RoomNotFound(GameError):
    default_message = "Room not found."


class GameInProgress(GameError):
    default_message = "Game already in progress."


class NameTaken(GameError):
    default_message = "Name already taken in this room."


class NotEnoughPlayers(GameError):
    default_message = "Need at least 2 players."


class MalformedMessage(GameError):
    default_message = "Malformed message."


class AlreadyInRoom(GameError):
    default_message = "You are already in a room."


class RoomCodeExhausted(GameError):
    default_message = "Could not allocate a room code. Try again."
