from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Literal

from .timers import RoundTimers


RoomState = Literal["lobby", "playing", "finished"]

# Recorded as the round winner when nobody guessed before the deadline.
ROUND_TIMEOUT = "__timeout__"


@dataclass
class Player:
    name: str
    connection: str
    score: int = 0


@dataclass(frozen=True)
class PhotoEntry:
    image_ref: str
    answer: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "answer", normalize_answer(self.answer))


@dataclass
class Circle:
    x: float
    y: float
    radius: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "radius": self.radius}


@dataclass
class ChatEntry:
    id: str
    player_name: str
    text: str
    timestamp: int
    is_correct: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "playerName": self.player_name,
            "text": self.text,
            "timestamp": self.timestamp,
            "isCorrect": self.is_correct,
        }


@dataclass
class Room:
    code: str
    host: str
    photos: list[PhotoEntry]
    state: RoomState = "lobby"
    players: list[Player] = field(default_factory=list)
    current_round_index: int = 0
    circles: list[Circle] = field(default_factory=list)
    chat_log: list[ChatEntry] = field(default_factory=list)
    round_winner: str | None = None
    round_started_at_ms: int | None = None
    round_deadline_ms: int | None = None
    round_serial: int = 0
    closed: bool = False
    timers: RoundTimers = field(default_factory=RoundTimers)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @property
    def total_rounds(self) -> int:
        return len(self.photos)

    @property
    def current_photo(self) -> PhotoEntry:
        return self.photos[self.current_round_index]

    @property
    def round_open(self) -> bool:
        return self.state == "playing" and self.round_winner is None

    def player_names(self) -> list[str]:
        return [p.name for p in self.players]

    def find_player(self, name: str) -> Player | None:
        for p in self.players:
            if p.name == name:
                return p
        return None


def normalize_answer(text: str) -> str:
    return (text or "").strip().lower()
