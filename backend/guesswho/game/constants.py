ROUND_DURATION_SEC = 60
REVEAL_INTERVAL_SEC = 3
COUNTDOWN_INTERVAL_SEC = 1
WIN_ADVANCE_DELAY_SEC = 5
TIMEOUT_ADVANCE_DELAY_SEC = 2

DEFAULT_ROUNDS = 5
MIN_PLAYERS = 2
MAX_NAME_LENGTH = 16

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 5
ROOM_CODE_ATTEMPTS = 100

# Scoring: points = max(MIN_POINTS, round(MAX_POINTS - elapsed seconds))
MAX_POINTS = 20
MIN_POINTS = 1
