import os
import sys
from pathlib import Path


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO (empty = platform default)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Photo catalog: file name (without extension) is the answer
    PHOTOS_DIR = os.environ.get(
        "PHOTOS_DIR",
        str(Path(__file__).resolve().parents[2] / "public" / "photos"),
    )
    PHOTOS_URL_PREFIX = os.environ.get("PHOTOS_URL_PREFIX", "/photos")


def resolve_async_mode(configured: str = "") -> str:
    if configured:
        return configured
    # eventlet has known compatibility issues on Windows and Python >= 3.13
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"
