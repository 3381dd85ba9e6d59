from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol

from .models import PhotoEntry

logger = logging.getLogger(__name__)

PHOTO_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


class PhotoCatalog(Protocol):
    def list_photos(self) -> list[PhotoEntry]: ...


class StaticPhotoCatalog:
    def __init__(self, entries: Iterable[PhotoEntry | tuple[str, str]]) -> None:
        self._entries: list[PhotoEntry] = []
        for e in entries:
            if not isinstance(e, PhotoEntry):
                e = PhotoEntry(image_ref=e[0], answer=e[1])
            self._entries.append(e)

    def list_photos(self) -> list[PhotoEntry]:
        return list(self._entries)


class DirectoryPhotoCatalog:
    """Scans a folder of images; ``Sarah.jpg`` becomes answer ``sarah``."""

    def __init__(self, directory: str | Path, url_prefix: str = "/photos") -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def list_photos(self) -> list[PhotoEntry]:
        if not self.directory.is_dir():
            logger.warning("[catalog] photos directory missing: %s", self.directory)
            return []

        entries: list[PhotoEntry] = []
        for path in sorted(self.directory.iterdir()):
            if not path.is_file() or path.suffix.lower() not in PHOTO_EXTENSIONS:
                continue
            answer = path.stem.strip()
            if not answer:
                continue
            entries.append(PhotoEntry(image_ref=f"{self.url_prefix}/{path.name}", answer=answer))
        return entries
