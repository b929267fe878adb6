from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from threading import RLock

from .models import Room, room_from_dict, room_to_dict

logger = logging.getLogger(__name__)


class RoomStore:
    """Room snapshots keyed by upper-case room code."""

    def get(self, code: str) -> Room | None:
        raise NotImplementedError

    def put(self, room: Room) -> None:
        raise NotImplementedError

    def delete(self, code: str) -> bool:
        raise NotImplementedError

    def keys(self) -> list[str]:
        raise NotImplementedError

    def values(self) -> list[Room]:
        return [room for room in (self.get(code) for code in self.keys()) if room is not None]


class MemoryRoomStore(RoomStore):
    def __init__(self, rooms: dict[str, Room] | None = None):
        self._lock = RLock()
        self._rooms: dict[str, Room] = dict(rooms or {})

    def get(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def put(self, room: Room) -> None:
        with self._lock:
            self._rooms[room.code] = room

    def delete(self, code: str) -> bool:
        with self._lock:
            if code in self._rooms:
                del self._rooms[code]
                return True
            return False

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._rooms.keys())


class JsonFileRoomStore(MemoryRoomStore):
    """In-memory store that mirrors every change to a single JSON document.

    Writes are best-effort: an I/O failure is logged and the in-memory state
    stays authoritative.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        super().__init__(self.load_all())

    def load_all(self) -> dict[str, Room]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("Could not read rooms from %s", self.path)
            return {}

        rooms: dict[str, Room] = {}
        for code, data in (raw or {}).items():
            try:
                room = room_from_dict(data)
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed room %s in %s", code, self.path)
                continue
            rooms[room.code] = room
        logger.info("Loaded %d rooms from %s", len(rooms), self.path)
        return rooms

    def put(self, room: Room) -> None:
        with self._lock:
            super().put(room)
            self._flush()

    def delete(self, code: str) -> bool:
        with self._lock:
            deleted = super().delete(code)
            if deleted:
                self._flush()
            return deleted

    def _flush(self) -> None:
        document = {code: room_to_dict(room) for code, room in self._rooms.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".rooms-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            logger.exception("Error saving rooms to %s", self.path)
