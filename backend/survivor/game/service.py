from __future__ import annotations

import logging
import random
import uuid
from contextlib import contextmanager
from threading import RLock
from typing import Callable, Iterator

from ..config import Config
from . import rules
from .errors import (
    InvalidCapacity,
    InvalidPayload,
    InvalidStateTransition,
    NotHost,
    RoomFull,
    RoomNotAcceptingPlayers,
    RoomNotFound,
    SessionAlreadyInRoom,
    UnknownScenario,
)
from .models import Player, Room, player_to_dict, room_to_dict
from .scenarios import get_scenario
from .store import MemoryRoomStore, RoomStore
from .timers import TaskScheduler

logger = logging.getLogger(__name__)

# No 0/O or 1/I: codes are read aloud and typed by hand.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def new_temp_session_id() -> str:
    return f"{Config.TEMP_SESSION_PREFIX}{uuid.uuid4().hex}"


def is_temp_session(session_id: str) -> bool:
    return session_id.startswith(Config.TEMP_SESSION_PREFIX)


class RoomRegistry:
    """Owns every room: creation, lookup, per-room serialization and cleanup."""

    def __init__(
        self,
        store: RoomStore | None = None,
        rng: random.Random | None = None,
        scheduler: TaskScheduler | None = None,
        grace_period_sec: float | None = None,
        code_length: int | None = None,
    ):
        self.store = store if store is not None else MemoryRoomStore()
        self.rng = rng or random.Random()
        self.scheduler = scheduler or TaskScheduler()
        self.grace_period_sec = Config.DISCONNECT_GRACE_SEC if grace_period_sec is None else grace_period_sec
        self.code_length = code_length or Config.ROOM_CODE_LENGTH
        self.on_player_removed: Callable[[str, Room | None], None] | None = None

        self._lock = RLock()
        self._room_locks: dict[str, RLock] = {}
        self._session_rooms: dict[str, str] = {}
        for room in self.store.values():
            for p in room.players:
                self._session_rooms[p.session_id] = room.code

    # ---- locking / commit ----

    @contextmanager
    def _locked(self, code: str) -> Iterator[None]:
        with self._lock:
            lock = self._room_locks.setdefault(code, RLock())
        with lock:
            yield

    def _require(self, code: str) -> Room:
        room = self.store.get(code)
        if room is None:
            raise RoomNotFound(code)
        return room

    def _commit(self, room: Room) -> Room:
        self.store.put(room)
        return room

    def _apply(self, code: str, transition: Callable[[Room], Room]) -> Room:
        code = normalize_code(code)
        with self._locked(code):
            room = self._require(code)
            return self._commit(transition(room))

    def _require_session_free(self, session_id: str, code: str | None = None) -> None:
        # A session plays one seat in one room at a time.
        other = self.lookup_room_for_identity(session_id)
        if other is not None and other.code != code:
            raise SessionAlreadyInRoom(f"Session is already in room {other.code}")

    def _generate_code(self) -> str:
        return "".join(self.rng.choice(CODE_ALPHABET) for _ in range(self.code_length))

    # ---- lookups ----

    def get_room(self, code: str) -> Room | None:
        return self.store.get(normalize_code(code))

    def lookup_room_for_identity(self, session_id: str) -> Room | None:
        with self._lock:
            code = self._session_rooms.get(session_id)
        if code is None:
            return None
        room = self.store.get(code)
        if room is None or rules.find_player(room, session_id) is None:
            return None
        return room

    def list_rooms(self) -> list[Room]:
        return self.store.values()

    # ---- registry operations ----

    def create_room(self, host_session_id: str, name: str, scenario_id: str, max_players: int) -> Room:
        name = (name or "").strip()
        if not name or not host_session_id:
            raise InvalidPayload()
        if isinstance(max_players, bool) or not isinstance(max_players, int):
            raise InvalidCapacity()
        if max_players < Config.MIN_PLAYERS or max_players > Config.MAX_PLAYERS:
            raise InvalidCapacity()

        scenario = get_scenario(scenario_id)
        if scenario is None:
            raise UnknownScenario(scenario_id)
        self._require_session_free(host_session_id)

        host = Player(id=uuid.uuid4().hex, session_id=host_session_id, name=name, is_host=True)
        with self._lock:
            code = self._generate_code()
            while self.store.get(code) is not None:
                logger.warning("Room code collision detected, regenerating: %s", code)
                code = self._generate_code()

            room = Room(
                id=uuid.uuid4().hex,
                code=code,
                host_id=host.id,
                max_players=max_players,
                scenario=scenario,
                players=[host],
            )
            self._commit(room)
            self._session_rooms[host_session_id] = code

        logger.info("Created room %s (%s) for host %s", code, scenario.id, name)
        return room

    def join_room(self, code: str, session_id: str, name: str) -> Room:
        code = normalize_code(code)
        name = (name or "").strip()
        if not name or not session_id:
            raise InvalidPayload()

        with self._locked(code):
            room = self._require(code)
            self._require_session_free(session_id, code)
            holder = rules.find_player(room, session_id)
            if holder is not None and holder.name != name:
                raise SessionAlreadyInRoom(f"Session is already playing as {holder.name} in room {code}")

            existing = rules.find_player_by_name(room, name)
            if existing is not None:
                old_session = existing.session_id
                room = self._commit(rules.reconcile_identity(room, name, session_id))
                if old_session != session_id:
                    self.scheduler.cancel((code, old_session))
                    with self._lock:
                        self._session_rooms.pop(old_session, None)
                        self._session_rooms[session_id] = code
                    logger.info("Player %s in room %s moved from %s to %s", name, code, old_session, session_id)
                return room

            if len(room.players) >= room.max_players:
                raise RoomFull()
            if room.status != "waiting":
                raise RoomNotAcceptingPlayers(f"Room {code} is not accepting players (status: {room.status})")

            player = Player(id=uuid.uuid4().hex, session_id=session_id, name=name)
            room = self._commit(rules.add_player(room, player))
            with self._lock:
                self._session_rooms[session_id] = code

        logger.info("Player %s joined room %s (%d/%d)", name, code, len(room.players), room.max_players)
        return room

    # ---- game commands ----

    def toggle_ready(self, code: str, session_id: str) -> Room:
        return self._apply(code, lambda room: rules.toggle_ready(room, session_id))

    def start_draft(self, code: str, session_id: str | None = None) -> Room:
        """Start the draft. When ``session_id`` is given it must belong to the host."""

        def _start(room: Room) -> Room:
            if session_id is not None:
                player = rules.find_player(room, session_id)
                if player is None or not player.is_host:
                    raise NotHost()
            return rules.start_draft(room, self.rng)

        room = self._apply(code, _start)
        logger.info("Draft started in room %s with %d items", room.code, len(room.scenario.items))
        return room

    def select_item_in_draft(self, code: str, session_id: str, item_id: str) -> Room:
        return self._apply(code, lambda room: rules.select_item_in_draft(room, session_id, item_id))

    def select_item_for_situation(self, code: str, session_id: str, item_id: str) -> Room:
        return self._apply(code, lambda room: rules.select_item_for_situation(room, session_id, item_id))

    def select_item(self, code: str, session_id: str, item_id: str) -> Room:
        def _select(room: Room) -> Room:
            if room.status == "drafting":
                return rules.select_item_in_draft(room, session_id, item_id)
            if room.status == "situations":
                return rules.select_item_for_situation(room, session_id, item_id)
            raise InvalidStateTransition(f"Invalid room status for item selection: {room.status}")

        return self._apply(code, _select)

    def vote(self, code: str, voter_session_id: str, voted_identity: str) -> Room:
        return self._apply(code, lambda room: rules.vote_for_player(room, voter_session_id, voted_identity))

    # ---- disconnect cleanup ----

    def handle_disconnect(self, session_id: str) -> None:
        if is_temp_session(session_id):
            return
        with self._lock:
            code = self._session_rooms.get(session_id)
        if code is None:
            return

        logger.info("Session %s left room %s, removing in %ss", session_id, code, self.grace_period_sec)
        self.scheduler.schedule(
            (code, session_id),
            self.grace_period_sec,
            lambda: self.expire_session(code, session_id),
        )

    def expire_session(self, code: str, session_id: str) -> bool:
        """Remove the player if it is still attached to ``session_id``.

        Returns True when a player was removed. ``on_player_removed`` is then
        called with the room code and the updated room (None if deleted).
        """
        with self._locked(code):
            room = self.store.get(code)
            if room is None or rules.find_player(room, session_id) is None:
                # Reconnected under a new session, or the room is gone.
                with self._lock:
                    if self._session_rooms.get(session_id) == code:
                        del self._session_rooms[session_id]
                return False

            updated = rules.remove_player(room, session_id)
            with self._lock:
                self._session_rooms.pop(session_id, None)
                if updated is None:
                    self.store.delete(code)
                    self._room_locks.pop(code, None)
                    logger.info("Room %s deleted after its last player left", code)
                else:
                    self._commit(updated)
                    logger.info("Removed session %s from room %s", session_id, code)

        if self.on_player_removed is not None:
            self.on_player_removed(code, updated)
        return True


def room_public_state(room: Room) -> dict:
    # Session ids are transport secrets; clients address players by stable id.
    payload = room_to_dict(room)
    players = []
    for p in room.players:
        d = player_to_dict(p)
        d.pop("sessionId", None)
        players.append(d)
    payload["players"] = players
    return payload
