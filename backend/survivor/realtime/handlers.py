from __future__ import annotations

import logging

from flask import request
from flask_socketio import SocketIO, emit, join_room

from ..game import messages, service
from ..game.errors import GameError, InvalidPayload
from ..game.models import Room
from ..game.service import RoomRegistry
from ..utils.web import validate_name
from . import events

logger = logging.getLogger(__name__)


def register_socketio_handlers(socketio: SocketIO, registry: RoomRegistry) -> None:
    def _broadcast_room_state(room: Room, message: str | None = None) -> None:
        socketio.emit(events.ROOM_STATE, service.room_public_state(room), to=room.code)
        if message:
            socketio.emit(events.ROOM_MESSAGE, {"roomCode": room.code, "text": message}, to=room.code)

    def _reject(error: GameError) -> dict:
        # Failures only ever reach the acting participant.
        logger.info("Rejected %s from %s: %s", error.code, request.sid, error)
        emit(events.ROOM_ERROR, error.to_dict(), to=request.sid)
        return {"ok": False, **error.to_dict()}

    def _room_code(payload: dict) -> str:
        room_code = str(payload.get("roomCode", "")).strip()
        if not room_code:
            raise InvalidPayload("Missing room code")
        return room_code

    def _after_removal(room_code: str, room: Room | None) -> None:
        if room is None:
            return
        _broadcast_room_state(room, "A player left the room.")

    registry.on_player_removed = _after_removal

    @socketio.on(events.ROOM_JOIN)
    def room_join(data):
        payload = data or {}
        name = str(payload.get("name", "")).strip()
        try:
            room_code = _room_code(payload)
            if not validate_name(name):
                raise InvalidPayload("Invalid player name")
            room = registry.join_room(room_code, request.sid, name)
        except GameError as e:
            return _reject(e)

        join_room(room.code)
        _broadcast_room_state(room)
        player = next(p for p in room.players if p.session_id == request.sid)
        return {"ok": True, "playerId": player.id}

    @socketio.on(events.PLAYER_READY)
    def player_ready(data):
        payload = data or {}
        try:
            room = registry.toggle_ready(_room_code(payload), request.sid)
        except GameError as e:
            return _reject(e)

        _broadcast_room_state(room)
        return {"ok": True}

    @socketio.on(events.GAME_START)
    def game_start(data):
        payload = data or {}
        try:
            room = registry.start_draft(_room_code(payload), session_id=request.sid)
        except GameError as e:
            return _reject(e)

        _broadcast_room_state(room, messages.draft_started(room))
        return {"ok": True}

    @socketio.on(events.ITEM_SELECT)
    def item_select(data):
        payload = data or {}
        item_id = str(payload.get("itemId", "")).strip()
        try:
            room_code = _room_code(payload)
            if not item_id:
                raise InvalidPayload("Missing item id")
            room = registry.select_item(room_code, request.sid, item_id)
        except GameError as e:
            return _reject(e)

        _broadcast_room_state(room, messages.after_item_selected(room))
        return {"ok": True}

    @socketio.on(events.VOTE_CAST)
    def vote_cast(data):
        payload = data or {}
        voted_id = str(payload.get("votedPlayerId", "")).strip()
        try:
            room_code = _room_code(payload)
            if not voted_id:
                raise InvalidPayload("Missing voted player")
            room = registry.vote(room_code, request.sid, voted_id)
        except GameError as e:
            return _reject(e)

        _broadcast_room_state(room, messages.after_vote(room))
        return {"ok": True}

    @socketio.on("disconnect")
    def on_disconnect(*args):
        registry.handle_disconnect(request.sid)
