from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..game import service
from ..game.errors import GameError, InvalidCapacity, InvalidPayload, RoomNotFound
from ..utils.web import error_response, get_registry, validate_name

bp = Blueprint("rooms", __name__)
logger = logging.getLogger(__name__)


def _identity_payload(room, session_id: str) -> dict:
    payload = service.room_public_state(room)
    player = next(p for p in room.players if p.session_id == session_id)
    payload["playerId"] = player.id
    payload["sessionId"] = session_id
    return payload


def _parse_capacity(value) -> int | None:
    # Whole numbers only; 3.9 is rejected rather than truncated.
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@bp.post("/rooms")
def create_room():
    data = request.get_json(silent=True) or {}
    player_name = str(data.get("playerName") or "").strip()
    scenario_id = str(data.get("scenarioId") or "").strip()
    max_players = data.get("maxPlayers")

    if not player_name or not scenario_id or max_players in (None, ""):
        return error_response(InvalidPayload())
    if not validate_name(player_name):
        return error_response(InvalidPayload("Invalid player name"))
    max_players = _parse_capacity(max_players)
    if max_players is None:
        return error_response(InvalidCapacity())

    # Stateless HTTP clients get a temporary identity until their socket joins.
    session_id = service.new_temp_session_id()
    try:
        room = get_registry().create_room(session_id, player_name, scenario_id, max_players)
    except GameError as e:
        logger.info("Create room rejected: %s", e)
        return error_response(e)

    return jsonify(_identity_payload(room, session_id))


@bp.post("/rooms/<code>/join")
def join_room(code: str):
    data = request.get_json(silent=True) or {}
    player_name = str(data.get("playerName") or "").strip()
    if not validate_name(player_name):
        return error_response(InvalidPayload())

    session_id = service.new_temp_session_id()
    try:
        room = get_registry().join_room(code, session_id, player_name)
    except GameError as e:
        logger.info("Join room %s rejected: %s", code, e)
        return error_response(e)

    return jsonify(_identity_payload(room, session_id))


@bp.get("/rooms/<code>")
def get_room(code: str):
    room = get_registry().get_room(code)
    if not room:
        return error_response(RoomNotFound(service.normalize_code(code)))
    return jsonify(service.room_public_state(room))
