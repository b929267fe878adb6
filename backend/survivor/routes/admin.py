from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..game import service
from ..game.errors import RoomNotFound
from ..game.models import room_to_dict
from ..utils.web import error_response, get_registry

bp = Blueprint("admin", __name__)


def _authorized() -> bool:
    token = current_app.config.get("ADMIN_TOKEN", "")
    if not token:
        return False
    return request.headers.get("X-Admin-Token", "") == token


@bp.get("/__admin__/rooms")
def admin_rooms():
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    rooms = get_registry().list_rooms()
    payload = [service.room_public_state(r) for r in rooms]
    return jsonify({"rooms": payload})


@bp.get("/__admin__/rooms/<code>")
def admin_room(code: str):
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    room = get_registry().get_room(code)
    if not room:
        return error_response(RoomNotFound(service.normalize_code(code)))

    # Admins see the transport sessions as well.
    return jsonify({"room": room_to_dict(room)})
