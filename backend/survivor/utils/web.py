from __future__ import annotations

from flask import current_app, jsonify

from ..game.errors import GameError
from ..game.service import RoomRegistry

REGISTRY_EXTENSION = "survivor.registry"


def get_registry() -> RoomRegistry:
    return current_app.extensions[REGISTRY_EXTENSION]


def error_response(error: GameError):
    return jsonify(error.to_dict()), error.status_code


def validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > 24:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True
