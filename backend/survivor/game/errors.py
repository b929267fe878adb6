"""
Typed failures raised by the room state machine and registry.

Every error carries a short machine code (sent to clients as ``error``) and an
HTTP status for the REST surface. Socket handlers only ever send them back to
the acting participant.
"""
from __future__ import annotations


class GameError(Exception):
    code = "game_error"
    status_code = 400
    default_message = "Game error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class NotFound(GameError):
    status_code = 404


class Conflict(GameError):
    status_code = 409


class ValidationFailed(GameError):
    status_code = 400


class DataIntegrityError(GameError):
    """Catalog data the game cannot run with. Never a player mistake."""
    status_code = 500


# ============ NotFound ============

class RoomNotFound(NotFound):
    code = "room_not_found"

    def __init__(self, room_code: str):
        self.room_code = room_code
        super().__init__(f"Room {room_code} not found")


class PlayerNotFound(NotFound):
    code = "player_not_found"

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"Player {identity} not found")


class VotedPlayerNotFound(NotFound):
    code = "voted_player_not_found"

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"Voted player {identity} not found")


class ItemNotFound(NotFound):
    code = "item_not_found"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found in scenario")


class UnknownScenario(NotFound):
    code = "unknown_scenario"

    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(f"Scenario {scenario_id} does not exist")


# ============ Conflict ============

class RoomFull(Conflict):
    code = "room_full"
    default_message = "Room is full"


class RoomNotAcceptingPlayers(Conflict):
    code = "room_not_accepting_players"
    default_message = "Game already started"


class SessionAlreadyInRoom(Conflict):
    code = "session_in_use"
    default_message = "This connection already belongs to another player"


class InvalidStateTransition(Conflict):
    code = "wrong_phase"
    default_message = "Action not allowed in the current phase"


class PlayersNotReady(Conflict):
    code = "players_not_ready"
    default_message = "All players must be ready to start"


class NotHost(Conflict):
    code = "only_host"
    default_message = "Only the host can do that"


class NotYourTurn(Conflict):
    code = "not_your_turn"
    default_message = "Not your turn"


class InventoryFull(Conflict):
    code = "inventory_full"
    default_message = "Player already has maximum items"


class ItemTaken(Conflict):
    code = "item_taken"
    default_message = "Item already taken"


class ItemNotOwned(Conflict):
    code = "item_not_owned"
    default_message = "Item not owned by player"


class ItemAlreadyUsed(Conflict):
    code = "item_already_used"
    default_message = "Item already used in a previous situation"


# ============ Validation ============

class InvalidCapacity(ValidationFailed):
    code = "invalid_capacity"
    default_message = "Number of players must be between 3 and 15"


class InvalidPayload(ValidationFailed):
    code = "invalid_payload"
    default_message = "Missing required fields"


# ============ Data integrity ============

class NoSituationsAvailable(DataIntegrityError):
    code = "no_situations"

    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(f"No situations available in scenario {scenario_id}")


class EmptyItemCategory(DataIntegrityError):
    code = "empty_item_category"

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Item pool has no '{category}' items to allocate")
