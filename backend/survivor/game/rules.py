"""
Room state machine.

    waiting --start--> drafting --[everyone holds 5 items]--> situations
    situations --[everyone chose]--> voting
    voting --[everyone voted]--> situations (next) | finished

Every transition takes a room snapshot and returns a new one. The input is
never touched, so a raised GameError leaves the caller's room exactly as it was.
"""
from __future__ import annotations

import copy
import random

from ..config import Config
from . import allocator
from .errors import (
    InvalidStateTransition,
    InventoryFull,
    ItemAlreadyUsed,
    ItemNotFound,
    ItemNotOwned,
    ItemTaken,
    NoSituationsAvailable,
    NotYourTurn,
    PlayerNotFound,
    PlayersNotReady,
    SessionAlreadyInRoom,
    VotedPlayerNotFound,
)
from .models import Player, Room, now_ms


def find_player(room: Room, session_id: str) -> Player | None:
    for p in room.players:
        if p.session_id == session_id:
            return p
    return None


def find_player_by_id(room: Room, player_id: str) -> Player | None:
    for p in room.players:
        if p.id == player_id:
            return p
    return None


def find_player_by_name(room: Room, name: str) -> Player | None:
    # Names are unique per room: a join under an existing name reconciles instead of adding.
    for p in room.players:
        if p.name == name:
            return p
    return None


def _resolve_target(room: Room, identity: str) -> Player | None:
    return find_player_by_id(room, identity) or find_player(room, identity)


def _require_player(room: Room, session_id: str) -> Player:
    player = find_player(room, session_id)
    if player is None:
        raise PlayerNotFound(session_id)
    return player


def _require_status(room: Room, status: str) -> None:
    if room.status != status:
        raise InvalidStateTransition(f"Room is not in {status} phase (status: {room.status})")


def _touch(room: Room) -> Room:
    room.updated_at = now_ms()
    return room


def winner(room: Room) -> Player | None:
    best = None
    for p in room.players:
        if best is None or p.votes_received > best.votes_received:
            best = p
    return best


def reconcile_identity(room: Room, name: str, new_session_id: str) -> Room:
    """Move the player registered as ``name`` onto ``new_session_id``.

    Drafted items, ready state, votes and turn position stay with the player
    because they are keyed by the stable player id.
    """
    existing = find_player_by_name(room, name)
    if existing is None:
        raise PlayerNotFound(name)
    if existing.session_id == new_session_id:
        return room
    holder = find_player(room, new_session_id)
    if holder is not None:
        raise SessionAlreadyInRoom(f"Session is already used by {holder.name}")

    room = copy.deepcopy(room)
    player = find_player_by_name(room, name)
    player.session_id = new_session_id
    if player.is_host:
        room.host_id = player.id
    return _touch(room)


def add_player(room: Room, player: Player) -> Room:
    if find_player(room, player.session_id) is not None:
        raise SessionAlreadyInRoom()
    room = copy.deepcopy(room)
    room.players.append(player)
    return _touch(room)


def toggle_ready(room: Room, session_id: str) -> Room:
    _require_player(room, session_id)

    room = copy.deepcopy(room)
    player = find_player(room, session_id)
    player.is_ready = not player.is_ready
    return _touch(room)


def start_draft(room: Room, rng: random.Random | None = None) -> Room:
    rng = rng or random.Random()
    _require_status(room, "waiting")
    if not room.players:
        raise PlayersNotReady("Room has no players")
    if not all(p.is_ready for p in room.players):
        raise PlayersNotReady()

    room = copy.deepcopy(room)
    room.scenario.items = allocator.allocate(room.scenario.items, len(room.players), rng)

    # Roster order doubles as draft order.
    rng.shuffle(room.players)
    room.current_player_turn = room.players[0].id
    room.status = "drafting"
    return _touch(room)


def _begin_situations(room: Room) -> None:
    if not room.scenario.situations:
        raise NoSituationsAvailable(room.scenario.id)
    room.status = "situations"
    room.current_player_turn = None
    room.current_situation = copy.deepcopy(room.scenario.situations[0])


def _draft_complete(room: Room) -> bool:
    return all(len(p.selected_items) == Config.ITEMS_PER_PLAYER for p in room.players)


def _next_drafter(room: Room, from_index: int) -> Player | None:
    count = len(room.players)
    for step in range(1, count + 1):
        candidate = room.players[(from_index + step) % count]
        if len(candidate.selected_items) < Config.ITEMS_PER_PLAYER:
            return candidate
    return None


def select_item_in_draft(room: Room, session_id: str, item_id: str) -> Room:
    _require_status(room, "drafting")
    player = find_player(room, session_id)
    if player is None or player.id != room.current_player_turn:
        raise NotYourTurn()
    if len(player.selected_items) >= Config.ITEMS_PER_PLAYER:
        raise InventoryFull()
    if not any(item.id == item_id for item in room.scenario.items):
        raise ItemNotFound(item_id)
    if any(item_id in p.selected_items for p in room.players):
        raise ItemTaken()

    room = copy.deepcopy(room)
    player = find_player(room, session_id)
    player.selected_items.append(item_id)

    if _draft_complete(room):
        _begin_situations(room)
    else:
        index = room.players.index(player)
        nxt = _next_drafter(room, index)
        if nxt is None:
            raise InvalidStateTransition("Draft has no eligible player left")
        room.current_player_turn = nxt.id
    return _touch(room)


def _begin_voting(room: Room) -> None:
    for p in room.players:
        if p.current_item_choice and p.current_item_choice not in p.used_items:
            p.used_items.append(p.current_item_choice)
        p.round_votes = 0
    room.votes = {}
    room.status = "voting"


def _all_chose(room: Room) -> bool:
    return bool(room.players) and all(p.current_item_choice for p in room.players)


def select_item_for_situation(room: Room, session_id: str, item_id: str) -> Room:
    _require_status(room, "situations")
    player = _require_player(room, session_id)
    if item_id not in player.selected_items:
        raise ItemNotOwned()
    if item_id in player.used_items:
        raise ItemAlreadyUsed()

    room = copy.deepcopy(room)
    player = find_player(room, session_id)
    player.current_item_choice = item_id
    if _all_chose(room):
        _begin_voting(room)
    return _touch(room)


def _retract_ballot(room: Room, voter_id: str) -> None:
    previous = (room.votes or {}).pop(voter_id, None)
    if previous is None:
        return
    target = find_player_by_id(room, previous)
    if target is not None:
        target.votes_received = max(0, target.votes_received - 1)
        target.round_votes = max(0, target.round_votes - 1)


def _all_voted(room: Room) -> bool:
    votes = room.votes or {}
    return bool(room.players) and all(p.id in votes for p in room.players)


def _resolve_voting(room: Room) -> None:
    situations = room.scenario.situations
    current_id = room.current_situation.id if room.current_situation else None
    index = next((i for i, s in enumerate(situations) if s.id == current_id), -1)

    if index >= len(situations) - 1:
        room.status = "finished"
        return

    room.current_situation = copy.deepcopy(situations[index + 1])
    room.status = "situations"
    room.votes = {}
    for p in room.players:
        p.current_item_choice = None


def vote_for_player(room: Room, voter_session_id: str, voted_identity: str) -> Room:
    _require_status(room, "voting")
    _require_player(room, voter_session_id)
    if _resolve_target(room, voted_identity) is None:
        raise VotedPlayerNotFound(voted_identity)

    room = copy.deepcopy(room)
    voter = find_player(room, voter_session_id)
    target = _resolve_target(room, voted_identity)
    if room.votes is None:
        room.votes = {}

    _retract_ballot(room, voter.id)
    room.votes[voter.id] = target.id
    target.votes_received += 1
    target.round_votes += 1

    if _all_voted(room):
        _resolve_voting(room)
    return _touch(room)


def remove_player(room: Room, session_id: str) -> Room | None:
    """Drop a disconnected player. Returns None when the roster ends up empty."""
    _require_player(room, session_id)

    room = copy.deepcopy(room)
    player = find_player(room, session_id)
    index = room.players.index(player)
    room.players.remove(player)
    if not room.players:
        return None

    if room.votes:
        _retract_ballot(room, player.id)
        for voter_id, voted_id in list(room.votes.items()):
            if voted_id == player.id:
                del room.votes[voter_id]

    if player.is_host or room.host_id == player.id:
        room.players[0].is_host = True
        room.host_id = room.players[0].id

    if room.status == "drafting":
        if _draft_complete(room):
            _begin_situations(room)
        elif room.current_player_turn == player.id:
            nxt = _next_drafter(room, index - 1)
            room.current_player_turn = nxt.id if nxt else None
    elif room.status == "situations" and _all_chose(room):
        _begin_voting(room)
    elif room.status == "voting" and _all_voted(room):
        _resolve_voting(room)

    return _touch(room)
