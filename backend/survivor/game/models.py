from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal


RoomStatus = Literal["waiting", "drafting", "situations", "voting", "finished"]
ItemCategory = Literal["ideal", "possible", "absurd"]

ITEM_CATEGORIES: tuple[ItemCategory, ...] = ("ideal", "possible", "absurd")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Item:
    id: str
    name: str
    description: str
    category: ItemCategory


@dataclass
class Situation:
    id: str
    description: str
    time_limit: int = 60
    ideal_items: list[str] = field(default_factory=list)


@dataclass
class Scenario:
    id: str
    name: str
    description: str
    background_image: str = ""
    items: list[Item] = field(default_factory=list)
    situations: list[Situation] = field(default_factory=list)


@dataclass
class Player:
    id: str
    session_id: str
    name: str
    selected_items: list[str] = field(default_factory=list)
    is_host: bool = False
    is_ready: bool = False
    current_item_choice: str | None = None
    used_items: list[str] = field(default_factory=list)
    votes_received: int = 0
    round_votes: int = 0


@dataclass
class Room:
    id: str
    code: str
    host_id: str
    max_players: int
    scenario: Scenario
    status: RoomStatus = "waiting"
    players: list[Player] = field(default_factory=list)
    current_situation: Situation | None = None
    current_player_turn: str | None = None
    votes: dict[str, str] | None = None
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)


# Storage documents use the same camelCase keys the clients see.

def item_to_dict(item: Item) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "category": item.category,
    }


def item_from_dict(data: dict[str, Any]) -> Item:
    return Item(
        id=data["id"],
        name=data.get("name", ""),
        description=data.get("description", ""),
        category=data["category"],
    )


def situation_to_dict(situation: Situation) -> dict[str, Any]:
    return {
        "id": situation.id,
        "description": situation.description,
        "timeLimit": situation.time_limit,
        "idealItems": list(situation.ideal_items),
    }


def situation_from_dict(data: dict[str, Any]) -> Situation:
    return Situation(
        id=data["id"],
        description=data.get("description", ""),
        time_limit=int(data.get("timeLimit", 60)),
        ideal_items=list(data.get("idealItems") or []),
    )


def scenario_to_dict(scenario: Scenario) -> dict[str, Any]:
    return {
        "id": scenario.id,
        "name": scenario.name,
        "description": scenario.description,
        "backgroundImage": scenario.background_image,
        "items": [item_to_dict(i) for i in scenario.items],
        "situations": [situation_to_dict(s) for s in scenario.situations],
    }


def scenario_from_dict(data: dict[str, Any]) -> Scenario:
    return Scenario(
        id=data["id"],
        name=data.get("name", ""),
        description=data.get("description", ""),
        background_image=data.get("backgroundImage", ""),
        items=[item_from_dict(i) for i in data.get("items") or []],
        situations=[situation_from_dict(s) for s in data.get("situations") or []],
    )


def player_to_dict(player: Player) -> dict[str, Any]:
    return {
        "id": player.id,
        "sessionId": player.session_id,
        "name": player.name,
        "selectedItems": list(player.selected_items),
        "isHost": player.is_host,
        "isReady": player.is_ready,
        "currentItemChoice": player.current_item_choice,
        "usedItems": list(player.used_items),
        "votesReceived": player.votes_received,
        "roundVotes": player.round_votes,
    }


def player_from_dict(data: dict[str, Any]) -> Player:
    return Player(
        id=data["id"],
        session_id=data.get("sessionId") or data["id"],
        name=data["name"],
        selected_items=list(data.get("selectedItems") or []),
        is_host=bool(data.get("isHost", False)),
        is_ready=bool(data.get("isReady", False)),
        current_item_choice=data.get("currentItemChoice"),
        used_items=list(data.get("usedItems") or []),
        votes_received=int(data.get("votesReceived") or 0),
        round_votes=int(data.get("roundVotes") or 0),
    )


def room_to_dict(room: Room) -> dict[str, Any]:
    return {
        "id": room.id,
        "code": room.code,
        "status": room.status,
        "hostId": room.host_id,
        "players": [player_to_dict(p) for p in room.players],
        "maxPlayers": room.max_players,
        "scenario": scenario_to_dict(room.scenario),
        "currentSituation": situation_to_dict(room.current_situation) if room.current_situation else None,
        "currentPlayerTurn": room.current_player_turn,
        "votes": dict(room.votes) if room.votes is not None else None,
        "createdAt": room.created_at,
        "updatedAt": room.updated_at,
    }


def room_from_dict(data: dict[str, Any]) -> Room:
    situation = data.get("currentSituation")
    votes = data.get("votes")
    return Room(
        id=data["id"],
        code=data["code"],
        status=data.get("status", "waiting"),
        host_id=data["hostId"],
        players=[player_from_dict(p) for p in data.get("players") or []],
        max_players=int(data["maxPlayers"]),
        scenario=scenario_from_dict(data["scenario"]),
        current_situation=situation_from_dict(situation) if situation else None,
        current_player_turn=data.get("currentPlayerTurn"),
        votes=dict(votes) if votes is not None else None,
        created_at=int(data.get("createdAt") or now_ms()),
        updated_at=int(data.get("updatedAt") or now_ms()),
    )
