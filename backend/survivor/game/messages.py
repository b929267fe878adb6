from __future__ import annotations

from .models import Room
from .rules import find_player_by_id, winner


def draft_started(room: Room) -> str:
    first = find_player_by_id(room, room.current_player_turn or "")
    return f"Draft started! {first.name if first else 'Someone'}'s turn."


def after_item_selected(room: Room) -> str:
    if room.status == "drafting":
        nxt = find_player_by_id(room, room.current_player_turn or "")
        return f"{nxt.name if nxt else 'Next player'}'s turn to draft."
    if room.status == "voting":
        return "All players have chosen! Time to vote for the best solution!"
    if room.status == "finished":
        return "Game Over! Thanks for playing!"
    # A draft pick can land directly in the situations phase.
    if room.status == "situations" and not any(p.current_item_choice for p in room.players):
        return "Draft completed! Starting situations phase..."
    return "Waiting for other players to choose..."


def after_vote(room: Room) -> str:
    if room.status == "situations":
        return "Voting completed! Moving to next situation..."
    if room.status == "finished":
        best = winner(room)
        if best is None:
            return "Game Over!"
        return f"Game Over! {best.name} had the best solutions with {best.votes_received} votes!"
    remaining = len(room.players) - len(room.votes or {})
    return f"Vote registered! Waiting for {remaining} more players to vote..."
