"""
Tests for the room state machine transitions.

Covers the draft turn rotation, situation choices, voting with revotes,
identity reconciliation, disconnect removal and the rule that a failed
transition leaves its input untouched.
"""

import copy
import random
from collections import Counter

import pytest

from survivor.game import rules
from survivor.game.errors import (
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
from survivor.game.models import Player, room_to_dict


def _current(room):
    return rules.find_player_by_id(room, room.current_player_turn)


def _free_item(room):
    taken = {i for p in room.players for i in p.selected_items}
    return next(item for item in room.scenario.items if item.id not in taken)


def _draft_pick(room):
    return rules.select_item_in_draft(room, _current(room).session_id, _free_item(room).id)


def _draft_all(room):
    while room.status == "drafting":
        room = _draft_pick(room)
    return room


def _choose_all(room):
    for p in list(room.players):
        unused = next(i for i in p.selected_items if i not in p.used_items)
        room = rules.select_item_for_situation(room, p.session_id, unused)
    return room


@pytest.fixture
def drafting_room(make_room):
    return rules.start_draft(make_room(4, ready=True), random.Random(99))


@pytest.fixture
def situations_room(drafting_room):
    return _draft_all(drafting_room)


@pytest.fixture
def voting_room(situations_room):
    return _choose_all(situations_room)


class TestReadyAndStart:
    def test_toggle_ready_flips_flag(self, make_room):
        room = make_room(3)
        room = rules.toggle_ready(room, "s1")
        assert rules.find_player(room, "s1").is_ready is True
        room = rules.toggle_ready(room, "s1")
        assert rules.find_player(room, "s1").is_ready is False

    def test_toggle_ready_unknown_player(self, make_room):
        with pytest.raises(PlayerNotFound):
            rules.toggle_ready(make_room(3), "nobody")

    def test_start_requires_everyone_ready(self, make_room):
        room = rules.toggle_ready(make_room(3), "s0")
        with pytest.raises(PlayersNotReady):
            rules.start_draft(room, random.Random(1))

    def test_start_allocates_twenty_items_for_four_players(self, drafting_room):
        assert drafting_room.status == "drafting"
        assert len(drafting_room.scenario.items) == 20
        counts = Counter(item.category for item in drafting_room.scenario.items)
        assert counts == {"ideal": 6, "possible": 8, "absurd": 6}
        assert drafting_room.current_player_turn == drafting_room.players[0].id

    def test_start_only_from_waiting(self, drafting_room):
        with pytest.raises(InvalidStateTransition):
            rules.start_draft(drafting_room, random.Random(1))


class TestDraft:
    def test_not_your_turn_leaves_items_unchanged(self, drafting_room):
        other = next(p for p in drafting_room.players if p.id != drafting_room.current_player_turn)
        before = room_to_dict(drafting_room)

        with pytest.raises(NotYourTurn):
            rules.select_item_in_draft(drafting_room, other.session_id, _free_item(drafting_room).id)

        assert room_to_dict(drafting_room) == before

    def test_unknown_item(self, drafting_room):
        with pytest.raises(ItemNotFound):
            rules.select_item_in_draft(drafting_room, _current(drafting_room).session_id, "spaceship")

    def test_taken_item(self, drafting_room):
        item = _free_item(drafting_room)
        room = rules.select_item_in_draft(drafting_room, _current(drafting_room).session_id, item.id)
        with pytest.raises(ItemTaken):
            rules.select_item_in_draft(room, _current(room).session_id, item.id)

    def test_inventory_full(self, drafting_room):
        room = copy.deepcopy(drafting_room)
        player = _current(room)
        player.selected_items = [i.id for i in room.scenario.items[:5]]
        with pytest.raises(InventoryFull):
            rules.select_item_in_draft(room, player.session_id, room.scenario.items[5].id)

    def test_pick_does_not_mutate_input(self, drafting_room):
        before = room_to_dict(drafting_room)
        after = _draft_pick(drafting_room)
        assert room_to_dict(drafting_room) == before
        assert after is not drafting_room

    def test_turns_visit_everyone_before_repeating(self, drafting_room):
        room = drafting_room
        order = []
        for _ in range(len(room.players) * 5):
            order.append(room.current_player_turn)
            room = _draft_pick(room)

        roster = [p.id for p in drafting_room.players]
        for start in range(0, len(order), len(roster)):
            assert order[start:start + len(roster)] == roster

    def test_turn_skips_players_with_full_inventory(self, drafting_room):
        room = copy.deepcopy(drafting_room)
        skipped = room.players[1]
        skipped.selected_items = [i.id for i in room.scenario.items[-5:]]

        room = _draft_pick(room)
        assert room.current_player_turn == room.players[2].id

    def test_last_pick_moves_to_first_situation(self, situations_room):
        assert situations_room.status == "situations"
        assert situations_room.current_player_turn is None
        assert situations_room.current_situation.id == situations_room.scenario.situations[0].id
        assert all(len(p.selected_items) == 5 for p in situations_room.players)

    def test_no_item_held_twice(self, situations_room):
        held = [i for p in situations_room.players for i in p.selected_items]
        assert len(held) == len(set(held)) == 20

    def test_scenario_without_situations_is_fatal(self, drafting_room):
        room = copy.deepcopy(drafting_room)
        room.scenario.situations = []
        with pytest.raises(NoSituationsAvailable):
            _draft_all(room)

    def test_draft_pick_outside_drafting(self, situations_room):
        player = situations_room.players[0]
        with pytest.raises(InvalidStateTransition):
            rules.select_item_in_draft(situations_room, player.session_id, player.selected_items[0])


class TestSituations:
    def test_item_must_be_owned(self, situations_room):
        alice, bob = situations_room.players[0], situations_room.players[1]
        with pytest.raises(ItemNotOwned):
            rules.select_item_for_situation(situations_room, alice.session_id, bob.selected_items[0])

    def test_partial_choices_stay_in_situations(self, situations_room):
        player = situations_room.players[0]
        room = rules.select_item_for_situation(situations_room, player.session_id, player.selected_items[0])
        assert room.status == "situations"
        assert rules.find_player(room, player.session_id).current_item_choice == player.selected_items[0]

    def test_all_chosen_enters_voting(self, voting_room):
        assert voting_room.status == "voting"
        assert voting_room.votes == {}
        for p in voting_room.players:
            assert p.used_items == [p.current_item_choice]
            assert p.round_votes == 0

    def test_used_item_cannot_be_reused(self, voting_room):
        room = voting_room
        voters = room.players
        for voter in voters:
            room = rules.vote_for_player(room, voter.session_id, voters[0].id)
        assert room.status == "situations"

        player = room.players[0]
        with pytest.raises(ItemAlreadyUsed):
            rules.select_item_for_situation(room, player.session_id, player.used_items[0])


class TestVoting:
    def test_unknown_target(self, voting_room):
        with pytest.raises(VotedPlayerNotFound):
            rules.vote_for_player(voting_room, voting_room.players[0].session_id, "ghost")

    def test_vote_outside_voting(self, situations_room):
        p = situations_room.players
        with pytest.raises(InvalidStateTransition):
            rules.vote_for_player(situations_room, p[0].session_id, p[1].id)

    def test_revote_moves_exactly_one_vote(self, voting_room):
        a, b, c = voting_room.players[:3]
        room = rules.vote_for_player(voting_room, a.session_id, b.id)
        room = rules.vote_for_player(room, c.session_id, b.id)
        assert rules.find_player_by_id(room, b.id).votes_received == 2

        room = rules.vote_for_player(room, a.session_id, c.id)
        assert rules.find_player_by_id(room, b.id).votes_received == 1
        assert rules.find_player_by_id(room, c.id).votes_received == 1
        assert sum(p.votes_received for p in room.players) == len(room.votes) == 2

    def test_target_can_be_named_by_session(self, voting_room):
        a, b = voting_room.players[:2]
        room = rules.vote_for_player(voting_room, a.session_id, b.session_id)
        assert room.votes[a.id] == b.id

    def test_votes_accumulate_across_situations(self, voting_room):
        room = voting_room
        star = room.players[0]
        for voter in room.players:
            room = rules.vote_for_player(room, voter.session_id, star.id)

        assert room.status == "situations"
        assert room.current_situation.id == room.scenario.situations[1].id
        assert room.votes == {}
        assert all(p.current_item_choice is None for p in room.players)
        assert rules.find_player_by_id(room, star.id).votes_received == 4

        room = _choose_all(room)
        assert rules.find_player_by_id(room, star.id).votes_received == 4
        assert rules.find_player_by_id(room, star.id).round_votes == 0
        for voter in room.players:
            room = rules.vote_for_player(room, voter.session_id, star.id)
        assert rules.find_player_by_id(room, star.id).votes_received == 8

    def test_last_situation_finishes_with_winner(self, voting_room):
        room = voting_room
        rounds = len(room.scenario.situations)
        for n in range(rounds):
            target = room.players[1]
            for voter in room.players:
                room = rules.vote_for_player(room, voter.session_id, target.id)
            if n < rounds - 1:
                room = _choose_all(room)

        assert room.status == "finished"
        assert rules.winner(room).id == room.players[1].id
        assert rules.winner(room).votes_received == 4 * rounds
        for p in room.players:
            assert sorted(p.used_items) == sorted(p.selected_items)


class TestReconcile:
    def test_session_replaced_and_state_kept(self, drafting_room):
        room = _draft_pick(drafting_room)
        picker = next(p for p in room.players if p.selected_items)

        room = rules.reconcile_identity(room, picker.name, "socket-new")

        moved = rules.find_player(room, "socket-new")
        assert moved.id == picker.id
        assert moved.selected_items == picker.selected_items
        assert rules.find_player(room, picker.session_id) is None

    def test_host_follows_player(self, make_room):
        room = rules.reconcile_identity(make_room(3), "Alice", "socket-a")
        host = rules.find_player(room, "socket-a")
        assert host.is_host
        assert room.host_id == host.id

    def test_idempotent(self, make_room):
        room = rules.reconcile_identity(make_room(3), "Bob", "socket-b")
        again = rules.reconcile_identity(room, "Bob", "socket-b")
        assert room_to_dict(again) == room_to_dict(room)

    def test_unknown_name(self, make_room):
        with pytest.raises(PlayerNotFound):
            rules.reconcile_identity(make_room(3), "Zed", "x")

    def test_session_held_by_another_player(self, make_room):
        room = make_room(3)
        with pytest.raises(SessionAlreadyInRoom):
            rules.reconcile_identity(room, "Carol", "s1")
        assert rules.find_player(room, "s2").name == "Carol"

    def test_add_player_rejects_session_in_use(self, make_room):
        room = make_room(3)
        with pytest.raises(SessionAlreadyInRoom):
            rules.add_player(room, Player(id="p-new", session_id="s0", name="Zed"))
        assert len(room.players) == 3


class TestRemovePlayer:
    def test_last_player_empties_room(self, registry):
        room = registry.create_room("s0", "Solo", "desert", 3)
        assert rules.remove_player(room, "s0") is None

    def test_host_removal_promotes_first_remaining(self, make_room):
        room = rules.remove_player(make_room(3), "s0")
        assert room.players[0].is_host
        assert room.host_id == room.players[0].id
        assert sum(p.is_host for p in room.players) == 1

    def test_current_drafter_removed_passes_turn(self, drafting_room):
        leaving = _current(drafting_room)
        room = rules.remove_player(drafting_room, leaving.session_id)
        assert room.current_player_turn == room.players[0].id
        assert room.status == "drafting"

    def test_removal_can_complete_choice_phase(self, situations_room):
        room = situations_room
        for p in room.players[:-1]:
            room = rules.select_item_for_situation(room, p.session_id, p.selected_items[0])
        room = rules.remove_player(room, room.players[-1].session_id)
        assert room.status == "voting"

    def test_removal_drops_ballots_for_and_from_player(self, voting_room):
        a, b, c = voting_room.players[:3]
        room = rules.vote_for_player(voting_room, a.session_id, b.id)
        room = rules.vote_for_player(room, b.session_id, c.id)

        room = rules.remove_player(room, b.session_id)

        assert room.votes == {}
        assert rules.find_player_by_id(room, c.id).votes_received == 0
