"""Tests for the seat catalog."""

from recorder.models import Action, Street
from recorder.positions import (
    POSITIONS,
    Position,
    available_positions,
    used_positions,
)


def _make_action(position, street=Street.PREFLOP, action_id=None):
    kwargs = {"street": street, "position": position, "stack": 100}
    if action_id:
        kwargs["id"] = action_id
    return Action(**kwargs)


class TestCatalog:
    def test_nine_seats_in_order(self):
        assert [p.value for p in POSITIONS] == [
            "UTG", "UTG+1", "UTG+2", "MP", "MP+1", "CO", "BTN", "SB", "BB",
        ]

    def test_order(self):
        assert Position.UTG.order == 0
        assert Position.BB.order == 8

    def test_lookup_by_label(self):
        assert Position("UTG+1") is Position.UTG1
        assert Position("MP+1") is Position.MP1


class TestAvailability:
    def test_empty_street_has_every_seat(self):
        assert available_positions([], Street.FLOP) == list(POSITIONS)

    def test_used_seats_removed(self):
        actions = [_make_action(Position.BTN), _make_action(Position.UTG)]
        free = available_positions(actions, Street.PREFLOP)
        assert Position.BTN not in free
        assert Position.UTG not in free
        assert len(free) == 7
        assert free[0] is Position.UTG1

    def test_other_streets_ignored(self):
        actions = [_make_action(Position.BTN, Street.FLOP)]
        assert Position.BTN in available_positions(actions, Street.PREFLOP)
        assert used_positions(actions, Street.FLOP) == {Position.BTN}

    def test_edited_action_keeps_its_slot(self):
        actions = [_make_action(Position.CO, action_id="co")]
        free = available_positions(actions, Street.PREFLOP, excluding_action_id="co")
        assert Position.CO in free
        assert used_positions(actions, Street.PREFLOP, "co") == set()

    def test_full_street(self):
        actions = [_make_action(p) for p in POSITIONS]
        assert available_positions(actions, Street.PREFLOP) == []
