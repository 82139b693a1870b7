"""Tests for decisions and the pending-response propagation after aggression."""

from recorder.ledger import Ledger
from recorder.models import Decision, HandSettings, Move, Street
from recorder.positions import Position


def _make_ledger():
    return Ledger(settings=HandSettings.for_mode("chips", starting_stack=100))


def _seat(ledger, action_id, position, street=Street.PREFLOP, **changes):
    ledger = ledger.add_action(street, position, action_id)
    if changes:
        ledger = ledger.update_action(action_id, changes)
    return ledger


def _on(ledger, position, street):
    return next(
        (a for a in ledger.actions if a.position is position and a.street is street),
        None,
    )


def _limped_pot():
    """UTG calls 2, CO calls and later checks, then BTN raises to 8."""
    ledger = _seat(_make_ledger(), "utg", Position.UTG, move="call", amount=2)
    ledger = _seat(ledger, "co", Position.CO, move="call")
    ledger = ledger.add_decision("co", {"move": "check"})
    return _seat(ledger, "btn", Position.BTN, move="raise", amount=8)


# ── Propagation ──────────────────────────────────────────────────────

class TestPropagation:
    def test_raise_gives_callers_a_pending_fold(self):
        ledger = _limped_pot()
        assert ledger.get_action("utg").decisions == (Decision(pending=True),)

    def test_existing_decisions_untouched(self):
        ledger = _limped_pot()
        co = ledger.get_action("co")
        assert co.amount == 2
        assert co.decisions == (Decision(move=Move.CHECK),)

    def test_raiser_untouched(self):
        assert _limped_pot().get_action("btn").decisions == ()

    def test_pending_fold_keeps_later_records(self):
        ledger = _limped_pot()
        assert _on(ledger, Position.UTG, Street.FLOP).stack == 98
        assert _on(ledger, Position.CO, Street.FLOP).stack == 98
        assert Position.UTG not in ledger.excluded_positions(Street.FLOP)

    def test_pending_fold_keeps_recorded_later_moves(self):
        ledger = _seat(_make_ledger(), "btn", Position.BTN, move="bet", amount=10)
        ledger = _seat(ledger, "bb", Position.BB, move="call")
        bb_flop = _on(ledger, Position.BB, Street.FLOP)
        ledger = ledger.update_action(bb_flop.id, {"move": "bet", "amount": 30})

        ledger = ledger.update_action("btn", {"move": "raise", "amount": 10})
        assert ledger.get_action("bb").decisions == (Decision(pending=True),)
        flop = _on(ledger, Position.BB, Street.FLOP)
        assert flop.id == bb_flop.id
        assert (flop.move, flop.amount, flop.stack) == (Move.BET, 30, 90)
        assert _on(ledger, Position.BB, Street.TURN).stack == 60

    def test_confirmed_fold_drops_later_records(self):
        ledger = _limped_pot()
        ledger = ledger.update_decision("utg", 0, {"move": "fold"})
        assert not ledger.get_action("utg").decisions[0].pending
        assert _on(ledger, Position.UTG, Street.FLOP) is None
        assert Position.UTG in ledger.excluded_positions(Street.FLOP)

    def test_latest_fold_skipped(self):
        ledger = _limped_pot()
        ledger = ledger.add_decision("co", {"move": "raise", "amount": 20})
        assert ledger.get_action("utg").decisions == (Decision(pending=True),)
        assert ledger.get_action("btn").decisions == (
            Decision(pending=True),
            Decision(pending=True),
        )

    def test_earlier_fold_does_not_skip(self):
        ledger = _limped_pot()
        ledger = ledger.update_decision("utg", 0, {"move": "fold"})
        ledger = ledger.add_decision("utg", {"move": "call"})
        ledger = ledger.update_decision("co", 0, {"move": "call"})
        ledger = ledger.add_decision("co", {"move": "check"})
        ledger = ledger.add_decision("co", {"move": "raise", "amount": 20})
        utg = ledger.get_action("utg")
        assert [d.move for d in utg.decisions] == [Move.FOLD, Move.CALL, Move.FOLD]
        assert utg.decisions[2].pending

    def test_folded_seat_skipped(self):
        ledger = _seat(_make_ledger(), "utg", Position.UTG)
        ledger = _seat(ledger, "btn", Position.BTN, move="raise", amount=8)
        assert ledger.get_action("utg").decisions == ()

    def test_all_in_seat_skipped(self):
        ledger = _seat(_make_ledger(), "utg", Position.UTG, move="allin")
        ledger = _seat(ledger, "btn", Position.BTN, move="raise", amount=30)
        assert ledger.get_action("utg").decisions == ()

    def test_other_streets_untouched(self):
        ledger = _seat(_make_ledger(), "utg", Position.UTG, move="call", amount=2)
        ledger = _seat(ledger, "btn", Position.BTN, Street.FLOP, move="bet", amount=5)
        assert ledger.get_action("utg").decisions == ()

    def test_passive_moves_do_not_propagate(self):
        ledger = _seat(_make_ledger(), "utg", Position.UTG, move="call", amount=2)
        ledger = _seat(ledger, "btn", Position.BTN, move="call")
        assert ledger.get_action("utg").decisions == ()

    def test_reraise_fills_same_depth_only(self):
        ledger = _limped_pot()
        ledger = ledger.update_decision("utg", 0, {"move": "raise", "amount": 20})
        assert ledger.get_action("btn").decisions == (Decision(pending=True),)
        assert ledger.get_action("co").decisions == (Decision(move=Move.CHECK),)
        assert ledger.get_action("utg").decisions == (
            Decision(move=Move.RAISE, amount=20),
        )
        assert _on(ledger, Position.BTN, Street.FLOP).stack == 92
        assert _on(ledger, Position.UTG, Street.FLOP).stack == 78


# ── Decision editing ─────────────────────────────────────────────────

class TestDecisions:
    def test_add_defaults_to_fold(self):
        ledger = _seat(_make_ledger(), "co", Position.CO, move="call", amount=2)
        ledger = ledger.add_decision("co")
        assert ledger.get_action("co").decisions == (Decision(),)

    def test_call_fills_remaining_gap(self):
        ledger = _limped_pot()
        assert ledger.call_amount("utg", 0) == 6
        ledger = ledger.update_decision("utg", 0, {"move": "call"})
        assert ledger.get_action("utg").decisions[0].amount == 6

    def test_call_restores_later_streets(self):
        ledger = _limped_pot()
        ledger = ledger.update_decision("utg", 0, {"move": "call"})
        assert _on(ledger, Position.UTG, Street.FLOP).stack == 92

    def test_all_in_uses_what_is_left(self):
        ledger = _limped_pot()
        ledger = ledger.update_decision("utg", 0, {"move": "allin"})
        assert ledger.get_action("utg").decisions[0].amount == 98
        assert ledger.is_all_in(Position.UTG, Street.FLOP)

    def test_fold_decision_excludes_seat(self):
        ledger = _seat(_make_ledger(), "co", Position.CO, move="call", amount=2)
        assert _on(ledger, Position.CO, Street.FLOP) is not None
        ledger = ledger.add_decision("co", {"move": "fold"})
        assert _on(ledger, Position.CO, Street.FLOP) is None
        assert Position.CO in ledger.excluded_positions(Street.FLOP)

    def test_remove_decision(self):
        ledger = _limped_pot()
        ledger = ledger.remove_decision("utg", 0)
        assert ledger.get_action("utg").decisions == ()
        assert _on(ledger, Position.UTG, Street.FLOP).stack == 98

    def test_bad_index_is_noop(self):
        ledger = _limped_pot()
        assert ledger.update_decision("utg", 3, {"move": "call"}) is ledger
        assert ledger.remove_decision("utg", 3) is ledger
        assert ledger.remove_decision("missing", 0) is ledger
        assert ledger.add_decision("missing") is ledger

    def test_decision_amount_counts_toward_stack(self):
        ledger = _seat(_make_ledger(), "co", Position.CO, move="call", amount=2)
        ledger = ledger.add_decision("co", {"move": "bet", "amount": 10})
        assert ledger.stack_after(Position.CO, Street.PREFLOP) == 88
        assert ledger.street_pot(Street.PREFLOP) == 12
