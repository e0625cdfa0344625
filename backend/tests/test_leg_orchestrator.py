"""
Tests for leg planning: orientation rules, duplicate avoidance, round bases
and blocking rules. Pure functions, no database.
"""

import random
from collections import Counter

from fixture_scheduler.services.generation_state import ExistingMatch, GenerationState, PairLedger
from fixture_scheduler.services.leg_orchestrator import (
    activation_blocked,
    deactivation_blocked,
    plan_first_leg,
    plan_second_leg,
    second_leg_round_base,
    should_generate_first_leg,
)
from fixture_scheduler.services.pairing import pad_with_bye, pair_key


def _existing(home, away, round_number, locked=False, match_id=None):
    return ExistingMatch(id=match_id, home_team_id=home, away_team_id=away, round_number=round_number, locked=locked)


def _orientations(planned):
    return {(p.home_team_id, p.away_team_id): p.round_number for p in planned}


def test_first_leg_alternates_home_by_round_parity():
    state = GenerationState(first_leg_round_count=3)
    planned = plan_first_leg([1, 2, 3, 4], "single", PairLedger.from_state(state))

    assert _orientations(planned) == {
        (1, 4): 1,
        (2, 3): 1,
        (3, 1): 2,  # odd round: circle's first member is away
        (2, 4): 2,
        (1, 2): 3,
        (3, 4): 3,
    }


def test_single_mode_skips_pairs_that_exist_in_either_orientation():
    state = GenerationState(first_leg_round_count=3, matches=(_existing(4, 1, 1),))
    planned = plan_first_leg([1, 2, 3, 4], "single", PairLedger.from_state(state))

    keys = [pair_key(p.home_team_id, p.away_team_id) for p in planned]
    assert (1, 4) not in keys
    assert len(planned) == 5


def test_double_mode_first_leg_only_skips_same_orientation():
    state = GenerationState(first_leg_round_count=3, matches=(_existing(4, 1, 1),))
    planned = plan_first_leg([1, 2, 3, 4], "double", PairLedger.from_state(state))

    assert (1, 4) in _orientations(planned)
    assert len(planned) == 6


def test_fresh_second_leg_reverses_every_first_leg_match():
    order = [1, 2, 3, 4]
    state = GenerationState(first_leg_round_count=3)
    ledger = PairLedger.from_state(state)
    first = plan_first_leg(order, "double", ledger)
    second = plan_second_leg(order, state, ledger, reset=True)

    assert [p.round_number for p in second] == [4, 4, 5, 5, 6, 6]
    first_orient = {pair_key(p.home_team_id, p.away_team_id): (p.home_team_id, p.away_team_id) for p in first}
    for p in second:
        home, away = first_orient[pair_key(p.home_team_id, p.away_team_id)]
        assert (p.home_team_id, p.away_team_id) == (away, home)


def test_second_leg_reverses_stored_first_leg_orientation():
    # First leg stored with the "wrong" parity for pair (1, 4): 4 was home
    matches = (
        _existing(4, 1, 1),
        _existing(2, 3, 1),
        _existing(3, 1, 2),
        _existing(2, 4, 2),
        _existing(1, 2, 3),
        _existing(3, 4, 3),
    )
    state = GenerationState(first_leg_round_count=3, matches=matches)
    second = plan_second_leg([1, 2, 3, 4], state, PairLedger.from_state(state))

    orient = _orientations(second)
    assert (1, 4) in orient
    assert (4, 1) not in orient
    # Appended after the existing max round
    assert sorted(set(orient.values())) == [4, 5, 6]


def test_second_leg_without_first_leg_record_uses_inverted_parity():
    state = GenerationState(first_leg_round_count=3, matches=(_existing(1, 4, 1),))
    second = plan_second_leg([1, 2, 3, 4], state, PairLedger.from_state(state))

    orient = _orientations(second)
    assert (4, 1) in orient  # reversal of the stored match
    assert (3, 2) in orient  # round 0 fallback: second member is home
    assert (1, 3) in orient  # round 1 fallback: first member is home


def test_second_leg_never_creates_a_third_meeting():
    matches = (_existing(1, 4, 1), _existing(4, 1, 4))
    state = GenerationState(first_leg_round_count=3, matches=matches)
    second = plan_second_leg([1, 2, 3, 4], state, PairLedger.from_state(state))

    keys = [pair_key(p.home_team_id, p.away_team_id) for p in second]
    assert (1, 4) not in keys


def test_second_leg_round_base():
    empty = GenerationState(first_leg_round_count=5)
    assert second_leg_round_base(reset=True, state=empty) == 5
    assert second_leg_round_base(reset=False, state=empty) == 5

    scattered = GenerationState(first_leg_round_count=5, matches=(_existing(1, 2, 9),))
    assert second_leg_round_base(reset=False, state=scattered) == 9
    assert second_leg_round_base(reset=True, state=scattered) == 5


def test_odd_team_count_never_plans_bye():
    order = pad_with_bye([1, 2, 3, 4, 5])
    state = GenerationState(first_leg_round_count=5)
    ledger = PairLedger.from_state(state)
    planned = plan_first_leg(order, "double", ledger) + plan_second_leg(order, state, ledger, reset=True)

    assert len(planned) == 20
    assert all(p.home_team_id is not None and p.away_team_id is not None for p in planned)
    assert Counter(p.round_number for p in planned) == {r: 2 for r in range(1, 11)}


def test_insertion_shuffle_does_not_change_plan_content():
    order = list(range(1, 9))
    baseline = plan_first_leg(order, "single", PairLedger())
    shuffled = plan_first_leg(order, "single", PairLedger(), rng=random.Random(42))

    assert set(baseline) == set(shuffled)


def test_generate_first_leg_decision():
    empty = GenerationState(first_leg_round_count=3)
    existing = GenerationState(first_leg_round_count=3, matches=(_existing(1, 2, 1),))

    assert should_generate_first_leg("double", reset=False, state=empty)
    assert not should_generate_first_leg("double", reset=False, state=existing)
    assert should_generate_first_leg("double", reset=True, state=existing)
    assert should_generate_first_leg("single", reset=False, state=existing)


def test_blocking_rules():
    locked_first_leg = GenerationState(first_leg_round_count=3, matches=(_existing(1, 2, 1, locked=True),))
    locked_second_leg = GenerationState(first_leg_round_count=3, matches=(_existing(2, 1, 4, locked=True),))

    assert activation_blocked("double", reset=False, state=locked_first_leg)
    assert not activation_blocked("double", reset=True, state=locked_first_leg)
    assert not activation_blocked("single", reset=False, state=locked_first_leg)

    assert not deactivation_blocked(locked_first_leg)
    assert deactivation_blocked(locked_second_leg)
