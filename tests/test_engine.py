"""Round engine tests."""

import numpy as np
import pytest

from sim.config import GameConfig
from sim.engine import Phase, RoundEngine
from sim.errors import AffordabilityError, LoadError, ValidationError
from tests.conftest import make_catalogue, scripted


def _engine(catalogue=None, opponent=None, **config):
    catalogue = catalogue or make_catalogue()
    return RoundEngine(catalogue, config=GameConfig(**config), seed=0, opponent_fn=opponent)


def _play(engine, picks):
    """Play the given menu numbers, one per round; return the results."""
    results = []
    for number in picks:
        engine.start_round()
        engine.select(number)
        results.append(engine.resolve())
        engine.advance()
    return results


def test_initial_state():
    engine = _engine()
    assert engine.phase == Phase.ROUND_START
    assert engine.state.round_number == 1
    assert engine.state.budget == 0
    assert engine.num_rounds == 5


def test_round_one_assigns_budget():
    engine = _engine()
    tier = engine.start_round()
    assert engine.state.budget == 900
    assert (tier.start, tier.end) == (0, 10)
    assert engine.phase == Phase.TIER_OFFERED


def test_offered_is_numbered_from_one():
    engine = _engine()
    engine.start_round()
    offered = engine.offered()
    assert [n for n, _ in offered] == list(range(1, 11))
    assert offered[0][1].name == "W00"
    assert offered[-1][1].name == "W09"


def test_budget_progression():
    engine = _engine(opponent=scripted({1: 0, 2: 10, 3: 17, 4: 23, 5: 30}))
    picks = [1, 2, 3, 4, 1]
    budgets = [r.budget_after for r in _play(engine, picks)]

    prices = [100, 210, 290, 360, 400]
    expected = []
    budget = 0
    for increment, price in zip([900, 1700, 2000, 2600, 3500], prices):
        budget = (increment if not expected else budget + increment) - price
        expected.append(budget)

    assert budgets == expected
    assert engine.state.budget == expected[-1]


def test_opponent_drawn_from_current_tier_only():
    catalogue = make_catalogue()
    for seed in range(20):
        engine = RoundEngine(catalogue, seed=seed)
        for result in _play(engine, [1, 1, 1, 1, 1]):
            tier = engine.tiers[result.round_number]
            assert tier.start <= result.opponent_index < tier.end


def test_opponent_may_match_player_choice():
    engine = _engine(opponent=scripted({1: 0, 2: 10, 3: 17, 4: 23, 5: 30}))
    result = _play(engine, [1])[0]
    assert result.opponent_index == result.player_index == 0
    assert result.won is False


def test_out_of_tier_opponent_is_an_error():
    engine = _engine(opponent=scripted({1: 15}))
    engine.start_round()
    engine.select(1)
    with pytest.raises(RuntimeError, match="outside round 1 tier"):
        engine.resolve()


def test_win_loss_and_tie():
    # W09 scores 10 and beats W00; W10 (11) loses to W16 (17)
    engine = _engine(opponent=scripted({1: 0, 2: 16}))
    r1, r2 = _play(engine, [10, 1])
    assert r1.won and (r1.wins, r1.losses) == (1, 0)
    assert r1.player_score == 10 and r1.opponent_score == 1
    assert not r2.won and (r2.wins, r2.losses) == (1, 1)

    tie = _engine(opponent=scripted({1: 9}))
    result = _play(tie, [10])[0]
    assert result.player_score == result.opponent_score
    assert result.won is False
    assert tie.state.losses == 1


def test_end_to_end_game():
    engine = _engine(opponent=scripted({1: 0, 2: 16, 3: 22, 4: 23, 5: 30}))
    results = _play(engine, [10, 1, 6, 7, 4])

    assert [r.player_index for r in results] == [9, 10, 22, 29, 33]
    assert [r.won for r in results] == [True, False, False, True, True]
    assert [r.budget_after for r in results] == [710, 2210, 3890, 6100, 9170]
    assert engine.is_game_over()

    summary = engine.summary()
    assert (summary.wins, summary.losses, summary.budget) == (3, 2, 9170)
    assert summary.rounds_played == 5
    assert summary.get_winner() == "player"
    assert not summary.aborted


def test_seeded_games_repeat():
    catalogue = make_catalogue()
    a = _play(RoundEngine(catalogue, seed=11), [1, 1, 1, 1, 1])
    b = _play(RoundEngine(catalogue, seed=11), [1, 1, 1, 1, 1])
    assert [r.opponent_index for r in a] == [r.opponent_index for r in b]


def test_reset_with_seed_repeats_draws():
    engine = RoundEngine(make_catalogue())
    engine.reset(seed=5)
    first = [r.opponent_index for r in _play(engine, [1, 1, 1, 1, 1])]
    engine.reset(seed=5)
    second = [r.opponent_index for r in _play(engine, [1, 1, 1, 1, 1])]
    assert first == second
    assert engine.state.wins + engine.state.losses == 5


def test_injected_generator_is_used():
    rng = np.random.default_rng(3)
    expected = np.random.default_rng(3).integers(0, 10)
    engine = RoundEngine(make_catalogue(), rng=rng)
    assert _play(engine, [1])[0].opponent_index == expected


@pytest.mark.parametrize("number", [0, 11, -1, "abc", "", "2.5"])
def test_out_of_range_selection_rejected(number):
    engine = _engine()
    engine.start_round()
    with pytest.raises(ValidationError):
        engine.select(number)
    assert engine.phase == Phase.TIER_OFFERED
    assert engine.state.budget == 900


def test_selection_accepts_numeric_strings():
    engine = _engine()
    engine.start_round()
    assert engine.select(" 3 ") == 2


def test_selection_numbers_are_relative_to_tier():
    engine = _engine(opponent=scripted({1: 0, 2: 10}))
    _play(engine, [1])
    engine.start_round()
    with pytest.raises(ValidationError, match="between 1 and 7"):
        engine.select(8)
    assert engine.select(7) == 16


def test_unaffordable_then_affordable():
    catalogue = make_catalogue(overrides={0: {"price": 5000}})
    engine = _engine(catalogue)
    engine.start_round()
    with pytest.raises(AffordabilityError) as excinfo:
        engine.select(1)
    assert excinfo.value.price == 5000
    assert excinfo.value.budget == 900
    assert engine.phase == Phase.TIER_OFFERED
    assert engine.state.budget == 900

    assert engine.select(2) == 1
    assert engine.state.budget == 900 - 110


def test_second_unaffordable_pick_is_charged():
    catalogue = make_catalogue(overrides={0: {"price": 5000}})
    engine = _engine(catalogue)
    engine.start_round()
    with pytest.raises(AffordabilityError):
        engine.select(1)
    engine.select(1)
    assert engine.phase == Phase.WEAPON_CHOSEN
    assert engine.state.budget == 900 - 5000


def test_validation_error_does_not_use_the_retry():
    catalogue = make_catalogue(overrides={0: {"price": 5000}})
    engine = _engine(catalogue)
    engine.start_round()
    with pytest.raises(ValidationError):
        engine.select(99)
    with pytest.raises(AffordabilityError):
        engine.select(1)
    with pytest.raises(ValidationError):
        engine.select(0)
    engine.select(1)
    assert engine.state.budget == -4100


def test_retry_resets_each_round():
    catalogue = make_catalogue(overrides={0: {"price": 5000}, 10: {"price": 99999}})
    engine = _engine(catalogue, opponent=scripted({1: 0, 2: 10}))
    engine.start_round()
    with pytest.raises(AffordabilityError):
        engine.select(1)
    engine.select(2)
    engine.resolve()
    engine.advance()

    engine.start_round()
    with pytest.raises(AffordabilityError):
        engine.select(1)


def test_strict_policy_keeps_rejecting():
    catalogue = make_catalogue(overrides={0: {"price": 5000}})
    engine = _engine(catalogue, affordability_policy="strict")
    engine.start_round()
    for _ in range(3):
        with pytest.raises(AffordabilityError):
            engine.select(1)
    engine.select(2)
    assert engine.state.budget == 790


def test_exact_budget_is_affordable():
    catalogue = make_catalogue(overrides={0: {"price": 900}})
    engine = _engine(catalogue)
    engine.start_round()
    engine.select(1)
    assert engine.state.budget == 0


def test_steps_out_of_order():
    engine = _engine()
    with pytest.raises(RuntimeError):
        engine.select(1)
    with pytest.raises(RuntimeError):
        engine.resolve()
    engine.start_round()
    with pytest.raises(RuntimeError):
        engine.start_round()
    with pytest.raises(RuntimeError):
        engine.advance()


def test_no_rounds_after_game_over():
    engine = _engine(opponent=scripted({1: 0, 2: 10, 3: 17, 4: 23, 5: 30}))
    _play(engine, [1, 1, 1, 1, 1])
    assert engine.phase == Phase.GAME_OVER
    assert engine.state.round_number == 5
    with pytest.raises(RuntimeError):
        engine.start_round()


def test_abort_ends_game_early():
    engine = _engine(opponent=scripted({1: 0, 2: 10}))
    _play(engine, [10, 1])
    engine.start_round()
    engine.abort()
    assert engine.is_game_over()
    summary = engine.summary()
    assert summary.aborted
    assert summary.rounds_played == 2
    assert (summary.wins, summary.losses) == (1, 1)


def test_short_catalogue_clips_last_tier():
    engine = RoundEngine(make_catalogue(count=31), seed=0)
    assert (engine.tiers[5].start, engine.tiers[5].end) == (30, 31)


def test_catalogue_too_short_for_all_rounds():
    with pytest.raises(LoadError, match="round 5"):
        RoundEngine(make_catalogue(count=30))


def test_custom_tier_layout():
    config = GameConfig(tier_boundaries=[0, 2, 4], starting_budget=500, round_bonuses=[1000], capacity=4)
    engine = RoundEngine(make_catalogue(count=4), config=config, opponent_fn=scripted({1: 0, 2: 2}))
    results = _play(engine, [2, 1])
    assert engine.num_rounds == 2
    assert [r.budget_after for r in results] == [500 - 110, 500 - 110 + 1000 - 120]
    assert engine.is_game_over()
