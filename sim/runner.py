"""
Headless Game Runner.

Play games without the console for balance evaluation and data collection.
"""

import numpy as np
import sys
from typing import Callable, Dict, List
import time

from sim.catalogue import load_catalogue
from sim.config import GameConfig, load_config
from sim.engine import RoundEngine
from sim.errors import AffordabilityError, FireSyncError, ValidationError
from sim.logger import MatchLogger
from sim.state import Catalogue, GameSummary


# Picks per round before a headless game gives up on the round.
MAX_SELECTION_ATTEMPTS = 10

PolicyFn = Callable[[RoundEngine, np.random.Generator], int]


def _affordable(engine: RoundEngine) -> List[int]:
    return [number for number, record in engine.offered() if record.price <= engine.state.budget]


def random_policy(engine: RoundEngine, rng: np.random.Generator) -> int:
    """Uniform pick among affordable weapons, any weapon when none is."""
    choices = _affordable(engine) or [number for number, _ in engine.offered()]
    return int(rng.choice(choices))


def best_affordable_policy(engine: RoundEngine, rng: np.random.Generator) -> int:
    """Highest balance score the budget covers, cheapest weapon otherwise."""
    offered = engine.offered()
    tier = engine.tier
    affordable = _affordable(engine)
    if affordable:
        return max(affordable, key=lambda n: engine.catalogue.score(tier.to_catalogue_index(n)))
    return min(offered, key=lambda pair: pair[1].price)[0]


def cheapest_policy(engine: RoundEngine, rng: np.random.Generator) -> int:
    """Always buy the cheapest weapon in the tier."""
    return min(engine.offered(), key=lambda pair: pair[1].price)[0]


POLICIES: Dict[str, PolicyFn] = {
    "random": random_policy,
    "best": best_affordable_policy,
    "cheapest": cheapest_policy,
}


def run_game(
    engine: RoundEngine,
    policy_fn: PolicyFn,
    seed: int = None,
    logger: MatchLogger = None,
    verbose: bool = False
) -> GameSummary:
    """
    Play one full game.

    Args:
        engine: Round engine (reset here)
        policy_fn: Function taking (engine, rng) and returning a menu number
        seed: Random seed for both the opponent draw and the policy
        logger: Optional match logger
        verbose: Print round details

    Returns:
        Game summary
    """
    engine_seq, policy_seq = np.random.SeedSequence(seed).spawn(2)
    engine.reset(seed=engine_seq)
    rng = np.random.default_rng(policy_seq)

    if logger:
        logger.start_game(seed=seed, catalogue=engine.catalogue)

    while not engine.is_game_over():
        engine.start_round()

        bought = False
        for _ in range(MAX_SELECTION_ATTEMPTS):
            number = policy_fn(engine, rng)
            try:
                engine.select(number)
                bought = True
                break
            except (AffordabilityError, ValidationError) as e:
                if verbose:
                    print(f"Round {engine.state.round_number}: pick {number} rejected ({e})")

        if not bought:
            if verbose:
                print(f"Round {engine.state.round_number}: no purchase, ending game")
            engine.abort()
            break

        result = engine.resolve()
        if logger:
            logger.log_round(result, engine.catalogue)

        if verbose:
            player = engine.catalogue[result.player_index].name
            opponent = engine.catalogue[result.opponent_index].name
            outcome = "win" if result.won else "loss"
            print(f"Round {result.round_number}: {player} vs {opponent} -> {outcome} "
                  f"(budget ${result.budget_after}, score {result.wins}-{result.losses})")

        engine.advance()

    summary = engine.summary()
    if logger:
        logger.end_game(summary)
    return summary


def run_n_games(
    engine: RoundEngine,
    policy_fn: PolicyFn,
    n_games: int = 10,
    base_seed: int = None,
    logger: MatchLogger = None,
    verbose: bool = False
) -> Dict:
    """
    Play several games and aggregate statistics.

    Returns:
        Aggregated statistics dict
    """
    all_results = []

    for i in range(n_games):
        seed = base_seed + i if base_seed is not None else None

        if verbose:
            print(f"\n=== Game {i+1}/{n_games} (seed={seed}) ===")

        all_results.append(run_game(engine, policy_fn, seed=seed, logger=logger, verbose=verbose))

    wins = np.array([r.wins for r in all_results])
    losses = np.array([r.losses for r in all_results])
    budgets = np.array([r.budget for r in all_results])
    rounds = np.array([r.rounds_played for r in all_results])

    return {
        "n_games": n_games,
        "avg_wins": float(np.mean(wins)),
        "std_wins": float(np.std(wins)),
        "avg_losses": float(np.mean(losses)),
        "avg_final_budget": float(np.mean(budgets)),
        "min_final_budget": int(np.min(budgets)),
        "avg_rounds": float(np.mean(rounds)),
        "round_win_rate": float(wins.sum() / max(rounds.sum(), 1)),
        "game_win_rate": float(np.mean(wins > losses)),
        "aborted_games": sum(1 for r in all_results if r.aborted),
        "all_results": all_results,
    }


def simulate_matchups(
    catalogue: Catalogue,
    simulation_count: int,
    config: GameConfig = None,
    seed: int = None
) -> List[Dict]:
    """
    Estimate each weapon's win rate against uniform draws from its own tier.

    Args:
        catalogue: Loaded catalogue
        simulation_count: Opponent draws per weapon
        config: Tier layout (defaults to the classic one)
        seed: Random seed

    Returns:
        One dict per weapon, sorted by simulated win rate (highest first),
        with the exact expected win rate alongside.
    """
    if simulation_count < 1:
        raise ValueError("simulation_count must be positive")

    config = config or GameConfig()
    engine = RoundEngine(catalogue, config=config)
    rng = np.random.default_rng(seed)
    scores = np.asarray(catalogue.scores, dtype=float)

    rows = []
    for n, tier in engine.tiers.items():
        tier_scores = scores[tier.start:tier.end]
        for index in range(tier.start, tier.end):
            draws = rng.integers(tier.start, tier.end, size=simulation_count)
            rows.append({
                "index": index,
                "name": catalogue[index].name,
                "round": n,
                "score": float(scores[index]),
                "win_rate": float(np.mean(scores[index] > scores[draws])),
                "expected_win_rate": float(np.mean(scores[index] > tier_scores)),
            })

    rows.sort(key=lambda r: -r["win_rate"])
    return rows


def main(argv: List[str] = None) -> int:
    """Run headless games with the built-in policies and compare them. Returns the exit code."""
    import argparse

    parser = argparse.ArgumentParser(description="Headless FireSync runner")
    parser.add_argument("--games", type=int, default=100, help="Games per policy")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--catalogue", type=str, default=None, help="Catalogue file")
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--log-dir", type=str, default=None, help="Write JSONL match logs here")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    if args.games < 1:
        print("Error: --games needs a positive count", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config)
        catalogue = load_catalogue(args.catalogue, capacity=config.capacity, weights=config.weights)
        engine = RoundEngine(catalogue, config=config)
    except FireSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger = MatchLogger(args.log_dir, enabled=args.log_dir is not None)

    print("=" * 60)
    print("FireSync Headless Runner")
    print("=" * 60)
    print(f"Catalogue: {catalogue.source} ({catalogue.count} weapons)")

    for name, policy_fn in POLICIES.items():
        start_time = time.time()
        results = run_n_games(
            engine=engine,
            policy_fn=policy_fn,
            n_games=args.games,
            base_seed=args.seed,
            logger=logger,
            verbose=args.verbose
        )
        elapsed = time.time() - start_time

        print(f"\nPolicy: {name} ({elapsed:.2f}s)")
        print(f"  Average Wins: {results['avg_wins']:.2f} ± {results['std_wins']:.2f}")
        print(f"  Round Win Rate: {results['round_win_rate']*100:.1f}%")
        print(f"  Game Win Rate: {results['game_win_rate']*100:.1f}%")
        print(f"  Average Final Budget: ${results['avg_final_budget']:.0f}")
        print(f"  Lowest Final Budget: ${results['min_final_budget']}")
        print(f"  Aborted Games: {results['aborted_games']}")

    print("\n" + "=" * 60)
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
