"""
Opponent Weapon Selection.

The opponent always buys from the same tier as the player. On "normal" the
pick is uniform over the tier; "easy" and "hard" bias the pick toward the
weaker or stronger third of the tier by balance score.
"""

import numpy as np
from typing import Callable, Dict, List

from sim.config import DIFFICULTY_WEIGHTS
from sim.mechanics import Tier
from sim.state import Catalogue


OpponentFn = Callable[[Tier, Catalogue, np.random.Generator], int]


def uniform_opponent(tier: Tier, catalogue: Catalogue, rng: np.random.Generator) -> int:
    """Uniform catalogue index in [tier.start, tier.end)."""
    return int(rng.integers(tier.start, tier.end))


def split_thirds(indices: List[int], catalogue: Catalogue) -> Dict[str, List[int]]:
    """
    Split tier indices into low/medium/high thirds by balance score.

    Tiers smaller than three weapons have no medium band.
    """
    ranked = sorted(indices, key=catalogue.score)
    band = max(len(ranked) // 3, 1)
    return {
        "low": ranked[:band],
        "medium": ranked[band:len(ranked) - band],
        "high": ranked[-band:],
    }


def weighted_opponent(
    tier: Tier,
    catalogue: Catalogue,
    rng: np.random.Generator,
    weights: Dict[str, float]
) -> int:
    """Pick a score band by weight, then a weapon uniformly inside it."""
    indices = list(range(tier.start, tier.end))
    if len(indices) < 3:
        return int(rng.choice(indices))

    bands = split_thirds(indices, catalogue)
    roll = rng.random()
    if roll < weights["low"]:
        band = bands["low"]
    elif roll < weights["low"] + weights["medium"]:
        band = bands["medium"]
    else:
        band = bands["high"]

    # empty medium band on small tiers
    if not band:
        band = indices

    return int(rng.choice(band))


def opponent_for_difficulty(difficulty: str) -> OpponentFn:
    """Opponent selection function for a difficulty name."""
    if difficulty == "normal":
        return uniform_opponent
    if difficulty not in DIFFICULTY_WEIGHTS:
        raise KeyError(f"unknown difficulty: {difficulty}")

    weights = DIFFICULTY_WEIGHTS[difficulty]

    def pick(tier: Tier, catalogue: Catalogue, rng: np.random.Generator) -> int:
        return weighted_opponent(tier, catalogue, rng, weights)

    return pick
