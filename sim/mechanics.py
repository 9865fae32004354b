"""
Deterministic Economy Mechanics.

Provides the balance score, the round tier table and outcome resolution.
No randomness lives here; opponent draws are in ai.opponent.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from sim.errors import ScoreError
from sim.state import WeaponRecord


# Score weight multipliers; all 1.0 reproduces the plain formula.
DEFAULT_WEIGHTS = {
    "damage": 1.0,
    "fire_rate": 1.0,
    "magazine": 1.0,
    "range": 1.0,
    "denominator": 1.0,
}

# Scores are shown divided by this in the catalogue table.
SCORE_DISPLAY_DIVISOR = 100.0


@dataclass(frozen=True)
class Tier:
    """Catalogue slice [start, end) on offer in one round."""
    round_number: int
    start: int
    end: int
    budget_increment: int

    @property
    def size(self) -> int:
        return self.end - self.start

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end

    def to_catalogue_index(self, number: int) -> int:
        """Map a 1-based menu number to a catalogue index."""
        return self.start + number - 1


# Classic five-round layout: catalogue index boundaries, the budget assigned
# in round 1 and the increments added in rounds 2-5.
TIER_BOUNDARIES = (0, 10, 17, 23, 30, 34)
STARTING_BUDGET = 900
ROUND_BONUSES = (1700, 2000, 2600, 3500)


def build_tiers(
    boundaries: List[int],
    starting_budget: int,
    round_bonuses: List[int]
) -> Dict[int, Tier]:
    """
    Build a tier table from index boundaries and budget figures.

    Args:
        boundaries: Ascending indices, one more than the number of rounds
            (e.g. [0, 10, 17, 23, 30, 34])
        starting_budget: Budget assigned in round 1
        round_bonuses: Increments added in rounds 2..n

    Returns:
        Dict of round_number -> Tier
    """
    num_rounds = len(boundaries) - 1
    if num_rounds < 1:
        raise ValueError("need at least two tier boundaries")
    if len(round_bonuses) != num_rounds - 1:
        raise ValueError(
            f"expected {num_rounds - 1} round bonuses for {num_rounds} rounds, got {len(round_bonuses)}"
        )
    if any(nxt <= prev for prev, nxt in zip(boundaries, boundaries[1:])):
        raise ValueError("tier boundaries must be strictly ascending")

    increments = [starting_budget] + list(round_bonuses)
    return {
        n: Tier(round_number=n, start=boundaries[n - 1], end=boundaries[n], budget_increment=increments[n - 1])
        for n in range(1, num_rounds + 1)
    }


def balance_score(record: WeaponRecord, weights: Optional[Dict[str, float]] = None) -> float:
    """
    Balance score of a weapon.

    score = (damage * fire_rate + magazine_size * accurate_range) / (falloff + recoil)

    Raises:
        ScoreError: falloff + recoil is zero
    """
    w = DEFAULT_WEIGHTS if weights is None else {**DEFAULT_WEIGHTS, **weights}

    numerator = (
        record.damage * w["damage"] * record.fire_rate * w["fire_rate"]
        + record.magazine_size * w["magazine"] * record.accurate_range * w["range"]
    )
    denominator = (record.falloff + record.recoil) * w["denominator"]

    if denominator == 0:
        raise ScoreError(f"balance score undefined for {record.name}: falloff + recoil is zero")

    return float(numerator) / denominator


def dps(record: WeaponRecord) -> float:
    """Damage per second (fire rate is in rounds per minute)."""
    return (record.damage * record.fire_rate) / 60.0


def display_score(score: float) -> float:
    return score / SCORE_DISPLAY_DIVISOR


def resolve_outcome(player_score: float, opponent_score: float) -> bool:
    """True for a win. Ties go to the opponent."""
    return player_score > opponent_score
