"""
Pure Python Game State Container.

This module defines the weapon catalogue and per-session round state used by
the round engine, independent of any console or Streamlit front end.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class WeaponRecord:
    """One catalogue entry. Identity is its index in the catalogue."""
    name: str
    price: int
    damage: int
    fire_rate: float
    magazine_size: int
    falloff: int
    accurate_range: float
    recoil: float

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "price": self.price,
            "damage": self.damage,
            "fire_rate": self.fire_rate,
            "magazine_size": self.magazine_size,
            "falloff": self.falloff,
            "accurate_range": self.accurate_range,
            "recoil": self.recoil,
        }


@dataclass(frozen=True)
class Catalogue:
    """
    Loaded weapon table with balance scores cached alongside.

    `records` and `scores` are parallel tuples; `capacity` is the maximum
    number of records a source may contribute.
    """
    records: Tuple[WeaponRecord, ...] = ()
    scores: Tuple[float, ...] = ()
    capacity: int = 34
    source: Optional[str] = None

    def __post_init__(self):
        if len(self.records) != len(self.scores):
            raise ValueError("records and scores must be the same length")
        if len(self.records) > self.capacity:
            raise ValueError(f"catalogue holds {len(self.records)} records, capacity is {self.capacity}")

    @property
    def count(self) -> int:
        return len(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> WeaponRecord:
        return self.records[index]

    def __iter__(self):
        return iter(self.records)

    def score(self, index: int) -> float:
        return self.scores[index]


@dataclass
class RoundState:
    """Mutable economy state for one game session."""
    round_number: int = 1
    budget: int = 0
    wins: int = 0
    losses: int = 0

    def to_dict(self) -> Dict:
        return {
            "round_number": self.round_number,
            "budget": self.budget,
            "wins": self.wins,
            "losses": self.losses,
        }


@dataclass(frozen=True)
class RoundResult:
    """Outcome of one resolved round."""
    round_number: int
    player_index: int
    opponent_index: int
    player_score: float
    opponent_score: float
    won: bool
    price_paid: int
    budget_after: int
    wins: int
    losses: int

    def to_dict(self) -> Dict:
        return {
            "round_number": self.round_number,
            "player_index": self.player_index,
            "opponent_index": self.opponent_index,
            "player_score": self.player_score,
            "opponent_score": self.opponent_score,
            "won": self.won,
            "price_paid": self.price_paid,
            "budget_after": self.budget_after,
            "wins": self.wins,
            "losses": self.losses,
        }


@dataclass
class GameSummary:
    """Final tally of a finished (or aborted) game."""
    wins: int = 0
    losses: int = 0
    budget: int = 0
    rounds: List[RoundResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def rounds_played(self) -> int:
        return len(self.rounds)

    def get_winner(self) -> str:
        """Returns 'player', 'opponent', or 'tie'."""
        if self.wins > self.losses:
            return "player"
        if self.wins < self.losses:
            return "opponent"
        return "tie"

    def to_dict(self) -> Dict:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "budget": self.budget,
            "aborted": self.aborted,
            "winner": self.get_winner(),
            "rounds": [r.to_dict() for r in self.rounds],
        }
