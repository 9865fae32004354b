"""
Game Configuration.

Defaults reproduce the classic five-round economy. A JSON file may override
any key; command line flags are applied on top by the console.
"""

import json
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Any

from sim.errors import ConfigError
from sim.mechanics import DEFAULT_WEIGHTS, ROUND_BONUSES, STARTING_BUDGET, TIER_BOUNDARIES, Tier, build_tiers


AFFORDABILITY_POLICIES = ("single_retry", "strict")
DIFFICULTIES = ("easy", "normal", "hard")

# Share of opponent draws taken from the low/medium/high thirds of a tier,
# ranked by balance score. "normal" is replaced by a uniform draw.
DIFFICULTY_WEIGHTS = {
    "easy": {"low": 0.6, "medium": 0.3, "high": 0.1},
    "normal": {"low": 0.33, "medium": 0.34, "high": 0.33},
    "hard": {"low": 0.1, "medium": 0.3, "high": 0.6},
}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_int_list(name: str, values):
    if not isinstance(values, (list, tuple)) or not all(_is_int(v) for v in values):
        raise ConfigError(f"{name} must be a list of integers, got {values!r}")


@dataclass
class GameConfig:
    """All tunables for one game."""
    tier_boundaries: List[int] = field(default_factory=lambda: list(TIER_BOUNDARIES))
    starting_budget: int = STARTING_BUDGET
    round_bonuses: List[int] = field(default_factory=lambda: list(ROUND_BONUSES))
    affordability_policy: str = "single_retry"
    reveal_delay: float = 1.0
    difficulty: str = "normal"
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    capacity: int = 34

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise ConfigError on inconsistent values."""
        if self.affordability_policy not in AFFORDABILITY_POLICIES:
            raise ConfigError(
                f"affordability_policy must be one of {AFFORDABILITY_POLICIES}, got {self.affordability_policy!r}"
            )
        if self.difficulty not in DIFFICULTIES:
            raise ConfigError(f"difficulty must be one of {DIFFICULTIES}, got {self.difficulty!r}")
        if not _is_int(self.starting_budget):
            raise ConfigError(f"starting_budget must be an integer, got {self.starting_budget!r}")
        _require_int_list("tier_boundaries", self.tier_boundaries)
        _require_int_list("round_bonuses", self.round_bonuses)
        if not _is_number(self.reveal_delay):
            raise ConfigError(f"reveal_delay must be a number, got {self.reveal_delay!r}")
        if self.reveal_delay < 0:
            raise ConfigError("reveal_delay cannot be negative")
        if not _is_int(self.capacity):
            raise ConfigError(f"capacity must be an integer, got {self.capacity!r}")
        if self.capacity < 1:
            raise ConfigError("capacity must be positive")
        unknown = set(self.weights) - set(DEFAULT_WEIGHTS)
        if unknown:
            raise ConfigError(f"unknown score weights: {sorted(unknown)}")
        for key, value in self.weights.items():
            if not _is_number(value):
                raise ConfigError(f"score weight {key!r} must be a number, got {value!r}")
        try:
            self.build_tiers()
        except ValueError as e:
            raise ConfigError(str(e)) from e

    @property
    def num_rounds(self) -> int:
        return len(self.tier_boundaries) - 1

    def build_tiers(self) -> Dict[int, Tier]:
        return build_tiers(self.tier_boundaries, self.starting_budget, self.round_bonuses)

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GameConfig":
        known = set(cls.__dataclass_fields__)
        unknown = set(d) - known
        if unknown:
            raise ConfigError(f"unknown config keys: {sorted(unknown)}")

        values = dict(d)
        if "weights" in values:
            if not isinstance(values["weights"], dict):
                raise ConfigError("weights must be a JSON object")
            values["weights"] = {**DEFAULT_WEIGHTS, **values["weights"]}
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigError(f"invalid config: {e}") from e


def load_config(path: str = None) -> GameConfig:
    """
    Load a JSON config file, or the defaults when path is None.

    Raises:
        ConfigError: unreadable file, bad JSON, or invalid values
    """
    if path is None:
        return GameConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"config {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must hold a JSON object")

    return GameConfig.from_dict(data)
