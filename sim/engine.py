"""
Round Engine.

Drives the five-round economy: budget accrual, tier gating, purchase
validation, opponent draw and win/loss resolution. The engine is a small
state machine stepped by the caller (console, headless runner or tests):

    ROUND_START -> TIER_OFFERED -> WEAPON_CHOSEN -> RESOLVED -> ROUND_START ...
                                                             -> GAME_OVER
"""

import numpy as np
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ai.opponent import OpponentFn, opponent_for_difficulty
from sim.config import GameConfig
from sim.errors import AffordabilityError, LoadError, ValidationError
from sim.mechanics import Tier, resolve_outcome
from sim.state import Catalogue, GameSummary, RoundResult, RoundState, WeaponRecord


class Phase(Enum):
    ROUND_START = "round_start"
    TIER_OFFERED = "tier_offered"
    WEAPON_CHOSEN = "weapon_chosen"
    RESOLVED = "resolved"
    GAME_OVER = "game_over"


class RoundEngine:
    """
    Economy state machine for one game session.

    The catalogue is shared read-only; all mutable state lives in
    `self.state` and is rebuilt by reset().
    """

    def __init__(
        self,
        catalogue: Catalogue,
        config: GameConfig = None,
        seed: int = None,
        rng: np.random.Generator = None,
        opponent_fn: OpponentFn = None
    ):
        """
        Args:
            catalogue: Loaded weapon catalogue
            config: Game configuration (defaults to the classic economy)
            seed: Random seed for the opponent draw
            rng: Pre-built generator; takes precedence over seed
            opponent_fn: Override for the opponent pick, called as
                (tier, catalogue, rng) -> catalogue index
        """
        self.catalogue = catalogue
        self.config = config or GameConfig()
        self.tiers = self._clip_tiers(self.config.build_tiers())
        self.opponent_fn = opponent_fn or opponent_for_difficulty(self.config.difficulty)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.state = RoundState()
        self.phase = Phase.ROUND_START
        self.history: List[RoundResult] = []
        self.aborted = False
        self._retry_used = False
        self._selection: Optional[int] = None
        self._price_paid = 0

    def _clip_tiers(self, tiers: Dict[int, Tier]) -> Dict[int, Tier]:
        """Clip tiers to the loaded record count; every round needs a weapon."""
        clipped = {}
        for n, tier in tiers.items():
            end = min(tier.end, self.catalogue.count)
            if end <= tier.start:
                raise LoadError(
                    f"catalogue has {self.catalogue.count} weapons; round {n} needs index {tier.start} or higher"
                )
            clipped[n] = Tier(round_number=n, start=tier.start, end=end, budget_increment=tier.budget_increment)
        return clipped

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self, seed: int = None) -> RoundState:
        """Start a fresh game. A seed reseeds the opponent RNG."""
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self.state = RoundState()
        self.phase = Phase.ROUND_START
        self.history = []
        self.aborted = False
        self._retry_used = False
        self._selection = None
        self._price_paid = 0
        return self.state

    @property
    def num_rounds(self) -> int:
        return len(self.tiers)

    @property
    def tier(self) -> Tier:
        """Tier of the current round."""
        return self.tiers[self.state.round_number]

    @property
    def retry_available(self) -> bool:
        return self.config.affordability_policy == "strict" or not self._retry_used

    def is_game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    def _require(self, *phases: Phase):
        if self.phase not in phases:
            expected = ", ".join(p.name for p in phases)
            raise RuntimeError(f"engine is in {self.phase.name}, expected {expected}")

    # ------------------------------------------------------------------
    # Round steps
    # ------------------------------------------------------------------

    def start_round(self) -> Tier:
        """Credit this round's budget and offer its tier."""
        self._require(Phase.ROUND_START)
        tier = self.tier
        if tier.round_number == 1:
            self.state.budget = tier.budget_increment
        else:
            self.state.budget += tier.budget_increment

        self._retry_used = False
        self._selection = None
        self._price_paid = 0
        self.phase = Phase.TIER_OFFERED
        return tier

    def offered(self) -> List[Tuple[int, WeaponRecord]]:
        """(menu number, record) pairs for the current tier, numbered from 1."""
        tier = self.tier
        return [(i - tier.start + 1, self.catalogue[i]) for i in range(tier.start, tier.end)]

    def validate_selection(self, number) -> int:
        """
        Check a 1-based menu number against the current tier.

        Returns:
            Catalogue index of the selection

        Raises:
            ValidationError: not an integer, or outside 1..tier size
        """
        try:
            number = int(str(number).strip())
        except ValueError:
            raise ValidationError(f"'{number}' is not a number") from None

        tier = self.tier
        if not 1 <= number <= tier.size:
            raise ValidationError(f"choose a weapon between 1 and {tier.size}")
        return tier.to_catalogue_index(number)

    def select(self, number) -> int:
        """
        Buy the weapon at a 1-based menu number.

        The first unaffordable pick of a round raises AffordabilityError and
        leaves the tier on offer. Under the "single_retry" policy the next
        pick is charged even if the budget cannot cover it; under "strict"
        unaffordable picks keep being rejected.

        Returns:
            Catalogue index of the purchased weapon
        """
        self._require(Phase.TIER_OFFERED)
        index = self.validate_selection(number)
        record = self.catalogue[index]

        if self.state.budget < record.price and self.retry_available:
            self._retry_used = True
            raise AffordabilityError(
                f"{record.name} costs ${record.price}, budget is ${self.state.budget}",
                price=record.price,
                budget=self.state.budget,
            )

        self.state.budget -= record.price
        self._selection = index
        self._price_paid = record.price
        self.phase = Phase.WEAPON_CHOSEN
        return index

    def resolve(self) -> RoundResult:
        """Draw the opponent weapon from the same tier and settle the round."""
        self._require(Phase.WEAPON_CHOSEN)
        tier = self.tier
        opponent = int(self.opponent_fn(tier, self.catalogue, self.rng))
        if not tier.contains(opponent):
            raise RuntimeError(f"opponent index {opponent} outside round {tier.round_number} tier")

        player_score = self.catalogue.score(self._selection)
        opponent_score = self.catalogue.score(opponent)
        won = resolve_outcome(player_score, opponent_score)
        if won:
            self.state.wins += 1
        else:
            self.state.losses += 1

        result = RoundResult(
            round_number=self.state.round_number,
            player_index=self._selection,
            opponent_index=opponent,
            player_score=player_score,
            opponent_score=opponent_score,
            won=won,
            price_paid=self._price_paid,
            budget_after=self.state.budget,
            wins=self.state.wins,
            losses=self.state.losses,
        )
        self.history.append(result)
        self.phase = Phase.RESOLVED
        return result

    def advance(self) -> Phase:
        """Move to the next round, or finish after the last one."""
        self._require(Phase.RESOLVED)
        if self.state.round_number >= self.num_rounds:
            self.phase = Phase.GAME_OVER
        else:
            self.state.round_number += 1
            self.phase = Phase.ROUND_START
        return self.phase

    def abort(self):
        """Early exit; the game ends with the rounds played so far."""
        if self.phase != Phase.GAME_OVER:
            self.aborted = True
            self.phase = Phase.GAME_OVER

    def summary(self) -> GameSummary:
        return GameSummary(
            wins=self.state.wins,
            losses=self.state.losses,
            budget=self.state.budget,
            rounds=list(self.history),
            aborted=self.aborted,
        )
