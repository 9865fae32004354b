"""
JSONL Match Logger.

Appends one JSON object per resolved round, plus a game_start and game_end
record, so finished games can be inspected or fed to balance analysis.
"""

import json
import os
from datetime import datetime
from typing import Dict, Optional

import numpy as np

from sim.state import Catalogue, GameSummary, RoundResult


def convert_numpy(obj):
    """Convert numpy types to Python native types for JSON serialization."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, dict):
        return {k: convert_numpy(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy(v) for v in obj]
    return obj


class MatchLogger:
    """
    Logger for played games in JSONL format.
    """

    def __init__(self, log_dir: str = None, enabled: bool = True):
        """
        Args:
            log_dir: Directory to write logs. Defaults to data/match_logs/
            enabled: Whether logging is active
        """
        self.enabled = enabled

        if log_dir is None:
            base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
            log_dir = os.path.join(base_path, "data", "match_logs")

        self.log_dir = log_dir
        self.current_file: Optional[str] = None
        self.game_id: Optional[str] = None
        self.seed = None

        if self.enabled:
            os.makedirs(self.log_dir, exist_ok=True)

    def _write(self, entry: Dict):
        if not self.enabled or self.current_file is None:
            return
        try:
            with open(self.current_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(convert_numpy(entry)) + "\n")
        except OSError as e:
            print(f"Warning: Failed to write log entry: {e}")

    def start_game(self, seed: int = None, game_id: str = None, catalogue: Catalogue = None):
        """Open a new log file for this game."""
        if not self.enabled:
            return

        self.seed = seed
        if game_id is None:
            game_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        self.game_id = game_id
        self.current_file = os.path.join(self.log_dir, f"match_{game_id}.jsonl")

        self._write({
            "timestamp": datetime.now().isoformat(),
            "type": "game_start",
            "game_id": self.game_id,
            "seed": seed,
            "catalogue": catalogue.source if catalogue else None,
            "weapons": catalogue.count if catalogue else None,
        })

    def log_round(self, result: RoundResult, catalogue: Catalogue = None):
        """Log a resolved round."""
        entry = {
            "timestamp": datetime.now().isoformat(),
            "type": "round",
            "game_id": self.game_id,
            **result.to_dict(),
        }
        if catalogue is not None:
            entry["player_weapon"] = catalogue[result.player_index].name
            entry["opponent_weapon"] = catalogue[result.opponent_index].name
        self._write(entry)

    def end_game(self, summary: GameSummary):
        """Write the final tally and close out the game."""
        self._write({
            "timestamp": datetime.now().isoformat(),
            "type": "game_end",
            "game_id": self.game_id,
            "wins": summary.wins,
            "losses": summary.losses,
            "budget": summary.budget,
            "aborted": summary.aborted,
            "winner": summary.get_winner(),
        })
        self.current_file = None
        self.game_id = None
