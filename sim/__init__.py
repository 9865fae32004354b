# Simulation module for the weapon economy game
# This module provides:
# - state.py: weapon catalogue and round state containers
# - catalogue.py: catalogue file loader
# - mechanics.py: balance score, tier table, outcome resolution
# - config.py: game configuration
# - engine.py: five-round economy state machine
# - logger.py: JSONL match logging
# - runner.py: headless game runner

__version__ = "0.1.0"
