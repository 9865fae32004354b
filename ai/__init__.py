# AI module for the opposing side
# This module provides:
# - opponent.py: opponent weapon draw (uniform or difficulty weighted)

__version__ = "0.1.0"
