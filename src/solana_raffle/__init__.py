"""Recurring SOL raffle settled by a VRF coordinator."""

from .raffle import Raffle, RaffleState

__version__ = "1.0.0"

__all__ = ["Raffle", "RaffleState", "__version__"]
