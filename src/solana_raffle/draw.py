from __future__ import annotations

import hashlib
from typing import Sequence, Tuple

from .project_constants import LAMPORTS_PER_SOL


def to_sol(lamports: int) -> float:
    return round(lamports / LAMPORTS_PER_SOL, 9)


def select_winner(entrants: Sequence[str], random_word: int) -> Tuple[int, str]:
    """
    Every entry is one slot; slot `random_word mod len(entrants)` wins.
    Someone who entered K times holds K slots.
    """
    if not entrants:
        raise ValueError("Cannot draw from an empty round.")
    if random_word < 0:
        raise ValueError("Random word must be non-negative.")
    idx = random_word % len(entrants)
    return idx, entrants[idx]


def word_from_seed(seed: str) -> Tuple[int, str]:
    """Derives a 256-bit word from a public seed string (used by simulations)."""
    seed_hash_hex = hashlib.sha256(seed.encode("utf-8")).hexdigest()
    return int(seed_hash_hex, 16), seed_hash_hex
