"""Random sources for the uncertainty term of the risk score.

A source returns a draw in [0, 1) for a ticket; the scorer scales it into
the configured contribution range. Tests inject ``FixedRandomSource(0.0)``
to remove the noise entirely.
"""

from __future__ import annotations

import random
from typing import Protocol, runtime_checkable

from transit_fraud.core.config import RandomMode, ScoringConfig


@runtime_checkable
class RandomSource(Protocol):
    def draw(self, ticket_id: str) -> float:
        """Return a value in [0, 1)."""
        ...


class SystemRandomSource:
    """Uniform noise from ``random.Random``; pass a seed for reproducible runs."""

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self._rng = rng or random.Random(seed)

    def draw(self, ticket_id: str) -> float:
        return self._rng.random()


class TicketSeededRandomSource:
    """Deterministic draw from the character codes of the ticket id."""

    def __init__(self, modulus: int = 100):
        if modulus < 1:
            raise ValueError("modulus must be positive")
        self.modulus = modulus

    def draw(self, ticket_id: str) -> float:
        return (sum(ord(ch) for ch in ticket_id) % self.modulus) / self.modulus


class FixedRandomSource:
    """Always returns the same draw."""

    def __init__(self, value: float = 0.0):
        if not 0.0 <= value < 1.0:
            raise ValueError("value must be in [0, 1)")
        self.value = value

    def draw(self, ticket_id: str) -> float:
        return self.value


def build_random_source(config: ScoringConfig) -> RandomSource:
    """Create the random source selected by SCORING_RANDOM_MODE."""
    if config.random_mode == RandomMode.SEEDED:
        return TicketSeededRandomSource(config.seed_modulus)
    if config.random_mode == RandomMode.FIXED:
        return FixedRandomSource(config.random_fixed_value)
    return SystemRandomSource(config.random_seed)
