from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from slotmachine.domain.symbols import ALPHABET, Symbol


class RandomSource(ABC):
    """Randomness the roll use case depends on."""

    @abstractmethod
    def draw_symbols(self, n: int) -> list[Symbol]:
        raise NotImplementedError

    @abstractmethod
    def should_suppress(self, current_credits: int) -> bool:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SuppressionTier:
    """Suppress with `probability` when credits are at least `min_credits`."""

    min_credits: int
    probability: float


# Highest threshold first. Below 40 credits a win is never suppressed;
# 40..60 inclusive suppresses 30% of wins, above 60 suppresses 60%.
DEFAULT_SUPPRESSION_TIERS: tuple[SuppressionTier, ...] = (
    SuppressionTier(min_credits=61, probability=0.6),
    SuppressionTier(min_credits=40, probability=0.3),
)


def suppression_probability(credits: int, tiers: tuple[SuppressionTier, ...] = DEFAULT_SUPPRESSION_TIERS) -> float:
    for tier in tiers:
        if credits >= tier.min_credits:
            return tier.probability
    return 0.0


class RandomDraw(RandomSource):
    def __init__(self, rng: random.Random | None = None, *, tiers: tuple[SuppressionTier, ...] = DEFAULT_SUPPRESSION_TIERS):
        self._rng = rng or random.SystemRandom()
        self._tiers = tiers

    def draw_symbols(self, n: int) -> list[Symbol]:
        if n < 0:
            raise ValueError("n must be >= 0")
        return [self._rng.choice(ALPHABET) for _ in range(n)]

    def should_suppress(self, current_credits: int) -> bool:
        p = suppression_probability(current_credits, self._tiers)
        if p <= 0.0:
            return False
        return self._rng.random() < p
