from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum


class Symbol(StrEnum):
    """Reel symbols, keyed by their display code."""

    cherry = "C"
    lemon = "L"
    orange = "O"
    watermelon = "W"

    @property
    def payout(self) -> int:
        return PAYOUTS[self]


PAYOUTS: dict[Symbol, int] = {
    Symbol.cherry: 10,
    Symbol.lemon: 20,
    Symbol.orange: 30,
    Symbol.watermelon: 40,
}

ALPHABET: tuple[Symbol, ...] = tuple(Symbol)


def is_three_of_a_kind(symbols: Sequence[Symbol]) -> bool:
    return len(symbols) == 3 and symbols[0] == symbols[1] == symbols[2]
