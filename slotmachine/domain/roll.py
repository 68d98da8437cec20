from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from slotmachine.domain.symbols import Symbol, is_three_of_a_kind


def _roll_id() -> str:
    # Display/audit only; never used as a lookup key.
    return f"{int(time.time() * 1000):x}{secrets.token_hex(4)}"


@dataclass(frozen=True, slots=True)
class Roll:
    """Outcome of one spin.

    `balance_before_outcome` is the balance after the stake was debited and
    before any payout was applied.
    """

    symbols: tuple[Symbol, Symbol, Symbol]
    balance_before_outcome: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    was_suppressed: bool = False
    id: str = field(default_factory=_roll_id)

    def __post_init__(self) -> None:
        if len(self.symbols) != 3:
            raise ValueError("A roll needs exactly three symbols")
        if self.balance_before_outcome < 0:
            raise ValueError("Roll balance can't be negative")

    @property
    def is_win(self) -> bool:
        return is_three_of_a_kind(self.symbols)

    @property
    def payout(self) -> int:
        return self.symbols[0].payout if self.is_win else 0

    @property
    def codes(self) -> list[str]:
        return [s.value for s in self.symbols]

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbols": self.codes,
            "is_win": self.is_win,
            "win_amount": self.payout,
            "credits": self.balance_before_outcome,
            "timestamp": self.timestamp.isoformat(),
            "was_suppressed": self.was_suppressed,
        }
