from __future__ import annotations

import logging

from slotmachine.api.models import RollResult
from slotmachine.domain.symbols import Symbol, is_three_of_a_kind
from slotmachine.errors import InsufficientFunds, SessionInactive, SessionNotFound
from slotmachine.random_draw import RandomSource
from slotmachine.session_store import SessionStore


logger = logging.getLogger(__name__)

STAKE = 1
REELS = 3


class RollSlots:
    """Runs one spin for a session: stake, draw, suppression, commit.

    Steps run in a fixed order and stop at the first failed precondition:
    lookup, active check, funds check, stake debit, draw, suppression loop,
    commit. Nothing is persisted unless every step succeeds; the stake debit
    itself is never refunded.
    """

    def __init__(self, store: SessionStore, rng: RandomSource, *, max_redraws: int | None = None):
        self._store = store
        self._rng = rng
        self._max_redraws = max_redraws

    def execute(self, session_id: str) -> RollResult:
        with self._store.lock(session_id):
            session = self._store.find_by_id(session_id)
            if session is None:
                raise SessionNotFound(session_id)
            if not session.active:
                raise SessionInactive(session_id)
            if session.credits < STAKE:
                raise InsufficientFunds(credits=session.credits, required=STAKE)

            session.decrease_credits(STAKE)

            symbols, was_suppressed = self._draw(session_id=session_id, credits=session.credits)

            roll = session.add_roll(symbols, was_suppressed)
            self._store.update(session)

        if roll.is_win:
            logger.info("session %s won %d credits (balance %d)", session_id, roll.payout, session.credits)
            return RollResult(
                symbols=roll.codes,
                is_win=True,
                credits=session.credits,
                message=f"You won {roll.payout} credits!",
                win_amount=roll.payout,
            )
        return RollResult(symbols=roll.codes, is_win=False, credits=session.credits)

    def _draw(self, *, session_id: str, credits: int) -> tuple[list[Symbol], bool]:
        symbols = self._rng.draw_symbols(REELS)
        if not is_three_of_a_kind(symbols):
            return symbols, False

        # The suppression policy sees the post-stake balance.
        if not self._rng.should_suppress(credits):
            return symbols, False

        first = symbols
        redraws = 0
        while is_three_of_a_kind(symbols):
            if self._max_redraws is not None and redraws >= self._max_redraws:
                # Cap reached: the first winning draw stands, unsuppressed.
                logger.warning("session %s hit the redraw cap (%d); keeping winning draw", session_id, redraws)
                return first, False
            symbols = self._rng.draw_symbols(REELS)
            redraws += 1

        logger.debug("session %s: win suppressed at %d credits after %d redraw(s)", session_id, credits, redraws)
        return symbols, True
