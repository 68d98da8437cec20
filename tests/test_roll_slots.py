from __future__ import annotations

import logging
import random

import pytest

from slotmachine.domain.session import GameSession
from slotmachine.domain.symbols import Symbol, is_three_of_a_kind
from slotmachine.errors import InsufficientFunds, SessionInactive, SessionNotFound
from slotmachine.random_draw import RandomDraw
from slotmachine.roll_slots import RollSlots
from slotmachine.session_store import InMemorySessionStore

C, L, O, W = Symbol.cherry, Symbol.lemon, Symbol.orange, Symbol.watermelon


def _seed(store: InMemorySessionStore, credits: int, *, active: bool = True) -> GameSession:
    s = GameSession(f"s-{credits}", credits, active=active)
    store.create(s)
    return s


def test_losing_roll_debits_stake(memory_store, scripted) -> None:
    s = _seed(memory_store, 1)
    scripted.draws = [[C, L, O]]

    result = RollSlots(memory_store, scripted).execute(s.id)

    assert result.symbols == ["C", "L", "O"]
    assert result.is_win is False
    assert result.credits == 0
    assert result.message is None
    assert result.win_amount is None
    assert scripted.suppress_queries == []
    assert memory_store.find_by_id(s.id).credits == 0


def test_winning_roll_below_forty_pays_symbol_value(memory_store, scripted) -> None:
    s = _seed(memory_store, 1)
    scripted.draws = [[W, W, W]]
    scripted.suppress = [False]

    result = RollSlots(memory_store, scripted).execute(s.id)

    assert result.is_win is True
    assert result.credits == 40
    assert result.win_amount == 40
    assert result.message == "You won 40 credits!"
    # Policy is asked with the post-stake balance.
    assert scripted.suppress_queries == [0]

    roll = memory_store.find_by_id(s.id).history[-1]
    assert roll.balance_before_outcome == 0
    assert roll.was_suppressed is False


def test_suppressed_win_redraws_until_not_three_of_a_kind(memory_store, scripted) -> None:
    s = _seed(memory_store, 70)
    scripted.draws = [[O, O, O], [L, L, L], [C, C, C], [C, L, C]]
    scripted.suppress = [True]

    result = RollSlots(memory_store, scripted).execute(s.id)

    assert result.symbols == ["C", "L", "C"]
    assert result.is_win is False
    assert result.credits == 69
    # Suppression is decided once per roll, not per redraw.
    assert scripted.suppress_queries == [69]
    assert scripted.draw_calls == 4

    roll = memory_store.find_by_id(s.id).history[-1]
    assert roll.was_suppressed is True
    assert not is_three_of_a_kind(roll.symbols)


def test_unsuppressed_win_keeps_first_draw(memory_store, scripted) -> None:
    s = _seed(memory_store, 50)
    scripted.draws = [[C, C, C]]
    scripted.suppress = [False]

    result = RollSlots(memory_store, scripted).execute(s.id)

    assert result.is_win is True
    assert result.credits == 49 + 10
    assert memory_store.find_by_id(s.id).history[-1].was_suppressed is False


def test_missing_session(memory_store, scripted) -> None:
    with pytest.raises(SessionNotFound):
        RollSlots(memory_store, scripted).execute("nope")
    assert scripted.draw_calls == 0


def test_inactive_session_is_rejected_before_stake(memory_store, scripted) -> None:
    s = _seed(memory_store, 8, active=False)
    with pytest.raises(SessionInactive):
        RollSlots(memory_store, scripted).execute(s.id)
    assert memory_store.find_by_id(s.id).credits == 8
    assert scripted.draw_calls == 0


def test_broke_session_is_rejected(memory_store, scripted) -> None:
    s = _seed(memory_store, 0)
    with pytest.raises(InsufficientFunds):
        RollSlots(memory_store, scripted).execute(s.id)
    assert memory_store.find_by_id(s.id).history == ()


def test_inactive_check_precedes_funds_check(memory_store, scripted) -> None:
    s = _seed(memory_store, 0, active=False)
    with pytest.raises(SessionInactive):
        RollSlots(memory_store, scripted).execute(s.id)


def test_redraw_cap_falls_back_to_first_winning_draw(memory_store, scripted) -> None:
    s = _seed(memory_store, 70)
    scripted.draws = [[O, O, O], [L, L, L], [W, W, W]]
    scripted.suppress = [True]

    result = RollSlots(memory_store, scripted, max_redraws=2).execute(s.id)

    assert result.symbols == ["O", "O", "O"]
    assert result.is_win is True
    assert result.win_amount == 30
    assert result.credits == 69 + 30
    assert scripted.draw_calls == 3
    assert memory_store.find_by_id(s.id).history[-1].was_suppressed is False


def test_redraw_cap_of_one_does_not_pay_the_redraw(memory_store, scripted) -> None:
    s = _seed(memory_store, 70)
    scripted.draws = [[O, O, O], [L, L, L]]
    scripted.suppress = [True]

    result = RollSlots(memory_store, scripted, max_redraws=1).execute(s.id)

    assert result.symbols == ["O", "O", "O"]
    assert result.credits == 69 + 30
    assert memory_store.find_by_id(s.id).history[-1].was_suppressed is False


def test_redraw_within_cap_still_suppresses(memory_store, scripted) -> None:
    s = _seed(memory_store, 70)
    scripted.draws = [[O, O, O], [L, L, L], [C, L, W]]
    scripted.suppress = [True]

    result = RollSlots(memory_store, scripted, max_redraws=2).execute(s.id)

    assert result.symbols == ["C", "L", "W"]
    assert result.is_win is False
    assert memory_store.find_by_id(s.id).history[-1].was_suppressed is True


def test_zero_redraw_cap_never_marks_suppressed(memory_store, scripted, caplog: pytest.LogCaptureFixture) -> None:
    s = _seed(memory_store, 70)
    scripted.draws = [[O, O, O]]
    scripted.suppress = [True]

    with caplog.at_level(logging.DEBUG, logger="slotmachine.roll_slots"):
        result = RollSlots(memory_store, scripted, max_redraws=0).execute(s.id)

    assert "redraw cap" in caplog.text
    assert "win suppressed" not in caplog.text

    assert result.symbols == ["O", "O", "O"]
    assert result.credits == 69 + 30
    assert memory_store.find_by_id(s.id).history[-1].was_suppressed is False


def test_credits_never_negative_over_many_rolls(memory_store) -> None:
    s = _seed(memory_store, 10)
    roller = RollSlots(memory_store, RandomDraw(random.Random(3)))
    for _ in range(500):
        try:
            roller.execute(s.id)
        except InsufficientFunds:
            break
        assert memory_store.find_by_id(s.id).credits >= 0


def test_roll_persists_through_redis_store(redis_store, scripted) -> None:
    s = GameSession("r1", 5)
    redis_store.create(s)
    scripted.draws = [[C, C, C]]
    scripted.suppress = [False]

    RollSlots(redis_store, scripted).execute("r1")

    assert redis_store.find_by_id("r1").credits == 14


class _ForcedWinFirst(RandomDraw):
    """Real random source whose first draw after `arm()` is a forced three-of-a-kind."""

    def __init__(self, rng: random.Random):
        super().__init__(rng)
        self._armed = False

    def arm(self) -> None:
        self._armed = True

    def draw_symbols(self, n: int) -> list[Symbol]:
        if self._armed:
            self._armed = False
            return [W] * n
        return super().draw_symbols(n)


def test_suppression_rate_at_seventy_credits_is_about_sixty_percent() -> None:
    store = InMemorySessionStore()
    rng = _ForcedWinFirst(random.Random(8675309))
    roller = RollSlots(store, rng)

    trials = 2_000
    suppressed = 0
    for i in range(trials):
        s = GameSession(f"t{i}", 70)
        store.create(s)
        rng.arm()
        roller.execute(s.id)
        roll = store.find_by_id(s.id).history[-1]
        if roll.was_suppressed:
            suppressed += 1
            assert not is_three_of_a_kind(roll.symbols)
        else:
            assert roll.symbols == (W, W, W)

    assert abs(suppressed / trials - 0.6) < 0.05
