from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from slotmachine.domain.records import SessionRecord
from slotmachine.domain.roll import Roll
from slotmachine.domain.symbols import Symbol
from slotmachine.errors import InsufficientFunds, InvalidAmount, InvalidData, SessionInactive
from slotmachine.fsm import SessionFSM, SessionStatus


STARTING_CREDITS = 10

_ONE_TICK = timedelta(microseconds=1)


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt


class GameSession:
    """A player's credit balance and roll history.

    All balance changes go through the methods below; once the session is
    closed nothing but `deactivate()` is accepted.
    """

    def __init__(
        self,
        session_id: str,
        credits: int = STARTING_CREDITS,
        *,
        created_at: datetime | None = None,
        last_updated: datetime | None = None,
        active: bool = True,
    ) -> None:
        if credits < 0:
            raise InvalidAmount(credits)
        self._id = session_id
        self._credits = credits
        self._created_at = created_at or _now()
        self._last_updated = last_updated or self._created_at
        self._history: list[Roll] = []
        self.status = SessionStatus.active if active else SessionStatus.closed

    @property
    def id(self) -> str:
        return self._id

    @property
    def credits(self) -> int:
        return self._credits

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def last_updated(self) -> datetime:
        return self._last_updated

    @property
    def active(self) -> bool:
        return self.status == SessionStatus.active

    @property
    def history(self) -> tuple[Roll, ...]:
        return tuple(self._history)

    def _touch(self) -> None:
        # Keep last_updated strictly increasing even when the clock doesn't move.
        now = _now()
        if now <= self._last_updated:
            now = self._last_updated + _ONE_TICK
        self._last_updated = now

    def _require_active(self) -> None:
        if not self.active:
            raise SessionInactive(self._id)

    def decrease_credits(self, amount: int) -> None:
        self._require_active()
        if amount <= 0:
            raise InvalidAmount(amount)
        if self._credits < amount:
            raise InsufficientFunds(credits=self._credits, required=amount)
        self._credits -= amount
        self._touch()

    def increase_credits(self, amount: int) -> None:
        self._require_active()
        if amount <= 0:
            raise InvalidAmount(amount)
        self._credits += amount
        self._touch()

    def add_roll(self, symbols: Sequence[Symbol], was_suppressed: bool = False) -> Roll:
        """Record a spin against the current (post-stake) balance and pay out wins."""

        self._require_active()
        roll = Roll(
            symbols=(symbols[0], symbols[1], symbols[2]),
            balance_before_outcome=self._credits,
            was_suppressed=was_suppressed,
        )
        if roll.is_win:
            self.increase_credits(roll.payout)
        self._history.append(roll)
        self._touch()
        return roll

    def cash_out(self) -> int:
        self._require_active()
        returned = self._credits
        self._credits = 0
        self.deactivate()
        return returned

    def deactivate(self) -> None:
        fsm = SessionFSM(self)
        fsm.close()
        fsm.sync_status_to_model()
        self._touch()

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "credits": self._credits,
            "created_at": self._created_at.isoformat(),
            "last_updated": self._last_updated.isoformat(),
            "active": self.active,
            "history": [r.to_record() for r in self._history],
        }

    def to_snapshot(self) -> SessionRecord:
        return SessionRecord.model_validate(self.to_record())

    @classmethod
    def from_record(cls, data: Any) -> "GameSession":
        """Rebuild a session from its stored record.

        Roll history is not reconstructed; the returned session starts with an
        empty history.
        """

        try:
            record = SessionRecord.model_validate(data)
        except ValidationError as e:
            raise InvalidData(f"Invalid session record: {e.error_count()} error(s)") from e
        return cls._from_validated(record)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "GameSession":
        try:
            record = SessionRecord.model_validate_json(raw)
        except ValidationError as e:
            raise InvalidData(f"Invalid session record: {e.error_count()} error(s)") from e
        return cls._from_validated(record)

    @classmethod
    def _from_validated(cls, record: SessionRecord) -> "GameSession":
        return cls(
            record.id,
            record.credits,
            created_at=_as_utc(record.created_at),
            last_updated=_as_utc(record.last_updated),
            active=record.active,
        )
