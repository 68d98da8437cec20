from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr, field_validator


class RollRecord(BaseModel):
    id: str
    symbols: list[str]
    is_win: bool
    win_amount: int
    # Balance after the stake debit, before payout.
    credits: int
    timestamp: datetime
    was_suppressed: bool = False


class SessionRecord(BaseModel):
    """Plain record stored for a session, also the status snapshot shape."""

    id: StrictStr
    credits: StrictInt = Field(..., ge=0)
    created_at: datetime
    last_updated: datetime
    active: StrictBool

    # Written on save; not turned back into Roll objects on load.
    history: list[RollRecord] = Field(default_factory=list)

    @field_validator("created_at", "last_updated", mode="before")
    @classmethod
    def _timestamps_are_iso_strings(cls, v: Any) -> Any:
        if isinstance(v, (str, datetime)):
            return v
        raise ValueError("timestamp must be an ISO-8601 string")

