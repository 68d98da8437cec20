from __future__ import annotations

from pydantic import BaseModel

from slotmachine.domain.records import RollRecord, SessionRecord

__all__ = [
    "CashOutResponse",
    "CashOutResult",
    "CreateSessionResponse",
    "CreatedSession",
    "RollRecord",
    "RollResponse",
    "RollResult",
    "SessionRecord",
    "SessionStatusResponse",
    "SessionStatusResult",
]


class RollResult(BaseModel):
    symbols: list[str]
    is_win: bool
    credits: int
    message: str | None = None
    win_amount: int | None = None


class CreatedSession(BaseModel):
    id: str
    credits: int


class CashOutResult(BaseModel):
    credits: int
    message: str


class SessionStatusResult(BaseModel):
    session: SessionRecord
    message: str


class CreateSessionResponse(BaseModel):
    success: bool = True
    session: CreatedSession


class SessionStatusResponse(BaseModel):
    success: bool = True
    status: SessionRecord
    message: str


class CashOutResponse(BaseModel):
    success: bool = True
    credits: int
    message: str


class RollResponse(BaseModel):
    success: bool = True
    result: RollResult
