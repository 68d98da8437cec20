from __future__ import annotations

import logging

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status

from slotmachine.api.deps import get_lifecycle, get_roll_slots, get_settings
from slotmachine.api.models import (
    CashOutResponse,
    CreateSessionResponse,
    RollResponse,
    SessionStatusResponse,
)
from slotmachine.config import Settings
from slotmachine.errors import (
    InsufficientFunds,
    SessionBusy,
    SessionInactive,
    SessionNotFound,
    SlotMachineError,
)
from slotmachine.lifecycle import SessionLifecycle
from slotmachine.roll_slots import RollSlots

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_COOKIE = "slot-machine-session"
SESSION_COOKIE_MAX_AGE = 60 * 60 * 24

_STATUS_FOR_ERROR: dict[type[SlotMachineError], int] = {
    SessionNotFound: status.HTTP_404_NOT_FOUND,
    SessionInactive: status.HTTP_409_CONFLICT,
    InsufficientFunds: status.HTTP_400_BAD_REQUEST,
    SessionBusy: status.HTTP_423_LOCKED,
}


def _http_error(e: SlotMachineError) -> HTTPException:
    code = _STATUS_FOR_ERROR.get(type(e), status.HTTP_422_UNPROCESSABLE_ENTITY)
    return HTTPException(status_code=code, detail=str(e))


def _require_session_id(session_id: str | None) -> str:
    if not session_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No session")
    return session_id


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


# Handlers that take a session lock are plain `def`: lock waits block, so they
# run in the threadpool instead of on the event loop.
@router.post("/session", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
def create_session_route(
    response: Response,
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
    settings: Settings = Depends(get_settings),
) -> CreateSessionResponse:
    created = lifecycle.create()
    response.set_cookie(
        SESSION_COOKIE,
        created.id,
        max_age=SESSION_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )
    return CreateSessionResponse(session=created)


@router.get("/session/status", response_model=SessionStatusResponse)
def session_status_route(
    session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
) -> SessionStatusResponse:
    sid = _require_session_id(session_id)
    try:
        result = lifecycle.get_status(sid)
    except SlotMachineError as e:
        raise _http_error(e) from e
    return SessionStatusResponse(status=result.session, message=result.message)


@router.post("/session/cashout", response_model=CashOutResponse)
def cash_out_route(
    session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
) -> CashOutResponse:
    sid = _require_session_id(session_id)
    try:
        result = lifecycle.cash_out(sid)
    except SlotMachineError as e:
        raise _http_error(e) from e
    return CashOutResponse(credits=result.credits, message=result.message)


@router.post("/game/roll", response_model=RollResponse, response_model_exclude_none=True)
def roll_route(
    session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE),
    roll_slots: RollSlots = Depends(get_roll_slots),
) -> RollResponse:
    sid = _require_session_id(session_id)
    try:
        result = roll_slots.execute(sid)
    except SlotMachineError as e:
        logger.info("roll rejected for session %s: %s", sid, e)
        raise _http_error(e) from e
    return RollResponse(result=result)
