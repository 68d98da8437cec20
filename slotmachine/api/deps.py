from __future__ import annotations

from fastapi import Depends, Request

from slotmachine.config import Settings
from slotmachine.lifecycle import SessionLifecycle
from slotmachine.random_draw import RandomSource
from slotmachine.roll_slots import RollSlots
from slotmachine.session_store import SessionStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_random_source(request: Request) -> RandomSource:
    return request.app.state.random_source


def get_lifecycle(store: SessionStore = Depends(get_store)) -> SessionLifecycle:
    return SessionLifecycle(store)


def get_roll_slots(
    store: SessionStore = Depends(get_store),
    rng: RandomSource = Depends(get_random_source),
    settings: Settings = Depends(get_settings),
) -> RollSlots:
    return RollSlots(store, rng, max_redraws=settings.max_redraws)
