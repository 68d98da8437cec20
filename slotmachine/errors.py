from __future__ import annotations


class SlotMachineError(ValueError):
    """Base class for session/roll failures surfaced to the boundary layer."""


class SessionNotFound(SlotMachineError):
    def __init__(self, session_id: str) -> None:
        super().__init__("Session not found")
        self.session_id = session_id


class SessionInactive(SlotMachineError):
    def __init__(self, session_id: str) -> None:
        super().__init__("Session is not active")
        self.session_id = session_id


class InsufficientFunds(SlotMachineError):
    def __init__(self, *, credits: int, required: int) -> None:
        super().__init__(f"Insufficient credits: have {credits}, need {required}")
        self.credits = credits
        self.required = required


class InvalidAmount(SlotMachineError):
    def __init__(self, amount: int) -> None:
        super().__init__(f"Credit amount must be positive, got {amount}")
        self.amount = amount


class InvalidData(SlotMachineError):
    """Raised when a persisted session record can't be turned back into a session."""


class SessionBusy(SlotMachineError):
    def __init__(self, session_id: str) -> None:
        super().__init__("Session is busy")
        self.session_id = session_id
