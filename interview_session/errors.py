from __future__ import annotations  # Errors raised inside the interview engine


class InterviewError(RuntimeError):  # Base for engine-level failures
    pass


class SetupError(InterviewError):  # Start or resume rejected; carries the notice key shown to the client
    def __init__(self, notice_key: str) -> None:
        super().__init__(notice_key)
        self.notice_key = notice_key


class InvalidTransition(InterviewError):  # Phase change not allowed from the current phase
    def __init__(self, current: object, target: object) -> None:
        super().__init__(f"cannot move from {current} to {target}")
        self.current = current
        self.target = target


__all__ = ["InterviewError", "InvalidTransition", "SetupError"]
