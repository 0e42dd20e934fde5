"""
Checkout session state tracking.

Each adapter call walks idle -> (token_acquired) -> requested and ends in
succeeded or failed. Every transition is logged once; terminal states are
final.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from paygate.core.logging import get_logger

logger = get_logger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    TOKEN_ACQUIRED = "token_acquired"
    REQUESTED = "requested"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[SessionState, tuple[SessionState, ...]] = {
    SessionState.IDLE: (SessionState.TOKEN_ACQUIRED, SessionState.REQUESTED, SessionState.FAILED),
    SessionState.TOKEN_ACQUIRED: (SessionState.REQUESTED, SessionState.FAILED),
    SessionState.REQUESTED: (SessionState.SUCCEEDED, SessionState.FAILED),
    SessionState.SUCCEEDED: (),
    SessionState.FAILED: (),
}

TERMINAL_STATES = frozenset({SessionState.SUCCEEDED, SessionState.FAILED})


def _can_transition(current: SessionState, target: SessionState) -> bool:
    allowed: Iterable[SessionState] | None = ALLOWED_TRANSITIONS.get(current)
    return allowed is not None and target in allowed


class SessionAttempt:
    """Tracks one ``create_session`` call through its states; never re-entered."""

    def __init__(self, provider: str, reference: str):
        self.provider = provider
        self.reference = reference
        self.state = SessionState.IDLE
        self._log = logger.bind(provider=provider, reference=reference)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: SessionState, **details: Any) -> None:
        if not _can_transition(self.state, target):
            raise RuntimeError(f"session transition {self.state.value} -> {target.value} not permitted")
        self.state = target
        if target is SessionState.FAILED:
            self._log.warning("checkout.session_state", state=target.value, **details)
        else:
            self._log.info("checkout.session_state", state=target.value, **details)

    def fail(self, **details: Any) -> None:
        """Mark the attempt failed unless it already reached a terminal state."""
        if not self.finished:
            self.advance(SessionState.FAILED, **details)
