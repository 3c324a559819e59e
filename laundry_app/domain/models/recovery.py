"""Credential recovery states. Transitions are validated."""

from enum import Enum
from typing import Dict, FrozenSet

from laundry_app.domain.exceptions import InvalidStatusTransitionError


class RecoveryState(str, Enum):
    AWAITING_EMAIL = "awaiting_email"
    AWAITING_ANSWER = "awaiting_answer"
    COMPLETED = "completed"  # terminal


# Failed attempts do not transition; they stay in the current state.
_STATE_TRANSITIONS: Dict[RecoveryState, FrozenSet[RecoveryState]] = {
    RecoveryState.AWAITING_EMAIL: frozenset({RecoveryState.AWAITING_ANSWER}),
    RecoveryState.AWAITING_ANSWER: frozenset({RecoveryState.COMPLETED, RecoveryState.AWAITING_EMAIL}),
    RecoveryState.COMPLETED: frozenset(),
}


def validate_transition(current: RecoveryState, new: RecoveryState) -> None:
    """Raises InvalidStatusTransitionError if current -> new is not allowed."""
    allowed = _STATE_TRANSITIONS.get(current, frozenset())
    if new not in allowed:
        raise InvalidStatusTransitionError(
            f"Invalid recovery transition from {current.value} to {new.value}"
        )
