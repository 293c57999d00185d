"""FSM state definitions for a single intake invocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class IntakeState(Enum):
    """States an invocation moves through, strictly forward."""

    # Initial state
    RECEIVED = auto()

    # Decision phase
    DECODED = auto()
    MATCHED = auto()
    GUARDED = auto()
    TRANSITIONED = auto()

    # Side-effect phase
    RENAMED = auto()
    QUARANTINING = auto()

    # Terminal states
    SKIPPED_NO_MATCH = auto()
    SKIPPED_ALREADY_PROCESSED = auto()
    NOTIFIED = auto()
    RENAME_FAILED = auto()
    QUARANTINED = auto()

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return not TRANSITIONS.get(self)


# Valid state transitions
TRANSITIONS: dict[IntakeState, set[IntakeState]] = {
    IntakeState.RECEIVED: {IntakeState.DECODED},
    IntakeState.DECODED: {
        IntakeState.MATCHED,
        IntakeState.SKIPPED_NO_MATCH,
        IntakeState.RENAME_FAILED,
    },
    IntakeState.MATCHED: {IntakeState.GUARDED, IntakeState.SKIPPED_ALREADY_PROCESSED},
    IntakeState.GUARDED: {IntakeState.TRANSITIONED, IntakeState.RENAME_FAILED},
    IntakeState.TRANSITIONED: {IntakeState.RENAMED, IntakeState.RENAME_FAILED},
    IntakeState.RENAMED: {IntakeState.NOTIFIED, IntakeState.QUARANTINING},
    IntakeState.QUARANTINING: {IntakeState.QUARANTINED},
    # Terminal states have no transitions
    IntakeState.SKIPPED_NO_MATCH: set(),
    IntakeState.SKIPPED_ALREADY_PROCESSED: set(),
    IntakeState.NOTIFIED: set(),
    IntakeState.RENAME_FAILED: set(),
    IntakeState.QUARANTINED: set(),
}


class TransitionError(Exception):
    """Invalid state transition."""

    def __init__(self, from_state: IntakeState, to_state: IntakeState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid transition: {from_state.name} -> {to_state.name}"
        )


@dataclass
class InvocationState:
    """State of one engine invocation, with the path it took."""

    state: IntakeState = IntakeState.RECEIVED
    history: list[str] = field(default_factory=list)

    def can_transition_to(self, new_state: IntakeState) -> bool:
        """Check if transition to new_state is valid."""
        return new_state in TRANSITIONS.get(self.state, set())

    def transition_to(self, new_state: IntakeState) -> None:
        """
        Transition to a new state.

        Raises:
            TransitionError: If transition is invalid
        """
        if not self.can_transition_to(new_state):
            raise TransitionError(self.state, new_state)

        self.history.append(self.state.name)
        self.state = new_state

    @property
    def path(self) -> list[str]:
        """All states visited so far, including the current one."""
        return [*self.history, self.state.name]
