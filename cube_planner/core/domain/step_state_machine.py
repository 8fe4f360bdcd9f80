"""
Step lifecycle state machine definitions.

This module defines the canonical step states and the allowed transitions
between them. The compiler only ever emits PENDING steps; execution engines
advance them and may use these helpers to validate what they observe.
"""

from __future__ import annotations

STEP_INITIAL_STATE = "PENDING"

# Terminal step states: once reached, the step is considered complete.
STEP_TERMINAL_STATES: frozenset[str] = frozenset(
    {
        "FINISHED",
        "DISCARDED",
    }
)


# Allowed step state transitions.
#
# Key   : previous state
# Value : set of allowed next states
#
# Notes:
# - ERROR is not terminal: ERROR -> PENDING is an engine-driven retry.
# - RUNNING -> RUNNING is allowed so that async progress polls are no-ops.
STEP_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "PENDING": frozenset(
        {
            "RUNNING",
            "DISCARDED",
        }
    ),

    "RUNNING": frozenset(
        {
            "RUNNING",
            "FINISHED",
            "ERROR",
            "DISCARDED",
        }
    ),

    "ERROR": frozenset(
        {
            "PENDING",
            "DISCARDED",
        }
    ),
}


def is_terminal_state(state: str) -> bool:
    """Return True if the given state is terminal."""
    return state in STEP_TERMINAL_STATES


def is_valid_transition(prev_state: str, next_state: str) -> bool:
    """Return True if the transition prev_state -> next_state is allowed."""
    allowed = STEP_ALLOWED_TRANSITIONS.get(prev_state)
    if allowed is None:
        return False
    return next_state in allowed
