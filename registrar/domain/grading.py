"""
Grade Lifecycle State Machine

Pending → Submitted → Final, expressed as a tagged enumeration and a single
transition table. Out-of-order operations are reported as unapplied outcomes
and leave the state unchanged; there are no backward transitions.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GradeState(str, Enum):
    """Lifecycle state of a grade record."""

    PENDING = "Pending"
    SUBMITTED = "Submitted"
    FINAL = "Final"


class GradeOperation(str, Enum):
    """Operations a caller can attempt on a grade."""

    SUBMIT = "submit"
    APPROVE = "approve"


class TransitionOutcome(BaseModel):
    """Result of attempting a lifecycle operation."""

    model_config = ConfigDict(frozen=True)

    operation: GradeOperation = Field(...)
    from_state: GradeState = Field(...)
    to_state: GradeState = Field(..., description="State after the attempt")
    applied: bool = Field(..., description="Whether the state changed")
    message: str = Field(..., description="Human-readable report of the attempt")


# (current, operation) -> (successor or None for a no-op, message)
_TRANSITIONS: dict[tuple[GradeState, GradeOperation], tuple[GradeState | None, str]] = {
    (GradeState.PENDING, GradeOperation.SUBMIT): (
        GradeState.SUBMITTED,
        "Submitting grade -> moving to Submitted",
    ),
    (GradeState.PENDING, GradeOperation.APPROVE): (
        None,
        "Cannot approve: grade still pending",
    ),
    (GradeState.SUBMITTED, GradeOperation.SUBMIT): (
        None,
        "Already submitted",
    ),
    (GradeState.SUBMITTED, GradeOperation.APPROVE): (
        GradeState.FINAL,
        "Approving grade -> moving to Final",
    ),
    (GradeState.FINAL, GradeOperation.SUBMIT): (
        None,
        "Cannot submit: grade is final",
    ),
    (GradeState.FINAL, GradeOperation.APPROVE): (
        None,
        "Already final",
    ),
}


def next_state(
    current: GradeState, operation: GradeOperation
) -> tuple[GradeState, TransitionOutcome]:
    """
    Compute the successor state for an operation.

    Args:
        current: Current lifecycle state
        operation: Attempted operation

    Returns:
        Tuple of (state after the attempt, outcome). For a no-op the returned
        state equals ``current``.
    """
    successor, message = _TRANSITIONS[(current, operation)]
    new_state = successor if successor is not None else current
    outcome = TransitionOutcome(
        operation=operation,
        from_state=current,
        to_state=new_state,
        applied=successor is not None,
        message=message,
    )
    return new_state, outcome


def is_terminal(state: GradeState) -> bool:
    """A state is terminal when no operation moves it anywhere."""
    return all(
        _TRANSITIONS[(state, operation)][0] is None for operation in GradeOperation
    )
