from __future__ import annotations

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

STATUSES: list[str] = [PENDING, APPROVED, REJECTED]

CONTENT_TYPES: list[str] = ["text", "image", "video"]


class WorkflowError(Exception):
    """Raised when a moderation transition is invalid."""


# Moderators may reverse a decision; nothing goes back to pending.
_TRANSITIONS: dict[str, list[str]] = {
    PENDING: [APPROVED, REJECTED],
    APPROVED: [REJECTED],
    REJECTED: [APPROVED],
}


def normalize_status(status: str) -> str:
    if not status:
        return status
    return status.strip().lower()


def allowed_transitions(from_status: str) -> list[str]:
    """
    Returns allowed next statuses from `from_status`.
    """
    s = normalize_status(from_status)

    if s not in _TRANSITIONS:
        # If DB ever returns a new status, don't crash hard; just return no transitions.
        return []
    return list(_TRANSITIONS[s])


def validate_transition(from_status: str, to_status: str) -> None:
    """
    Raises WorkflowError if the transition is not permitted.
    """
    s_from = normalize_status(from_status)
    s_to = normalize_status(to_status)

    if s_from not in STATUSES:
        raise WorkflowError(f"Unknown from_status: {from_status}")

    if s_to not in STATUSES:
        raise WorkflowError(f"Unknown to_status: {to_status}")

    allowed = allowed_transitions(s_from)
    if s_to not in allowed:
        raise WorkflowError(f"Transition not allowed: {s_from} -> {s_to}. Allowed: {allowed}")
