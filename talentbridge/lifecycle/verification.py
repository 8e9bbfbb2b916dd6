"""Verification state machine for candidate and employer profiles.

    unverified --submit--> pending --approve--> verified
                              |  \\--reject--> rejected --edit--> unverified
                              \\--withdraw--> unverified
    rejected --submit--> pending   (resubmission, same guard as from unverified)
    verified --revoke--> unverified (admin only)

Guards that need outside data (the completeness checklist, roles) are
checked by the caller before ``transition`` is invoked; this module only
knows which moves exist.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from talentbridge.errors import InvalidTransitionError, MissingReasonError
from talentbridge.models.candidate import VerificationStatus


class VerificationEvent(str, Enum):
    """Events that drive the verification machine."""
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    WITHDRAW = "withdraw"
    EDIT = "edit"
    REVOKE = "revoke"


TRANSITIONS: Dict[Tuple[VerificationStatus, VerificationEvent], VerificationStatus] = {
    (VerificationStatus.UNVERIFIED, VerificationEvent.SUBMIT): VerificationStatus.PENDING,
    (VerificationStatus.REJECTED, VerificationEvent.SUBMIT): VerificationStatus.PENDING,
    (VerificationStatus.PENDING, VerificationEvent.APPROVE): VerificationStatus.VERIFIED,
    (VerificationStatus.PENDING, VerificationEvent.REJECT): VerificationStatus.REJECTED,
    (VerificationStatus.PENDING, VerificationEvent.WITHDRAW): VerificationStatus.UNVERIFIED,
    (VerificationStatus.REJECTED, VerificationEvent.EDIT): VerificationStatus.UNVERIFIED,
    (VerificationStatus.VERIFIED, VerificationEvent.REVOKE): VerificationStatus.UNVERIFIED,
}

# Staff decisions map onto events
DECISION_EVENTS = {
    VerificationStatus.VERIFIED: VerificationEvent.APPROVE,
    VerificationStatus.REJECTED: VerificationEvent.REJECT,
}


def can_transition(current: VerificationStatus, event: VerificationEvent) -> bool:
    return (VerificationStatus(current), VerificationEvent(event)) in TRANSITIONS


def transition(
    current: VerificationStatus,
    event: VerificationEvent,
    reason: Optional[str] = None
) -> VerificationStatus:
    """Apply an event to a verification status.

    Args:
        current: Current status.
        event: Event to apply.
        reason: Rejection reason; required for REJECT.

    Returns:
        The new status.

    Raises:
        InvalidTransitionError: If the event is not allowed from ``current``.
        MissingReasonError: If rejecting without a non-blank reason.
    """
    current = VerificationStatus(current)
    event = VerificationEvent(event)

    target = TRANSITIONS.get((current, event))
    if target is None:
        raise InvalidTransitionError("verification", current.value, event.value)

    if event == VerificationEvent.REJECT and not (reason and reason.strip()):
        raise MissingReasonError()

    return target


def status_after_edit(current: VerificationStatus) -> VerificationStatus:
    """Status after the owner edits their profile.

    A rejected profile silently resets to unverified so it can be
    resubmitted; every other status is left alone.
    """
    if can_transition(current, VerificationEvent.EDIT):
        return transition(current, VerificationEvent.EDIT)
    return VerificationStatus(current)
