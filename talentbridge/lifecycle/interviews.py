"""Interview scheduling state machine.

    pending --confirm--> confirmed --complete--> completed
    pending|confirmed --cancel--> cancelled
"""

import secrets
import time
import uuid
from typing import Any, Dict, List, Optional

from talentbridge.constants import ROOM_ID_PREFIX
from talentbridge.errors import (
    CandidateNotVerifiedError,
    GuardViolationError,
    InvalidTransitionError,
    NotFoundError,
    StageNotSchedulableError,
)
from talentbridge.models.candidate import Candidate
from talentbridge.models.interview import Interview, InterviewStatus, ProposedTime
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus


SCHEDULABLE_STATUSES = (
    PipelineStatus.SHORTLISTED,
    PipelineStatus.ASKED_QUOTE,
    PipelineStatus.INTERVIEWED,
)

CANCELLABLE_STATUSES = (InterviewStatus.PENDING, InterviewStatus.CONFIRMED)


def generate_room_id() -> str:
    """Opaque video-room token: prefix, base-36 millis, 8 hex chars."""
    millis = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while millis:
        millis, remainder = divmod(millis, 36)
        encoded = digits[remainder] + encoded
    return f"{ROOM_ID_PREFIX}-{encoded or '0'}-{secrets.token_hex(4)}"


def check_can_schedule(relation: EmployerCandidateRelation, candidate: Candidate) -> None:
    """Raise unless an interview may be scheduled on this relation."""
    if not candidate.is_verified:
        raise CandidateNotVerifiedError(relation.candidate_id)

    if relation.status not in SCHEDULABLE_STATUSES:
        raise StageNotSchedulableError(PipelineStatus(relation.status).value)


def schedule(
    relation: EmployerCandidateRelation,
    candidate: Candidate,
    proposed_times: List[Dict[str, Any]],
    scheduled_by: str,
    title: Optional[str] = None,
    notes: Optional[str] = None
) -> Interview:
    """Create a pending interview with one or more proposed slots.

    Args:
        relation: Relation the interview belongs to.
        candidate: The relation's candidate.
        proposed_times: Dicts with ``datetime`` and ``duration`` (minutes).
        scheduled_by: User scheduling the interview.
        title: Optional title.
        notes: Optional notes.

    Raises:
        CandidateNotVerifiedError: If the candidate is not verified.
        StageNotSchedulableError: If the relation is before shortlisted or hired.
        GuardViolationError: If no time slot was proposed.
    """
    check_can_schedule(relation, candidate)

    if not proposed_times:
        raise GuardViolationError("At least one proposed time is required")

    slots = [
        ProposedTime(
            id=f"slot-{index}-{uuid.uuid4().hex[:8]}",
            datetime=slot["datetime"],
            duration=slot["duration"],
            proposed_by=scheduled_by,
        )
        for index, slot in enumerate(proposed_times)
    ]

    return Interview(
        relation_id=relation.id,
        employer_id=relation.employer_id,
        candidate_id=relation.candidate_id,
        title=title,
        status=InterviewStatus.PENDING,
        proposed_times=slots,
        notes=notes,
        scheduled_by=scheduled_by,
    )


def confirm(interview: Interview, slot_id: str, room_id: Optional[str] = None) -> Interview:
    """Accept one proposed slot and assign the video room."""
    if interview.status != InterviewStatus.PENDING:
        raise InvalidTransitionError("interview", InterviewStatus(interview.status).value, "confirm")

    chosen = next((slot for slot in interview.proposed_times if slot.id == slot_id), None)
    if chosen is None:
        raise NotFoundError("Proposed time", slot_id)

    slots = [
        slot.model_copy(update={"accepted": slot.id == slot_id})
        for slot in interview.proposed_times
    ]
    return interview.model_copy(update={
        "status": InterviewStatus.CONFIRMED,
        "proposed_times": slots,
        "confirmed_time": chosen.datetime,
        "room_id": room_id or generate_room_id(),
    })


def complete(interview: Interview) -> Interview:
    if interview.status != InterviewStatus.CONFIRMED:
        raise InvalidTransitionError("interview", InterviewStatus(interview.status).value, "complete")
    return interview.model_copy(update={"status": InterviewStatus.COMPLETED})


def cancel(interview: Interview) -> Interview:
    if interview.status not in CANCELLABLE_STATUSES:
        raise InvalidTransitionError("interview", InterviewStatus(interview.status).value, "cancel")
    return interview.model_copy(update={"status": InterviewStatus.CANCELLED})
