"""Pipeline state machine for employer/candidate relations.

Stages run potential -> shortlisted -> asked_quote -> interviewed -> hired.
Direct moves are only refused by two guards: an open quote locks the
relation at asked_quote, and interviewed/hired never move by direct edit.
Beyond that, any target is accepted; forward-only ordering is not enforced.
"""

from datetime import datetime, timezone
from typing import Optional

from talentbridge.errors import LockedByQuoteError, TerminalStageLockedError
from talentbridge.lifecycle.quotes import is_open
from talentbridge.models.quote import QuoteRequest
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus


PIPELINE_ORDER = [
    PipelineStatus.POTENTIAL,
    PipelineStatus.SHORTLISTED,
    PipelineStatus.ASKED_QUOTE,
    PipelineStatus.INTERVIEWED,
    PipelineStatus.HIRED,
]

TERMINAL_LOCKED_STATUSES = (PipelineStatus.INTERVIEWED, PipelineStatus.HIRED)


def stage_index(status: PipelineStatus) -> int:
    return PIPELINE_ORDER.index(PipelineStatus(status))


def is_locked_by_quote(
    relation: EmployerCandidateRelation,
    open_quote: Optional[QuoteRequest]
) -> bool:
    """True when an unresolved quote pins the relation at asked_quote."""
    return (
        relation.status == PipelineStatus.ASKED_QUOTE
        and open_quote is not None
        and is_open(open_quote)
    )


def is_terminal_locked(relation: EmployerCandidateRelation) -> bool:
    return relation.status in TERMINAL_LOCKED_STATUSES


def lock_reason(
    relation: EmployerCandidateRelation,
    open_quote: Optional[QuoteRequest] = None
) -> Optional[str]:
    """Name of the lock blocking direct moves, or None if the card is free."""
    if is_locked_by_quote(relation, open_quote):
        return "quote"
    if is_terminal_locked(relation):
        return "terminal"
    return None


def _with_status(relation: EmployerCandidateRelation, status: PipelineStatus) -> EmployerCandidateRelation:
    return relation.model_copy(
        update={"status": PipelineStatus(status), "updated_at": datetime.now(timezone.utc)}
    )


def move(
    relation: EmployerCandidateRelation,
    new_status: PipelineStatus,
    open_quote: Optional[QuoteRequest] = None
) -> EmployerCandidateRelation:
    """Apply a direct (user-driven) status change.

    Args:
        relation: Relation to move.
        new_status: Requested status.
        open_quote: The relation's open quote request, if any.

    Returns:
        A copy of the relation with the new status.

    Raises:
        LockedByQuoteError: If an open quote holds the relation at asked_quote.
        TerminalStageLockedError: If the relation is interviewed or hired.
    """
    new_status = PipelineStatus(new_status)

    if is_locked_by_quote(relation, open_quote):
        raise LockedByQuoteError(relation.candidate_id, open_quote.id)

    if is_terminal_locked(relation):
        raise TerminalStageLockedError(relation.candidate_id, relation.status.value)

    if relation.status == new_status:
        return relation

    return _with_status(relation, new_status)


def force_status(
    relation: EmployerCandidateRelation,
    status: PipelineStatus
) -> EmployerCandidateRelation:
    """Set a status on behalf of the system, bypassing the direct-move guards.

    Used by payment (-> hired). Never call this for user-driven moves.
    """
    if relation.status == PipelineStatus(status):
        return relation
    return _with_status(relation, status)


def advance_to_at_least(
    relation: EmployerCandidateRelation,
    status: PipelineStatus
) -> EmployerCandidateRelation:
    """Move forward to ``status`` unless the relation is already at or past it."""
    if stage_index(relation.status) >= stage_index(status):
        return relation
    return _with_status(relation, status)
