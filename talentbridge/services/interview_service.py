"""Service layer for interview scheduling and resolution."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from talentbridge.errors import GuardViolationError
from talentbridge.lifecycle import interviews, pipeline
from talentbridge.models.interview import Interview, InterviewAction
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus
from talentbridge.models.session import Session
from talentbridge.repositories.candidate_repository import CandidateRepository
from talentbridge.repositories.interview_repository import InterviewRepository
from talentbridge.repositories.relation_repository import RelationRepository
from talentbridge.services.audit_service import AuditService
from talentbridge.services.authorization import require_owner_or_staff, require_staff

logger = logging.getLogger(__name__)


class InterviewResolution(BaseModel):
    """Resolved interview and, on completion, the updated relation."""
    interview: Interview
    relation: Optional[EmployerCandidateRelation] = None


class InterviewService:
    """Service for managing interviews between employers and candidates.

    Handles scheduling with proposed slots, confirmation of one slot,
    completion (which moves the relation to interviewed) and cancellation.

    Attributes:
        interview_repository: Repository for interview data access.
        relation_repository: Repository for pipeline relations.
        candidate_repository: Repository for candidate profiles.
        audit_service: AuditService recording interview events.
    """

    def __init__(
        self,
        interview_repository: InterviewRepository,
        relation_repository: RelationRepository,
        candidate_repository: CandidateRepository,
        audit_service: AuditService
    ):
        """Initialize the service with its repositories.

        Args:
            interview_repository: InterviewRepository instance.
            relation_repository: RelationRepository instance.
            candidate_repository: CandidateRepository instance.
            audit_service: AuditService instance.
        """
        self.interview_repository = interview_repository
        self.relation_repository = relation_repository
        self.candidate_repository = candidate_repository
        self.audit_service = audit_service

    def schedule_interview(
        self,
        session: Session,
        relation_id: str,
        proposed_times: List[Dict[str, Any]],
        title: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Interview:
        """Propose one or more interview slots for a relation.

        Args:
            session: Caller; the relation's employer or staff.
            relation_id: Relation the interview belongs to.
            proposed_times: Dicts with ``datetime`` and ``duration`` (minutes).
            title: Optional interview title.
            notes: Optional notes for the candidate.

        Returns:
            The stored Interview in pending status.

        Raises:
            CandidateNotVerifiedError: If the candidate is not verified.
            StageNotSchedulableError: If the relation is not shortlisted,
                asked_quote or interviewed.
            GuardViolationError: If no slot was proposed.
        """
        relation = self.relation_repository.require_model(relation_id)
        require_owner_or_staff(session, relation.employer_id)

        candidate = self.candidate_repository.require_model(relation.candidate_id)

        interview = interviews.schedule(
            relation,
            candidate,
            proposed_times,
            scheduled_by=session.user_id,
            title=title,
            notes=notes
        )
        interview = interview.model_copy(update={"created_at": datetime.now(timezone.utc)})
        stored = self.interview_repository.insert_model(interview)

        self.audit_service.record(
            session,
            "INTERVIEW_SCHEDULED",
            f"Interview {stored.id} proposed with {len(stored.proposed_times)} slot(s) "
            f"for candidate {relation.candidate_id}"
        )
        return stored

    def resolve_interview(
        self,
        session: Session,
        interview_id: str,
        action: InterviewAction,
        slot_id: Optional[str] = None
    ) -> InterviewResolution:
        """Confirm, complete or cancel an interview.

        Confirming without a ``slot_id`` accepts the only proposed slot.
        Completing moves the relation to interviewed if it was before that stage.

        Args:
            session: Caller; a participant or staff.
            interview_id: Interview to resolve.
            action: ``confirm``, ``complete`` or ``cancel``.
            slot_id: Slot to accept when confirming.

        Returns:
            InterviewResolution; ``relation`` is set only on completion.

        Raises:
            InvalidTransitionError: If the action is not valid in the current status.
            GuardViolationError: If confirming several slots without choosing one.
        """
        action = InterviewAction(action)

        interview = self.interview_repository.require_model(interview_id)
        require_owner_or_staff(session, interview.employer_id, interview.candidate_id)

        relation = None

        if action == InterviewAction.CONFIRM:
            if slot_id is None:
                if len(interview.proposed_times) != 1:
                    raise GuardViolationError("Choose one of the proposed times to confirm")
                slot_id = interview.proposed_times[0].id
            resolved = interviews.confirm(interview, slot_id)
            fields = ["status", "proposed_times", "confirmed_time", "room_id"]
        elif action == InterviewAction.COMPLETE:
            resolved = interviews.complete(interview)
            fields = ["status"]
        else:
            resolved = interviews.cancel(interview)
            fields = ["status"]

        saved = self.interview_repository.save_fields(resolved, fields)

        if action == InterviewAction.COMPLETE:
            relation = self.relation_repository.require_model(interview.relation_id)
            advanced = pipeline.advance_to_at_least(relation, PipelineStatus.INTERVIEWED)
            if advanced is not relation:
                relation = self.relation_repository.save_fields(advanced, ["status", "updated_at"])
                logger.info(f"Relation {relation.id} moved to interviewed after interview {interview_id}")

        self.audit_service.record(
            session, f"INTERVIEW_{saved.status.value.upper()}", f"Interview {interview_id}: {action.value}"
        )
        return InterviewResolution(interview=saved, relation=relation)

    def get_interview(self, session: Session, interview_id: str) -> Interview:
        interview = self.interview_repository.require_model(interview_id)
        require_owner_or_staff(session, interview.employer_id, interview.candidate_id)
        return interview

    def list_my_interviews(self, session: Session) -> List[Interview]:
        """Interviews where the caller is the employer or the candidate."""
        return self.interview_repository.list_for_participant(session.user_id)

    def list_all(self, session: Session) -> List[Interview]:
        require_staff(session)
        return self.interview_repository.list_all()
