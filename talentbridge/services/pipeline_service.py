"""Service layer for employer hiring pipelines."""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel

from talentbridge.lifecycle import pipeline
from talentbridge.models.candidate import Candidate
from talentbridge.models.quote import QuoteRequest
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus
from talentbridge.models.session import Session
from talentbridge.repositories.candidate_repository import CandidateRepository
from talentbridge.repositories.quote_repository import QuoteRepository
from talentbridge.repositories.relation_repository import RelationRepository
from talentbridge.services.audit_service import AuditService
from talentbridge.services.authorization import (
    require_employer_owner,
    require_owner_or_staff,
    require_staff,
)
from talentbridge.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


class RelationUpdate(BaseModel):
    """Result of a direct status change.

    Attributes:
        relation: Relation after the move.
        quote: Open quote when the relation entered asked_quote.
        quote_created: Whether the move created that quote.
        quote_already_pending: Whether an open quote already existed.
    """
    relation: EmployerCandidateRelation
    quote: Optional[QuoteRequest] = None
    quote_created: bool = False
    quote_already_pending: bool = False


class RelationView(BaseModel):
    """A pipeline card: relation, its candidate, open quote and lock flags."""
    relation: EmployerCandidateRelation
    candidate: Optional[Candidate] = None
    open_quote: Optional[QuoteRequest] = None
    locked_by_quote: bool = False
    terminal_locked: bool = False


class PipelineService:
    """Service moving candidates through employer pipelines.

    Attributes:
        relation_repository: Repository for pipeline relations.
        quote_repository: Repository used to derive quote locks.
        candidate_repository: Repository for candidate profiles.
        quote_service: QuoteService creating quotes on entering asked_quote.
        audit_service: AuditService recording accepted moves.
    """

    def __init__(
        self,
        relation_repository: RelationRepository,
        quote_repository: QuoteRepository,
        candidate_repository: CandidateRepository,
        quote_service: QuoteService,
        audit_service: AuditService
    ):
        self.relation_repository = relation_repository
        self.quote_repository = quote_repository
        self.candidate_repository = candidate_repository
        self.quote_service = quote_service
        self.audit_service = audit_service

    def get_or_create_relation(
        self,
        session: Session,
        candidate_id: str,
        employer_id: str
    ) -> EmployerCandidateRelation:
        require_employer_owner(session, employer_id)
        return self.quote_service.get_or_create_relation(employer_id, candidate_id)

    def view_candidate(self, session: Session, employer_id: str, candidate_id: str) -> Candidate:
        """Fetch a candidate for an employer's view; callers must anonymise it."""
        require_employer_owner(session, employer_id)
        return self.candidate_repository.require_model(candidate_id)

    def update_relation_status(
        self,
        session: Session,
        candidate_id: str,
        employer_id: str,
        status: PipelineStatus
    ) -> RelationUpdate:
        """Move a candidate to a new stage of the employer's pipeline.

        Entering asked_quote makes sure an open quote exists for the relation.

        Args:
            session: Caller; must be the employer.
            candidate_id: Candidate being moved.
            employer_id: Employer owning the pipeline.
            status: Target stage.

        Returns:
            RelationUpdate with the stored relation and any quote side effect.

        Raises:
            LockedByQuoteError: If an open quote holds the relation at asked_quote.
            TerminalStageLockedError: If the relation is interviewed or hired.
            EmployerNotVerifiedError: If entering asked_quote while unverified.
        """
        require_employer_owner(session, employer_id)
        status = PipelineStatus(status)

        relation = self.quote_service.get_or_create_relation(employer_id, candidate_id)
        open_quote = self.quote_repository.get_open_for_relation(relation.id)

        moved = pipeline.move(relation, status, open_quote)

        if status == PipelineStatus.ASKED_QUOTE:
            self.quote_service.require_verified_employer(employer_id)

        if moved is not relation:
            previous = relation.status
            relation = self.relation_repository.save_fields(moved, ["status", "updated_at"])
            self.audit_service.record(
                session,
                "CANDIDATE_STATUS_UPDATED",
                f"Candidate {candidate_id} moved from {previous.value} to {status.value}"
            )

        update = RelationUpdate(relation=relation)

        if status == PipelineStatus.ASKED_QUOTE:
            quote, created = self.quote_service.ensure_open_quote(relation)
            update = update.model_copy(update={
                "quote": quote,
                "quote_created": created,
                "quote_already_pending": not created,
            })

        return update

    def list_relations(self, session: Session, employer_id: str) -> List[RelationView]:
        """List an employer's pipeline with derived lock flags."""
        require_owner_or_staff(session, employer_id)
        return self._build_views(self.relation_repository.list_for_employer(employer_id))

    def list_all_relations(self, session: Session) -> List[RelationView]:
        require_staff(session)
        return self._build_views(self.relation_repository.list_all())

    def _build_views(self, relations: List[EmployerCandidateRelation]) -> List[RelationView]:
        open_quotes = self.quote_repository.get_open_for_relations(relation.id for relation in relations)

        candidate_ids = list({relation.candidate_id for relation in relations})
        candidates: Dict[str, Candidate] = {}
        if candidate_ids:
            found = self.candidate_repository.find_models(in_filters={"id": candidate_ids})
            candidates = {candidate.id: candidate for candidate in found}

        views = []
        for relation in relations:
            open_quote = open_quotes.get(relation.id)
            views.append(RelationView(
                relation=relation,
                candidate=candidates.get(relation.candidate_id),
                open_quote=open_quote,
                locked_by_quote=pipeline.is_locked_by_quote(relation, open_quote),
                terminal_locked=pipeline.is_terminal_locked(relation)
            ))
        return views
