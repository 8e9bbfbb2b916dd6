"""Service layer for placement quotes and their payment."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Tuple

from pydantic import BaseModel

from talentbridge.errors import (
    DuplicatePendingQuoteError,
    EmployerNotVerifiedError,
    PaymentNotConfirmedError,
    PersistenceError,
)
from talentbridge.lifecycle import pipeline, quotes
from talentbridge.models.quote import QuoteDecision, QuoteOption, QuoteRequest, QuoteStatus
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus
from talentbridge.models.session import Session
from talentbridge.repositories.candidate_repository import CandidateRepository, EmployerRepository
from talentbridge.repositories.quote_repository import QuoteRepository
from talentbridge.repositories.relation_repository import RelationRepository
from talentbridge.services.audit_service import AuditService
from talentbridge.services.authorization import (
    require_employer_owner,
    require_owner_or_staff,
    require_staff,
)

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    """Captures payment for a selected quote option.

    ``quote.id`` is the idempotency key: capturing the same quote twice
    must not charge the employer twice.
    """

    def capture(self, quote: QuoteRequest, option: QuoteOption) -> bool:
        """Return True once the payment for ``option`` is confirmed."""
        ...


class SimulatedPaymentGateway:
    """Gateway that confirms every payment; no money moves.

    Attributes:
        captured: Quote ID -> amount captured for it.
    """

    def __init__(self):
        self.captured: Dict[str, Decimal] = {}

    def capture(self, quote: QuoteRequest, option: QuoteOption) -> bool:
        if quote.id in self.captured:
            logger.info(f"Payment for quote {quote.id} already captured")
            return True
        self.captured[quote.id] = option.total
        logger.info(f"Simulated payment of {quotes.format_amount(option.total)} for quote {quote.id}")
        return True


class PaymentResult(BaseModel):
    """Paid quote together with the relation it moved to hired."""
    quote: QuoteRequest
    relation: EmployerCandidateRelation


class QuoteService:
    """Service for the quote/payment workflow.

    Employers request quotes on candidates; staff approve them with a set
    of options (or reject them); the employer selects one option and pays,
    which hires the candidate. While a quote is open its relation stays
    locked at asked_quote.

    Attributes:
        quote_repository: Repository for quote requests.
        relation_repository: Repository for pipeline relations.
        candidate_repository: Repository for candidate profiles.
        employer_repository: Repository for employer accounts.
        audit_service: AuditService recording accepted actions.
        payment_gateway: Gateway confirming payments.
    """

    def __init__(
        self,
        quote_repository: QuoteRepository,
        relation_repository: RelationRepository,
        candidate_repository: CandidateRepository,
        employer_repository: EmployerRepository,
        audit_service: AuditService,
        payment_gateway: Optional[PaymentGateway] = None
    ):
        self.quote_repository = quote_repository
        self.relation_repository = relation_repository
        self.candidate_repository = candidate_repository
        self.employer_repository = employer_repository
        self.audit_service = audit_service
        self.payment_gateway = payment_gateway or SimulatedPaymentGateway()

    def get_or_create_relation(self, employer_id: str, candidate_id: str) -> EmployerCandidateRelation:
        """Fetch the employer/candidate relation, creating it at potential if missing.

        Raises:
            NotFoundError: If the candidate doesn't exist.
        """
        relation = self.relation_repository.get_by_pair(employer_id, candidate_id)
        if relation is not None:
            return relation

        self.candidate_repository.require_model(candidate_id)

        now = datetime.now(timezone.utc)
        relation = EmployerCandidateRelation(
            employer_id=employer_id,
            candidate_id=candidate_id,
            status=PipelineStatus.POTENTIAL,
            created_at=now,
            updated_at=now
        )
        created = self.relation_repository.insert_model(relation)
        logger.info(f"Created relation {created.id} between employer {employer_id} and candidate {candidate_id}")
        return created

    def require_verified_employer(self, employer_id: str) -> None:
        """Raise EmployerNotVerifiedError unless the employer account is verified."""
        employer = self.employer_repository.require_model(employer_id)
        if not employer.is_verified:
            raise EmployerNotVerifiedError(employer_id)

    def ensure_open_quote(self, relation: EmployerCandidateRelation) -> Tuple[QuoteRequest, bool]:
        """Return the relation's open quote, creating a pending one if none exists.

        Returns:
            Tuple of (quote, created).
        """
        existing = self.quote_repository.get_open_for_relation(relation.id)
        if existing is not None:
            return existing, False

        quote = QuoteRequest(
            relation_id=relation.id,
            employer_id=relation.employer_id,
            candidate_id=relation.candidate_id,
            status=QuoteStatus.PENDING,
            requested_at=datetime.now(timezone.utc)
        )
        created = self.quote_repository.insert_model(quote)
        logger.info(f"Created quote request {created.id} for relation {relation.id}")
        return created, True

    def request_quote(self, session: Session, candidate_id: str, employer_id: str) -> QuoteRequest:
        """Ask for a placement quote on a candidate.

        Creates the relation if the employer never engaged the candidate, and
        advances a potential or shortlisted relation to asked_quote.

        Args:
            session: Caller; must be the employer.
            candidate_id: Candidate to quote.
            employer_id: Requesting employer.

        Returns:
            The new pending QuoteRequest.

        Raises:
            EmployerNotVerifiedError: If the employer is not verified.
            DuplicatePendingQuoteError: If the relation already has an open quote.
        """
        require_employer_owner(session, employer_id)
        self.require_verified_employer(employer_id)

        relation = self.get_or_create_relation(employer_id, candidate_id)

        existing = self.quote_repository.get_open_for_relation(relation.id)
        if existing is not None:
            raise DuplicatePendingQuoteError(existing.id)

        advanced = pipeline.advance_to_at_least(relation, PipelineStatus.ASKED_QUOTE)
        if advanced is not relation:
            self.relation_repository.save_fields(advanced, ["status", "updated_at"])

        quote, _ = self.ensure_open_quote(advanced)

        self.audit_service.record(
            session, "QUOTE_REQUESTED", f"Quote requested for candidate {candidate_id}"
        )
        return quote

    def get_quote(self, session: Session, request_id: str) -> QuoteRequest:
        quote = self.quote_repository.require_model(request_id)
        require_owner_or_staff(session, quote.employer_id)
        return quote

    def resolve_quote(
        self,
        session: Session,
        request_id: str,
        decision: QuoteDecision,
        options: Optional[List[Dict[str, Any]]] = None,
        cost_estimate: Optional[str] = None
    ) -> QuoteRequest:
        """Approve or reject a pending quote (staff only).

        Args:
            session: Caller; must be staff.
            request_id: Quote request to resolve.
            decision: ``approved`` or ``rejected``.
            options: Options to attach on approval; the default packages
                are used when omitted.
            cost_estimate: Optional estimate label shown to the employer.

        Returns:
            The resolved QuoteRequest.

        Raises:
            InvalidTransitionError: If the quote is not pending.
        """
        require_staff(session)
        decision = QuoteDecision(decision)

        quote = self.quote_repository.require_model(request_id)

        if decision == QuoteDecision.APPROVED:
            built = quotes.build_options(options) if options else None
            resolved = quotes.approve(quote, built, cost_estimate)
        else:
            resolved = quotes.reject(quote)

        saved = self.quote_repository.save_fields(
            resolved, ["status", "options", "cost_estimate", "resolved_at"]
        )

        self.audit_service.record(
            session, "QUOTE_RESOLVED", f"Quote {request_id} {decision.value}"
        )
        return saved

    def select_option(self, session: Session, request_id: str, option_id: str) -> QuoteRequest:
        """Select one option of an approved quote (owning employer only)."""
        quote = self.quote_repository.require_model(request_id)
        require_employer_owner(session, quote.employer_id)

        selected = quotes.select_option(quote, option_id)
        saved = self.quote_repository.save_fields(selected, ["options", "selected_option_id"])

        self.audit_service.record(
            session,
            "QUOTE_OPTION_SELECTED",
            f"Option {selected.selected_option.name} selected for quote {request_id}"
        )
        return saved

    def pay_quote(self, session: Session, request_id: str) -> PaymentResult:
        """Pay an approved quote and hire the candidate.

        The relation moves to hired whatever its previous status. Calling
        this again on a quote that is already paid skips the payment and
        finishes moving the relation to hired.

        Raises:
            InvalidTransitionError: If the quote is neither approved nor paid.
            NoOptionSelectedError: If no option was selected.
            PaymentNotConfirmedError: If the gateway declined the payment.
            PersistenceError: If the quote or relation could not be stored;
                the call can be retried.
        """
        quote = self.quote_repository.require_model(request_id)
        require_employer_owner(session, quote.employer_id)

        relation = self.relation_repository.require_model(quote.relation_id)

        if quote.status == QuoteStatus.PAID:
            logger.info(f"Quote {request_id} already paid, completing hire of candidate {quote.candidate_id}")
            saved_quote = quote
        else:
            paid = quotes.pay(quote)

            if not self.payment_gateway.capture(quote, quote.selected_option):
                raise PaymentNotConfirmedError(request_id)

            try:
                saved_quote = self.quote_repository.save_fields(paid, ["status", "paid_at"])
            except PersistenceError:
                logger.error(f"Payment captured for quote {request_id} but the quote was not saved")
                raise

        hired = pipeline.force_status(relation, PipelineStatus.HIRED)
        if hired is not relation:
            relation = self.relation_repository.save_fields(hired, ["status", "updated_at"])

        self.audit_service.record(
            session,
            "QUOTE_PAID",
            f"Quote {request_id} paid ({quotes.format_amount(quote.selected_option.total)}), "
            f"candidate {quote.candidate_id} hired"
        )
        return PaymentResult(quote=saved_quote, relation=relation)

    def list_for_employer(self, session: Session, employer_id: str) -> List[QuoteRequest]:
        require_owner_or_staff(session, employer_id)
        return self.quote_repository.list_for_employer(employer_id)

    def list_all(self, session: Session) -> List[QuoteRequest]:
        require_staff(session)
        return self.quote_repository.list_all()
