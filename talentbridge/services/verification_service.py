"""Service layer for candidate and employer verification."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from talentbridge.errors import GuardViolationError, IncompleteProfileError
from talentbridge.lifecycle import checklist
from talentbridge.lifecycle.verification import (
    DECISION_EVENTS,
    VerificationEvent,
    status_after_edit,
    transition,
)
from talentbridge.models.candidate import Candidate, VerificationStatus
from talentbridge.models.employer import Employer
from talentbridge.models.session import Role, Session
from talentbridge.repositories.candidate_repository import CandidateRepository, EmployerRepository
from talentbridge.repositories.document_repository import DocumentRepository
from talentbridge.services.audit_service import AuditService
from talentbridge.services.authorization import (
    require_candidate_owner,
    require_employer_owner,
    require_owner_or_staff,
    require_role,
    require_staff,
)

logger = logging.getLogger(__name__)

# Fields only the verification workflow may change
PROTECTED_CANDIDATE_FIELDS = {
    "id",
    "verification_status",
    "rejection_reason",
    "verification_payment_status",
    "submitted_at",
    "verified_at",
    "updated_at",
}

PROTECTED_EMPLOYER_FIELDS = {"id", "verification_status", "rejection_reason", "updated_at"}


class SubmissionResult(BaseModel):
    """Outcome of a submit-for-review request."""
    status: VerificationStatus
    missing: List[str] = []


class ChecklistReport(BaseModel):
    """Full checklist view for a candidate's review page."""
    verification_status: VerificationStatus
    profile_complete: bool
    has_id: bool
    has_education: bool
    has_cv: bool
    has_references: bool
    can_submit: bool
    missing: List[str]
    progress: int


class VerificationService:
    """Service driving the verification state machine.

    Candidates submit and withdraw their own profiles; staff approve or
    reject; admins may revoke a verification. Employers pass through the
    same machine with a company checklist as their guard.

    Attributes:
        candidate_repository: Repository for candidate profiles.
        employer_repository: Repository for employer accounts.
        document_repository: Repository for document metadata.
        audit_service: AuditService recording accepted actions.
    """

    def __init__(
        self,
        candidate_repository: CandidateRepository,
        employer_repository: EmployerRepository,
        document_repository: DocumentRepository,
        audit_service: AuditService
    ):
        self.candidate_repository = candidate_repository
        self.employer_repository = employer_repository
        self.document_repository = document_repository
        self.audit_service = audit_service

    # Candidates

    def get_candidate(self, session: Session, candidate_id: str) -> Candidate:
        """Get a candidate's full profile (owner or staff only).

        Raises:
            NotFoundError: If the candidate doesn't exist.
            AuthorizationError: If the caller is neither the owner nor staff.
        """
        require_owner_or_staff(session, candidate_id)
        return self.candidate_repository.require_model(candidate_id)

    def list_candidates(
        self,
        session: Session,
        status: VerificationStatus = VerificationStatus.PENDING
    ) -> List[Candidate]:
        """Staff review queue; defaults to candidates awaiting review."""
        require_staff(session)
        return self.candidate_repository.list_by_verification_status(status)

    def get_checklist(self, session: Session, candidate_id: str) -> ChecklistReport:
        """Evaluate the candidate's checklist against their current documents."""
        candidate = self.get_candidate(session, candidate_id)
        documents = self.document_repository.list_for_candidate(candidate_id)

        profile = checklist.evaluate_profile(candidate)
        document_checklist = checklist.evaluate_documents(documents)
        missing = profile.missing + document_checklist.missing

        return ChecklistReport(
            verification_status=candidate.verification_status,
            profile_complete=profile.complete,
            has_id=document_checklist.has_id,
            has_education=document_checklist.has_education,
            has_cv=document_checklist.has_cv,
            has_references=document_checklist.has_references,
            can_submit=not missing,
            missing=missing,
            progress=checklist.profile_progress(candidate, documents)
        )

    def update_profile(self, session: Session, candidate_id: str, updates: Dict[str, Any]) -> Candidate:
        """Apply profile edits made by the candidate.

        Editing a rejected profile silently resets it to unverified so it
        can be resubmitted.

        Args:
            session: Caller; must be the candidate.
            candidate_id: Candidate to edit.
            updates: Profile fields to change.

        Returns:
            Updated Candidate.

        Raises:
            GuardViolationError: If a verification-managed field is included.
        """
        require_candidate_owner(session, candidate_id)

        protected = PROTECTED_CANDIDATE_FIELDS.intersection(updates)
        if protected:
            raise GuardViolationError(f"Cannot edit {', '.join(sorted(protected))} directly")

        candidate = self.candidate_repository.require_model(candidate_id)
        merged = candidate.model_dump()
        merged.update(updates)
        edited = Candidate(**merged)

        new_status = status_after_edit(candidate.verification_status)
        edited = edited.model_copy(update={
            "verification_status": new_status,
            "updated_at": datetime.now(timezone.utc),
        })

        fields = list(updates) + ["verification_status", "updated_at"]
        saved = self.candidate_repository.save_fields(edited, fields)

        if new_status != candidate.verification_status:
            logger.info(f"Candidate {candidate_id} edited after rejection, reset to {new_status.value}")

        return saved

    def submit_for_review(self, session: Session, candidate_id: str) -> SubmissionResult:
        """Move the candidate's profile into review.

        Args:
            session: Caller; must be the candidate.
            candidate_id: Candidate submitting.

        Returns:
            SubmissionResult with status pending.

        Raises:
            IncompleteProfileError: Listing every missing checklist item.
            InvalidTransitionError: If the profile is already pending or verified.
        """
        require_candidate_owner(session, candidate_id)

        candidate = self.candidate_repository.require_model(candidate_id)
        new_status = transition(candidate.verification_status, VerificationEvent.SUBMIT)

        documents = self.document_repository.list_for_candidate(candidate_id)
        missing = checklist.missing_requirements(candidate, documents)
        if missing:
            raise IncompleteProfileError(missing)

        updated = candidate.model_copy(update={
            "verification_status": new_status,
            "rejection_reason": None,
            "submitted_at": datetime.now(timezone.utc),
            "updated_at": datetime.now(timezone.utc),
        })
        self.candidate_repository.save_fields(
            updated, ["verification_status", "rejection_reason", "submitted_at", "updated_at"]
        )

        self.audit_service.record(
            session, "VERIFICATION_SUBMITTED", f"Candidate {candidate_id} submitted profile for review"
        )
        return SubmissionResult(status=new_status)

    def withdraw(self, session: Session, candidate_id: str) -> Candidate:
        """Cancel a pending review, returning the profile to unverified."""
        require_candidate_owner(session, candidate_id)

        candidate = self.candidate_repository.require_model(candidate_id)
        new_status = transition(candidate.verification_status, VerificationEvent.WITHDRAW)

        updated = candidate.model_copy(update={
            "verification_status": new_status,
            "updated_at": datetime.now(timezone.utc),
        })
        saved = self.candidate_repository.save_fields(updated, ["verification_status", "updated_at"])

        self.audit_service.record(
            session, "VERIFICATION_WITHDRAWN", f"Candidate {candidate_id} withdrew review request"
        )
        return saved

    def set_verification(
        self,
        session: Session,
        candidate_id: str,
        status: VerificationStatus,
        reason: Optional[str] = None
    ) -> Candidate:
        """Record a staff decision on a candidate.

        Args:
            session: Caller; staff for verify/reject, admin for revoking.
            candidate_id: Candidate under review.
            status: ``verified`` or ``rejected``; ``unverified`` revokes a
                verification and is admin-only.
            reason: Required when rejecting.

        Returns:
            Updated Candidate.

        Raises:
            InvalidTransitionError: If the candidate is not pending (or not
                verified, when revoking).
            MissingReasonError: If rejecting without a reason.
        """
        status = VerificationStatus(status)
        event = self._decision_event(session, status)

        candidate = self.candidate_repository.require_model(candidate_id)
        new_status = transition(candidate.verification_status, event, reason)

        now = datetime.now(timezone.utc)
        updated = candidate.model_copy(update={
            "verification_status": new_status,
            "rejection_reason": reason if new_status == VerificationStatus.REJECTED else None,
            "verified_at": now if new_status == VerificationStatus.VERIFIED else candidate.verified_at,
            "updated_at": now,
        })
        saved = self.candidate_repository.save_fields(
            updated, ["verification_status", "rejection_reason", "verified_at", "updated_at"]
        )

        details = f"{new_status.value.capitalize()} candidate: {candidate.last_name or candidate_id}"
        if reason:
            details += f" - Reason: {reason}"
        self.audit_service.record(session, self._audit_action("USER", event), details)

        return saved

    # Employers

    def list_employers(
        self,
        session: Session,
        status: VerificationStatus = VerificationStatus.PENDING
    ) -> List[Employer]:
        require_staff(session)
        return self.employer_repository.list_by_verification_status(status)

    def get_employer(self, session: Session, employer_id: str) -> Employer:
        require_owner_or_staff(session, employer_id)
        return self.employer_repository.require_model(employer_id)

    def update_employer_profile(self, session: Session, employer_id: str, updates: Dict[str, Any]) -> Employer:
        """Apply company-profile edits; a rejected employer resets to unverified."""
        require_employer_owner(session, employer_id)

        protected = PROTECTED_EMPLOYER_FIELDS.intersection(updates)
        if protected:
            raise GuardViolationError(f"Cannot edit {', '.join(sorted(protected))} directly")

        employer = self.employer_repository.require_model(employer_id)
        merged = employer.model_dump()
        merged.update(updates)
        edited = Employer(**merged).model_copy(update={
            "verification_status": status_after_edit(employer.verification_status),
            "updated_at": datetime.now(timezone.utc),
        })

        return self.employer_repository.save_fields(
            edited, list(updates) + ["verification_status", "updated_at"]
        )

    def submit_employer_for_review(self, session: Session, employer_id: str) -> SubmissionResult:
        """Move an employer's company profile into review.

        Raises:
            IncompleteProfileError: Listing every missing company field.
        """
        require_employer_owner(session, employer_id)

        employer = self.employer_repository.require_model(employer_id)
        new_status = transition(employer.verification_status, VerificationEvent.SUBMIT)

        evaluation = checklist.evaluate_employer_profile(employer)
        if not evaluation.complete:
            raise IncompleteProfileError(evaluation.missing)

        updated = employer.model_copy(update={
            "verification_status": new_status,
            "rejection_reason": None,
            "updated_at": datetime.now(timezone.utc),
        })
        self.employer_repository.save_fields(updated, ["verification_status", "rejection_reason", "updated_at"])

        self.audit_service.record(
            session, "EMPLOYER_SUBMITTED", f"Employer {employer.company_name} submitted for review"
        )
        return SubmissionResult(status=new_status)

    def set_employer_verification(
        self,
        session: Session,
        employer_id: str,
        status: VerificationStatus,
        reason: Optional[str] = None
    ) -> Employer:
        """Record a staff decision on an employer account."""
        status = VerificationStatus(status)
        event = self._decision_event(session, status)

        employer = self.employer_repository.require_model(employer_id)
        new_status = transition(employer.verification_status, event, reason)

        updated = employer.model_copy(update={
            "verification_status": new_status,
            "rejection_reason": reason if new_status == VerificationStatus.REJECTED else None,
            "updated_at": datetime.now(timezone.utc),
        })
        saved = self.employer_repository.save_fields(
            updated, ["verification_status", "rejection_reason", "updated_at"]
        )

        details = f"{new_status.value.capitalize()} employer: {employer.company_name or employer_id}"
        if reason:
            details += f" - Reason: {reason}"
        self.audit_service.record(session, self._audit_action("EMPLOYER", event), details)

        return saved

    # Helpers

    def _decision_event(self, session: Session, status: VerificationStatus) -> VerificationEvent:
        """Map a requested status onto an event, checking the caller's role."""
        if status == VerificationStatus.UNVERIFIED:
            require_role(session, Role.ADMIN)
            return VerificationEvent.REVOKE

        require_staff(session)

        event = DECISION_EVENTS.get(status)
        if event is None:
            raise GuardViolationError(f"Staff cannot set verification status '{status.value}'")
        return event

    def _audit_action(self, subject: str, event: VerificationEvent) -> str:
        suffix = {
            VerificationEvent.APPROVE: "VERIFIED",
            VerificationEvent.REJECT: "REJECTED",
            VerificationEvent.REVOKE: "VERIFICATION_REVOKED",
        }[event]
        return f"{subject}_{suffix}"
