"""Service layer for candidate document metadata and review."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from talentbridge.errors import GuardViolationError, InvalidTransitionError, MissingReasonError
from talentbridge.models.document import Document, DocumentStatus
from talentbridge.models.session import Session
from talentbridge.repositories.candidate_repository import CandidateRepository
from talentbridge.repositories.document_repository import DocumentRepository
from talentbridge.services.audit_service import AuditService
from talentbridge.services.authorization import (
    require_candidate_owner,
    require_owner_or_staff,
    require_staff,
)

logger = logging.getLogger(__name__)


class DocumentService:
    """Service for documents uploaded as verification evidence.

    File bytes are stored elsewhere; this service keeps the metadata that
    the checklist evaluator classifies.

    Attributes:
        document_repository: Repository for document metadata.
        candidate_repository: Repository used to confirm the owner exists.
        audit_service: AuditService recording review decisions.
    """

    def __init__(
        self,
        document_repository: DocumentRepository,
        candidate_repository: CandidateRepository,
        audit_service: AuditService
    ):
        self.document_repository = document_repository
        self.candidate_repository = candidate_repository
        self.audit_service = audit_service

    def register_upload(
        self,
        session: Session,
        candidate_id: str,
        document_type: str,
        name: str,
        file_name: Optional[str] = None
    ) -> Document:
        """Record metadata for a file the candidate just uploaded.

        Args:
            session: Caller; must be the candidate.
            candidate_id: Owning candidate.
            document_type: Declared type (e.g., "passport", "diploma").
            name: Display name. Checklist classification uses only the type.
            file_name: Name of the stored file.

        Returns:
            The stored Document, in pending review.
        """
        require_candidate_owner(session, candidate_id)
        self.candidate_repository.require_model(candidate_id)

        if not document_type or not name:
            raise GuardViolationError("Document type and name are required")

        document = Document(
            candidate_id=candidate_id,
            type=document_type,
            name=name,
            file_name=file_name or name,
            status=DocumentStatus.PENDING,
            uploaded_at=datetime.now(timezone.utc)
        )
        stored = self.document_repository.insert_model(document)
        logger.info(f"Registered document {stored.id} ({document_type}) for candidate {candidate_id}")
        return stored

    def list_documents(self, session: Session, candidate_id: str) -> List[Document]:
        require_owner_or_staff(session, candidate_id)
        return self.document_repository.list_for_candidate(candidate_id)

    def list_pending(self, session: Session) -> List[Document]:
        """Documents awaiting staff review."""
        require_staff(session)
        return self.document_repository.list_by_status(DocumentStatus.PENDING)

    def delete_document(self, session: Session, document_id: str) -> bool:
        """Delete one of the caller's own documents while it is still pending.

        Raises:
            AuthorizationError: If the caller does not own the document.
            InvalidTransitionError: If staff already reviewed it.
        """
        document = self.document_repository.require_model(document_id)
        require_candidate_owner(session, document.candidate_id)

        if document.status != DocumentStatus.PENDING:
            raise InvalidTransitionError("document", DocumentStatus(document.status).value, "delete")

        return self.document_repository.delete(document_id)

    def approve_document(self, session: Session, document_id: str) -> Document:
        return self._review(session, document_id, DocumentStatus.VERIFIED)

    def reject_document(self, session: Session, document_id: str, reason: Optional[str] = None) -> Document:
        return self._review(session, document_id, DocumentStatus.REJECTED, reason)

    def _review(
        self,
        session: Session,
        document_id: str,
        status: DocumentStatus,
        reason: Optional[str] = None
    ) -> Document:
        """Record a staff decision on a pending document."""
        require_staff(session)

        document = self.document_repository.require_model(document_id)
        if document.status != DocumentStatus.PENDING:
            event = "approve" if status == DocumentStatus.VERIFIED else "reject"
            raise InvalidTransitionError("document", DocumentStatus(document.status).value, event)

        if status == DocumentStatus.REJECTED and not (reason and reason.strip()):
            raise MissingReasonError()

        now = datetime.now(timezone.utc)
        updated = document.model_copy(update={
            "status": status,
            "verified_at": now if status == DocumentStatus.VERIFIED else None,
            "verified_by": session.user_id,
            "rejection_reason": reason if status == DocumentStatus.REJECTED else None,
        })
        saved = self.document_repository.save_fields(
            updated, ["status", "verified_at", "verified_by", "rejection_reason"]
        )

        action = "DOCUMENT_VERIFIED" if status == DocumentStatus.VERIFIED else "DOCUMENT_REJECTED"
        details = f"{document.name or document.type} for candidate {document.candidate_id}"
        if reason:
            details += f" - Reason: {reason}"
        self.audit_service.record(session, action, details)

        return saved
