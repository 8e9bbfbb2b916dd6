"""FastAPI application for the candidate lifecycle engine."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from supabase import Client

from talentbridge.config import load_settings, setup_lifecycle_logger
from talentbridge.database.client import get_supabase_client
from talentbridge.errors import (
    AuthorizationError,
    DuplicateRequestError,
    GuardViolationError,
    LifecycleError,
    NotFoundError,
    PersistenceError,
)
from talentbridge.models.audit import AuditLogEntry
from talentbridge.models.candidate import Candidate, VerificationStatus
from talentbridge.models.document import Document
from talentbridge.models.employer import Employer
from talentbridge.models.interview import Interview
from talentbridge.models.session import Role, Session
from talentbridge.repositories.audit_repository import AuditLogRepository
from talentbridge.repositories.candidate_repository import CandidateRepository, EmployerRepository
from talentbridge.repositories.document_repository import DocumentRepository
from talentbridge.repositories.interview_repository import InterviewRepository
from talentbridge.repositories.quote_repository import QuoteRepository
from talentbridge.repositories.relation_repository import RelationRepository
from talentbridge.services.audit_service import AuditService
from talentbridge.services.document_service import DocumentService
from talentbridge.services.interview_service import InterviewResolution, InterviewService
from talentbridge.services.pipeline_service import PipelineService
from talentbridge.services.quote_service import PaymentGateway, QuoteService
from talentbridge.services.verification_service import (
    ChecklistReport,
    SubmissionResult,
    VerificationService,
)
from talentbridge.api.schemas.requests import (
    RegisterDocumentRequest,
    RejectDocumentRequest,
    RequestQuoteRequest,
    ResolveInterviewRequest,
    ResolveQuoteRequest,
    ScheduleInterviewRequest,
    SelectOptionRequest,
    SetVerificationRequest,
    UpdateEmployerProfileRequest,
    UpdateProfileRequest,
    UpdateRelationStatusRequest,
)
from talentbridge.api.schemas.responses import (
    CandidateSummary,
    PaymentResponse,
    QuoteResponse,
    RelationCardResponse,
    RelationUpdateResponse,
)


settings = load_settings()
logger = setup_lifecycle_logger(settings)

app = FastAPI(title="TalentBridge lifecycle")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Most specific class first
ERROR_STATUS_CODES = [
    (GuardViolationError, 422),
    (DuplicateRequestError, 409),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (PersistenceError, 503),
]


# Global exception handlers
@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError):
    """Convert lifecycle errors to HTTP responses.

    - Guard violations → 422 Unprocessable Entity
    - Duplicate requests → 409 Conflict
    - Authorization failures → 403 Forbidden
    - Missing entities → 404 Not Found
    - Database failures → 503 Service Unavailable
    """
    status_code = 400
    for error_class, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            status_code = code
            break

    if isinstance(exc, PersistenceError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Convert unhandled exceptions to 500 Internal Server Error.

    Prevents stack traces from being exposed to clients.
    """
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "Internal server error"}
    )


@dataclass
class ServiceContainer:
    """All services wired to one database client."""
    audit: AuditService
    verification: VerificationService
    documents: DocumentService
    quotes: QuoteService
    pipeline: PipelineService
    interviews: InterviewService


def build_services(db_client: Client, payment_gateway: Optional[PaymentGateway] = None) -> ServiceContainer:
    """Initialize repositories and services on a database client."""
    candidate_repository = CandidateRepository(db_client)
    employer_repository = EmployerRepository(db_client)
    document_repository = DocumentRepository(db_client)
    relation_repository = RelationRepository(db_client)
    quote_repository = QuoteRepository(db_client)
    interview_repository = InterviewRepository(db_client)
    audit_repository = AuditLogRepository(db_client)

    audit_service = AuditService(audit_repository)
    quote_service = QuoteService(
        quote_repository,
        relation_repository,
        candidate_repository,
        employer_repository,
        audit_service,
        payment_gateway
    )

    return ServiceContainer(
        audit=audit_service,
        verification=VerificationService(
            candidate_repository, employer_repository, document_repository, audit_service
        ),
        documents=DocumentService(document_repository, candidate_repository, audit_service),
        quotes=quote_service,
        pipeline=PipelineService(
            relation_repository, quote_repository, candidate_repository, quote_service, audit_service
        ),
        interviews=InterviewService(
            interview_repository, relation_repository, candidate_repository, audit_service
        ),
    )


@lru_cache(maxsize=1)
def get_services() -> ServiceContainer:
    return build_services(get_supabase_client())


def get_session(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None)
) -> Session:
    """Build the caller's Session from headers set by the auth gateway."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing session headers")

    try:
        role = Role(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_user_role}'")

    return Session(user_id=x_user_id, role=role)


@app.get("/")
def root():
    """Health check endpoint.

    Returns:
        Dictionary with status indicator.
    """
    return {"status": "ok"}


# Candidate verification endpoints
@app.get("/candidates", response_model=List[Candidate])
def list_candidates(
    verification_status: VerificationStatus = VerificationStatus.PENDING,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Staff review queue, filtered by verification status (default pending)."""
    return services.verification.list_candidates(session, verification_status)


@app.get("/candidates/{candidate_id}", response_model=Candidate)
def get_candidate(
    candidate_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Get a candidate's full profile (candidate themself or staff)."""
    return services.verification.get_candidate(session, candidate_id)


@app.patch("/candidates/{candidate_id}", response_model=Candidate)
def update_candidate_profile(
    candidate_id: str,
    request: UpdateProfileRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Edit profile fields. Editing a rejected profile resets it to unverified."""
    return services.verification.update_profile(
        session, candidate_id, request.model_dump(exclude_unset=True)
    )


@app.get("/candidates/{candidate_id}/checklist", response_model=ChecklistReport)
def get_candidate_checklist(
    candidate_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Get the verification checklist, missing items and profile progress."""
    return services.verification.get_checklist(session, candidate_id)


@app.post("/candidates/{candidate_id}/submit", response_model=SubmissionResult)
def submit_candidate_for_review(
    candidate_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Submit a complete profile for staff review.

    Returns 422 with the full ``missing`` list when the checklist fails.
    """
    return services.verification.submit_for_review(session, candidate_id)


@app.post("/candidates/{candidate_id}/withdraw", response_model=Candidate)
def withdraw_candidate_review(
    candidate_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.verification.withdraw(session, candidate_id)


@app.put("/candidates/{candidate_id}/verification", response_model=Candidate)
def set_candidate_verification(
    candidate_id: str,
    request: SetVerificationRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Verify or reject a pending candidate (staff); revoke a verification (admin)."""
    return services.verification.set_verification(
        session, candidate_id, request.status, request.reason
    )


# Document endpoints
@app.get("/candidates/{candidate_id}/documents", response_model=List[Document])
def list_candidate_documents(
    candidate_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.documents.list_documents(session, candidate_id)


@app.post("/candidates/{candidate_id}/documents", response_model=Document, status_code=201)
def register_candidate_document(
    candidate_id: str,
    request: RegisterDocumentRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Record metadata for a document the candidate uploaded to storage."""
    return services.documents.register_upload(
        session, candidate_id, request.type, request.name, request.file_name
    )


@app.get("/documents/pending", response_model=List[Document])
def list_pending_documents(
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.documents.list_pending(session)


@app.delete("/documents/{document_id}")
def delete_document(
    document_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Delete one of the caller's documents while it is still pending review."""
    services.documents.delete_document(session, document_id)
    return {"message": f"Document {document_id} deleted"}


@app.post("/documents/{document_id}/approve", response_model=Document)
def approve_document(
    document_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.documents.approve_document(session, document_id)


@app.post("/documents/{document_id}/reject", response_model=Document)
def reject_document(
    document_id: str,
    request: RejectDocumentRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.documents.reject_document(session, document_id, request.reason)


# Employer endpoints
@app.get("/employers", response_model=List[Employer])
def list_employers(
    verification_status: VerificationStatus = VerificationStatus.PENDING,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.verification.list_employers(session, verification_status)


@app.get("/employers/{employer_id}", response_model=Employer)
def get_employer(
    employer_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.verification.get_employer(session, employer_id)


@app.patch("/employers/{employer_id}", response_model=Employer)
def update_employer_profile(
    employer_id: str,
    request: UpdateEmployerProfileRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.verification.update_employer_profile(
        session, employer_id, request.model_dump(exclude_unset=True)
    )


@app.post("/employers/{employer_id}/submit", response_model=SubmissionResult)
def submit_employer_for_review(
    employer_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.verification.submit_employer_for_review(session, employer_id)


@app.put("/employers/{employer_id}/verification", response_model=Employer)
def set_employer_verification(
    employer_id: str,
    request: SetVerificationRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.verification.set_employer_verification(
        session, employer_id, request.status, request.reason
    )


# Pipeline endpoints
@app.get("/employers/{employer_id}/relations", response_model=List[RelationCardResponse])
def list_employer_relations(
    employer_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """List the employer's pipeline with lock flags and anonymised candidates."""
    views = services.pipeline.list_relations(session, employer_id)
    return [RelationCardResponse.from_view(view) for view in views]


@app.get("/relations", response_model=List[RelationCardResponse])
def list_all_relations(
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    views = services.pipeline.list_all_relations(session)
    return [RelationCardResponse.from_view(view) for view in views]


@app.put("/candidates/{candidate_id}/status", response_model=RelationUpdateResponse)
def update_relation_status(
    candidate_id: str,
    request: UpdateRelationStatusRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Move a candidate within the employer's pipeline.

    Moving into asked_quote ensures a quote request exists; the response
    reports whether one was created or was already pending.
    """
    update = services.pipeline.update_relation_status(
        session, candidate_id, request.employer_id, request.status
    )
    return RelationUpdateResponse.from_update(update)


@app.get("/employers/{employer_id}/candidates/{candidate_id}", response_model=CandidateSummary)
def get_candidate_summary(
    employer_id: str,
    candidate_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Employer-facing candidate view without contact details."""
    candidate = services.pipeline.view_candidate(session, employer_id, candidate_id)
    return CandidateSummary.from_candidate(candidate)


# Quote endpoints
@app.post("/candidates/{candidate_id}/quote-requests", response_model=QuoteResponse, status_code=201)
def request_quote(
    candidate_id: str,
    request: RequestQuoteRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Request a placement quote. Returns 409 if one is already open."""
    quote = services.quotes.request_quote(session, candidate_id, request.employer_id)
    return QuoteResponse.from_quote(quote)


@app.get("/employers/{employer_id}/quote-requests", response_model=List[QuoteResponse])
def list_employer_quotes(
    employer_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return [
        QuoteResponse.from_quote(quote)
        for quote in services.quotes.list_for_employer(session, employer_id)
    ]


@app.get("/quote-requests", response_model=List[QuoteResponse])
def list_all_quotes(
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return [QuoteResponse.from_quote(quote) for quote in services.quotes.list_all(session)]


@app.get("/quote-requests/{request_id}", response_model=QuoteResponse)
def get_quote(
    request_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return QuoteResponse.from_quote(services.quotes.get_quote(session, request_id))


@app.post("/quote-requests/{request_id}/resolve", response_model=QuoteResponse)
def resolve_quote(
    request_id: str,
    request: ResolveQuoteRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Approve (with options) or reject a pending quote request (staff)."""
    options = [option.model_dump(exclude_none=True) for option in request.options] if request.options else None
    quote = services.quotes.resolve_quote(
        session, request_id, request.decision, options, request.cost_estimate
    )
    return QuoteResponse.from_quote(quote)


@app.post("/quote-requests/{request_id}/select-option", response_model=QuoteResponse)
def select_quote_option(
    request_id: str,
    request: SelectOptionRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    quote = services.quotes.select_option(session, request_id, request.option_id)
    return QuoteResponse.from_quote(quote)


@app.post("/quote-requests/{request_id}/pay", response_model=PaymentResponse)
def pay_quote(
    request_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Pay the selected option; the candidate becomes hired."""
    return PaymentResponse.from_result(services.quotes.pay_quote(session, request_id))


# Interview endpoints
@app.post("/interviews", response_model=Interview, status_code=201)
def schedule_interview(
    request: ScheduleInterviewRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Propose interview slots on a relation."""
    return services.interviews.schedule_interview(
        session,
        request.relation_id,
        [slot.model_dump() for slot in request.proposed_times],
        title=request.title,
        notes=request.notes
    )


@app.get("/interviews/mine", response_model=List[Interview])
def list_my_interviews(
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.interviews.list_my_interviews(session)


@app.get("/interviews", response_model=List[Interview])
def list_all_interviews(
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.interviews.list_all(session)


@app.get("/interviews/{interview_id}", response_model=Interview)
def get_interview(
    interview_id: str,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.interviews.get_interview(session, interview_id)


@app.post("/interviews/{interview_id}/resolve", response_model=InterviewResolution)
def resolve_interview(
    interview_id: str,
    request: ResolveInterviewRequest,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    """Confirm a slot, complete or cancel an interview."""
    return services.interviews.resolve_interview(
        session, interview_id, request.action, request.slot_id
    )


# Audit endpoints
@app.get("/audit-logs", response_model=List[AuditLogEntry])
def list_audit_logs(
    limit: int = 100,
    action: Optional[str] = None,
    session: Session = Depends(get_session),
    services: ServiceContainer = Depends(get_services)
):
    return services.audit.list_recent(session, limit=limit, action=action)
