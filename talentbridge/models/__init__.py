"""Pydantic models for the talentbridge lifecycle engine."""

from talentbridge.models.candidate import (
    VerificationStatus,
    VerificationPaymentStatus,
    ExperienceEntry,
    EducationEntry,
    Candidate
)
from talentbridge.models.employer import Employer
from talentbridge.models.document import DocumentType, DocumentStatus, Document
from talentbridge.models.relation import PipelineStatus, EmployerCandidateRelation
from talentbridge.models.quote import (
    QuoteStatus,
    QuoteDecision,
    QuoteLineItem,
    QuoteOption,
    QuoteRequest
)
from talentbridge.models.interview import (
    InterviewStatus,
    InterviewAction,
    ProposedTime,
    Interview
)
from talentbridge.models.session import Role, Session
from talentbridge.models.audit import AuditLogEntry

__all__ = [
    "VerificationStatus",
    "VerificationPaymentStatus",
    "ExperienceEntry",
    "EducationEntry",
    "Candidate",
    "Employer",
    "DocumentType",
    "DocumentStatus",
    "Document",
    "PipelineStatus",
    "EmployerCandidateRelation",
    "QuoteStatus",
    "QuoteDecision",
    "QuoteLineItem",
    "QuoteOption",
    "QuoteRequest",
    "InterviewStatus",
    "InterviewAction",
    "ProposedTime",
    "Interview",
    "Role",
    "Session",
    "AuditLogEntry"
]
