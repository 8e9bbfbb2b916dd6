"""Request schemas for API endpoints."""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from talentbridge.models.candidate import EducationEntry, ExperienceEntry, VerificationStatus
from talentbridge.models.interview import InterviewAction
from talentbridge.models.quote import QuoteDecision, QuoteLineItem
from talentbridge.models.relation import PipelineStatus


class UpdateProfileRequest(BaseModel):
    """Request model for editing a candidate profile; only set fields change."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    nationality: Optional[str] = None
    birth_date: Optional[str] = None
    years_of_experience: Optional[str] = None
    sector: Optional[str] = None
    salary_expectation: Optional[str] = None
    skills: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    experience: Optional[List[ExperienceEntry]] = None
    education: Optional[List[EducationEntry]] = None


class UpdateEmployerProfileRequest(BaseModel):
    """Request model for editing an employer's company profile."""
    company_name: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    founded_year: Optional[str] = None
    society_type: Optional[str] = None
    register_number: Optional[str] = None
    contact_email: Optional[str] = None


class SetVerificationRequest(BaseModel):
    """Request model for a staff verification decision."""
    status: VerificationStatus
    reason: Optional[str] = None


class RegisterDocumentRequest(BaseModel):
    """Request model for recording an uploaded document."""
    type: str
    name: str
    file_name: Optional[str] = None


class RejectDocumentRequest(BaseModel):
    reason: str


class UpdateRelationStatusRequest(BaseModel):
    """Request model for moving a candidate in the employer's pipeline."""
    employer_id: str
    status: PipelineStatus


class RequestQuoteRequest(BaseModel):
    employer_id: str


class QuoteOptionInput(BaseModel):
    """An option staff attach when approving a quote."""
    id: Optional[str] = None
    name: str
    cost_estimate: Optional[str] = None
    perks: List[str] = []
    items: List[QuoteLineItem] = []


class ResolveQuoteRequest(BaseModel):
    """Request model for approving or rejecting a quote request."""
    decision: QuoteDecision
    options: Optional[List[QuoteOptionInput]] = None
    cost_estimate: Optional[str] = None


class SelectOptionRequest(BaseModel):
    option_id: str


class ProposedTimeInput(BaseModel):
    """A proposed interview slot."""
    datetime: datetime
    duration: int = Field(gt=0)


class ScheduleInterviewRequest(BaseModel):
    """Request model for proposing interview slots on a relation."""
    relation_id: str
    proposed_times: List[ProposedTimeInput]
    title: Optional[str] = None
    notes: Optional[str] = None


class ResolveInterviewRequest(BaseModel):
    """Request model for confirming, completing or cancelling an interview."""
    action: InterviewAction
    slot_id: Optional[str] = None
