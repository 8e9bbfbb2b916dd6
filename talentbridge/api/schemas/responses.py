"""Response schemas for API endpoints."""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from talentbridge.lifecycle.quotes import format_amount
from talentbridge.models.candidate import Candidate, VerificationStatus
from talentbridge.models.quote import QuoteOption, QuoteRequest, QuoteStatus
from talentbridge.models.relation import EmployerCandidateRelation
from talentbridge.services.pipeline_service import RelationUpdate, RelationView
from talentbridge.services.quote_service import PaymentResult


class CandidateSummary(BaseModel):
    """Employer-facing candidate view without contact details."""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    sector: Optional[str] = None
    skills: List[str] = []
    verification_status: VerificationStatus

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "CandidateSummary":
        return cls(
            id=candidate.id,
            first_name=candidate.first_name,
            last_name=candidate.last_name,
            headline=candidate.headline,
            sector=candidate.sector,
            skills=candidate.skills,
            verification_status=candidate.verification_status
        )


class QuoteLineItemResponse(BaseModel):
    label: str
    amount: str
    description: Optional[str] = None


class QuoteOptionResponse(BaseModel):
    """Quote option with display-formatted amounts."""
    id: str
    name: str
    cost_estimate: Optional[str] = None
    perks: List[str] = []
    items: List[QuoteLineItemResponse] = []
    total: str
    selected: bool

    @classmethod
    def from_option(cls, option: QuoteOption) -> "QuoteOptionResponse":
        return cls(
            id=option.id,
            name=option.name,
            cost_estimate=option.cost_estimate,
            perks=option.perks,
            items=[
                QuoteLineItemResponse(
                    label=item.label,
                    amount=format_amount(item.amount),
                    description=item.description
                )
                for item in option.items
            ],
            total=format_amount(option.total),
            selected=option.selected
        )


class QuoteResponse(BaseModel):
    """Response model for quote request endpoints."""
    id: str
    relation_id: str
    employer_id: str
    candidate_id: str
    status: QuoteStatus
    requested_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cost_estimate: Optional[str] = None
    selected_option_id: Optional[str] = None
    options: List[QuoteOptionResponse] = []

    @classmethod
    def from_quote(cls, quote: QuoteRequest) -> "QuoteResponse":
        return cls(
            **quote.model_dump(exclude={"options"}),
            options=[QuoteOptionResponse.from_option(option) for option in quote.options]
        )


class RelationCardResponse(BaseModel):
    """One pipeline card with its lock flags."""
    relation: EmployerCandidateRelation
    candidate: Optional[CandidateSummary] = None
    open_quote: Optional[QuoteResponse] = None
    locked_by_quote: bool
    terminal_locked: bool

    @classmethod
    def from_view(cls, view: RelationView) -> "RelationCardResponse":
        return cls(
            relation=view.relation,
            candidate=CandidateSummary.from_candidate(view.candidate) if view.candidate else None,
            open_quote=QuoteResponse.from_quote(view.open_quote) if view.open_quote else None,
            locked_by_quote=view.locked_by_quote,
            terminal_locked=view.terminal_locked
        )


class RelationUpdateResponse(BaseModel):
    """Response model for a pipeline status change."""
    relation: EmployerCandidateRelation
    quote: Optional[QuoteResponse] = None
    quote_created: bool = False
    quote_already_pending: bool = False

    @classmethod
    def from_update(cls, update: RelationUpdate) -> "RelationUpdateResponse":
        return cls(
            relation=update.relation,
            quote=QuoteResponse.from_quote(update.quote) if update.quote else None,
            quote_created=update.quote_created,
            quote_already_pending=update.quote_already_pending
        )


class PaymentResponse(BaseModel):
    quote: QuoteResponse
    relation: EmployerCandidateRelation

    @classmethod
    def from_result(cls, result: PaymentResult) -> "PaymentResponse":
        return cls(quote=QuoteResponse.from_quote(result.quote), relation=result.relation)
