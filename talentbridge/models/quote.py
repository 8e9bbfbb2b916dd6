"""Pydantic models for placement quotes and their payment."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum


class QuoteStatus(str, Enum):
    """Status of a quote request."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class QuoteDecision(str, Enum):
    """Staff decision when resolving a pending quote request."""
    APPROVED = "approved"
    REJECTED = "rejected"


class QuoteLineItem(BaseModel):
    """A single cost line within a quote option.

    Attributes:
        label: Short name of the cost (e.g., "Placement Fee").
        amount: Non-negative amount, currency-agnostic.
        description: What the cost covers.
    """
    label: str
    amount: Decimal = Field(ge=0)
    description: Optional[str] = None


class QuoteOption(BaseModel):
    """A selectable package offered to the employer.

    Attributes:
        id: Option identifier, unique within the request.
        name: Package name.
        cost_estimate: Free-text cost range shown to the employer.
        perks: Included perks.
        items: Cost breakdown.
        selected: Whether the employer picked this option.
    """
    id: str
    name: str
    cost_estimate: Optional[str] = None
    perks: List[str] = []
    items: List[QuoteLineItem] = []
    selected: bool = False

    @property
    def total(self) -> Decimal:
        """Sum of the line item amounts."""
        return sum((item.amount for item in self.items), Decimal("0"))


class QuoteRequest(BaseModel):
    """An employer's request for a placement quote on one relation.

    Attributes:
        id: Unique request identifier.
        relation_id: Pipeline relation this quote belongs to.
        employer_id: Requesting employer.
        candidate_id: Candidate being quoted.
        status: Current status.
        requested_at: When the employer asked for the quote.
        resolved_at: When staff approved or rejected it.
        paid_at: When payment was confirmed.
        cost_estimate: Staff cost estimate label.
        selected_option_id: ID of the selected option, if any.
        options: Options attached on approval.
    """
    id: Optional[str] = None
    relation_id: str
    employer_id: str
    candidate_id: str
    status: QuoteStatus = QuoteStatus.PENDING
    requested_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cost_estimate: Optional[str] = None
    selected_option_id: Optional[str] = None
    options: List[QuoteOption] = []

    @property
    def selected_option(self) -> Optional[QuoteOption]:
        for option in self.options:
            if option.selected:
                return option
        return None
