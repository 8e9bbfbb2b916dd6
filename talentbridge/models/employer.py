"""Pydantic models for employer accounts."""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from talentbridge.models.candidate import VerificationStatus


class Employer(BaseModel):
    """An employer (company) account.

    Attributes:
        id: Unique employer identifier (UUID from database).
        company_name: Legal company name.
        industry: Industry the company operates in.
        company_size: Head-count bracket.
        founded_year: Year the company was founded.
        society_type: Legal form (GmbH, AG, ...).
        register_number: Commercial register number.
        contact_email: HR contact email.
        verification_status: Current verification state.
        rejection_reason: Staff reason for the last rejection.
        updated_at: Last update timestamp.
    """
    id: Optional[str] = None
    company_name: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    founded_year: Optional[str] = None
    society_type: Optional[str] = None
    register_number: Optional[str] = None
    contact_email: Optional[str] = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    rejection_reason: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED
