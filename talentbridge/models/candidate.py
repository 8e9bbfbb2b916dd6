"""Pydantic models for candidate profiles and their verification state."""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from enum import Enum


class VerificationStatus(str, Enum):
    """Global trust status of a candidate or employer profile."""
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class VerificationPaymentStatus(str, Enum):
    """Status of the candidate's verification fee."""
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"


class ExperienceEntry(BaseModel):
    """Represents a work experience entry on a candidate profile.

    Attributes:
        title: Job title.
        company: Employer name.
        start_date: Start date as entered by the candidate.
        end_date: End date (None if current position).
        description: Free-text description of the role.
    """
    title: str
    company: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    description: Optional[str] = None


class EducationEntry(BaseModel):
    """Represents an education entry on a candidate profile.

    Attributes:
        institution: School or university name.
        degree: Degree or qualification earned.
        field_of_study: Subject area.
        start_year: Year education started.
        end_year: Year education ended.
    """
    institution: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None


class Candidate(BaseModel):
    """A candidate profile together with its verification state.

    Attributes:
        id: Unique candidate identifier (UUID from database).
        first_name: Candidate's first name.
        last_name: Candidate's last name.
        email: Contact email, never shown to employers.
        headline: One-line professional headline.
        bio: Longer profile summary.
        phone: Contact phone number.
        location: Current city/country.
        nationality: Nationality.
        birth_date: Date of birth as entered.
        years_of_experience: Years of professional experience.
        sector: Industry sector.
        salary_expectation: Expected salary as entered.
        skills: List of skills.
        languages: Languages spoken.
        experience: Work experience entries.
        education: Education entries.
        verification_status: Current verification state.
        rejection_reason: Staff reason for the last rejection.
        verification_payment_status: Status of the verification fee.
        submitted_at: When the profile was last submitted for review.
        verified_at: When staff last verified the profile.
        updated_at: Last update timestamp.
    """
    id: Optional[str] = None
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
    skills: List[str] = []
    languages: List[str] = []
    experience: List[ExperienceEntry] = []
    education: List[EducationEntry] = []
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    rejection_reason: Optional[str] = None
    verification_payment_status: VerificationPaymentStatus = VerificationPaymentStatus.UNPAID
    submitted_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        """Display name, falling back to a neutral label."""
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or "Candidate"

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED
