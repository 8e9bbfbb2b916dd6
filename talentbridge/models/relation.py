"""Pydantic models for employer/candidate pipeline relations."""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class PipelineStatus(str, Enum):
    """Stage of a candidate in one employer's hiring pipeline, in order."""
    POTENTIAL = "potential"
    SHORTLISTED = "shortlisted"
    ASKED_QUOTE = "asked_quote"
    INTERVIEWED = "interviewed"
    HIRED = "hired"


class EmployerCandidateRelation(BaseModel):
    """Tracks one candidate's progress through one employer's pipeline.

    Attributes:
        id: Unique relation identifier.
        employer_id: Employer owning this pipeline entry.
        candidate_id: Candidate being tracked.
        status: Current pipeline stage.
        created_at: When the employer first engaged the candidate.
        updated_at: Last status change.
    """
    id: Optional[str] = None
    employer_id: str
    candidate_id: str
    status: PipelineStatus = PipelineStatus.POTENTIAL
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
