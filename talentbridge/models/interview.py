"""Pydantic models for interview scheduling."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class InterviewStatus(str, Enum):
    """Status of a scheduled interview."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InterviewAction(str, Enum):
    """Actions that resolve an interview."""
    CONFIRM = "confirm"
    COMPLETE = "complete"
    CANCEL = "cancel"


class ProposedTime(BaseModel):
    """A time slot proposed for an interview.

    Attributes:
        id: Slot identifier, unique within the interview.
        datetime: Proposed start time.
        duration: Length in minutes.
        proposed_by: User who proposed the slot.
        accepted: Whether this slot was chosen.
    """
    id: str
    datetime: datetime
    duration: int = Field(gt=0)
    proposed_by: Optional[str] = None
    accepted: bool = False


class Interview(BaseModel):
    """An interview between an employer and a candidate.

    Attributes:
        id: Unique interview identifier.
        relation_id: Pipeline relation the interview belongs to.
        employer_id: Interviewing employer.
        candidate_id: Interviewed candidate.
        title: Short title shown in invitations.
        status: Current status.
        proposed_times: Candidate time slots.
        confirmed_time: Start time of the accepted slot.
        notes: Free-text notes.
        room_id: Opaque video-room token, assigned on confirmation.
        scheduled_by: User who scheduled the interview.
        created_at: When the interview was scheduled.
    """
    id: Optional[str] = None
    relation_id: str
    employer_id: str
    candidate_id: str
    title: Optional[str] = None
    status: InterviewStatus = InterviewStatus.PENDING
    proposed_times: List[ProposedTime] = []
    confirmed_time: Optional[datetime] = None
    notes: Optional[str] = None
    room_id: Optional[str] = None
    scheduled_by: Optional[str] = None
    created_at: Optional[datetime] = None
