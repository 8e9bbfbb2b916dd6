"""Pydantic models for candidate document metadata."""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class DocumentType(str, Enum):
    """Kind of uploaded document."""
    CV = "cv"
    RESUME = "resume"
    PASSPORT = "passport"
    CERTIFICATE = "certificate"
    DIPLOMA = "diploma"
    REFERENCE = "reference"
    OTHER = "other"


class DocumentStatus(str, Enum):
    """Staff review state of a document."""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Document(BaseModel):
    """Metadata for a file the candidate uploaded.

    The file itself lives in external storage; only metadata is kept here.

    Attributes:
        id: Unique document identifier.
        candidate_id: Owning candidate.
        type: Document type, used for checklist classification.
        name: Display name.
        file_name: Name of the stored file.
        status: Review state.
        uploaded_at: Upload timestamp.
        verified_at: When staff approved the document.
        verified_by: Staff member who reviewed it.
        rejection_reason: Reason given when rejected.
    """
    id: Optional[str] = None
    candidate_id: str
    type: str
    name: Optional[str] = None
    file_name: Optional[str] = None
    status: DocumentStatus = DocumentStatus.PENDING
    uploaded_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    rejection_reason: Optional[str] = None
