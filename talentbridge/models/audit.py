"""Pydantic model for audit log entries."""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AuditLogEntry(BaseModel):
    """One recorded action.

    Attributes:
        id: Unique entry identifier.
        user_id: User who performed the action.
        action: Action code (e.g., "QUOTE_RESOLVED").
        details: Human-readable description.
        created_at: When the action happened.
    """
    id: Optional[str] = None
    user_id: str
    action: str
    details: Optional[str] = None
    created_at: Optional[datetime] = None
