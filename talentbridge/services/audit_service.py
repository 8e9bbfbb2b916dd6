"""Service for recording and listing audited actions."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from talentbridge.errors import PersistenceError
from talentbridge.models.audit import AuditLogEntry
from talentbridge.models.session import Session
from talentbridge.repositories.audit_repository import AuditLogRepository
from talentbridge.services.authorization import require_staff

logger = logging.getLogger(__name__)


class AuditService:
    """Records every accepted lifecycle action.

    Attributes:
        audit_repository: Repository for audit log entries.
    """

    def __init__(self, audit_repository: AuditLogRepository):
        self.audit_repository = audit_repository

    def record(self, session: Session, action: str, details: str) -> Optional[AuditLogEntry]:
        """Write an audit entry for an action that already succeeded.

        A failed write is logged but does not undo the action.

        Args:
            session: Caller who performed the action.
            action: Action code (e.g., "QUOTE_RESOLVED").
            details: Human-readable description.

        Returns:
            The stored entry, or None if the write failed.
        """
        logger.info(f"{action} by {session.user_id}: {details}")

        entry = AuditLogEntry(
            user_id=session.user_id,
            action=action,
            details=details,
            created_at=datetime.now(timezone.utc)
        )

        try:
            return self.audit_repository.insert_model(entry)
        except PersistenceError as error:
            logger.error(f"Failed to write audit entry {action}: {error.message}")
            return None

    def list_recent(
        self,
        session: Session,
        limit: int = 100,
        action: Optional[str] = None
    ) -> List[AuditLogEntry]:
        """List the newest audit entries (staff only)."""
        require_staff(session)
        return self.audit_repository.list_recent(limit=limit, action=action)
