"""Repository for audit log entries."""

from typing import List, Optional

from supabase import Client

from talentbridge.constants import AUDIT_LOGS_TABLE
from talentbridge.models.audit import AuditLogEntry
from talentbridge.repositories.base_repository import BaseRepository


class AuditLogRepository(BaseRepository):
    """Append-only store of recorded actions."""

    entity_name = "Audit log entry"
    model_class = AuditLogEntry

    def __init__(self, db_client: Client):
        super().__init__(db_client, AUDIT_LOGS_TABLE)

    def list_recent(self, limit: int = 100, action: Optional[str] = None) -> List[AuditLogEntry]:
        """Retrieve the newest entries, optionally for one action code."""
        filters = {"action": action} if action else None
        return self.find_models(filters, order_by="created_at", limit=limit)
