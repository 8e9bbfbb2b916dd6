"""Repository for candidate document metadata."""

from typing import List

from supabase import Client

from talentbridge.constants import DOCUMENTS_TABLE
from talentbridge.models.document import Document, DocumentStatus
from talentbridge.repositories.base_repository import BaseRepository


class DocumentRepository(BaseRepository):
    """Repository for document metadata.

    Only metadata lives here; file bytes are kept by the storage service.
    """

    entity_name = "Document"
    model_class = Document

    def __init__(self, db_client: Client):
        super().__init__(db_client, DOCUMENTS_TABLE)

    def list_for_candidate(self, candidate_id: str) -> List[Document]:
        """Retrieve all documents uploaded by a candidate, newest first.

        Args:
            candidate_id: The candidate's unique identifier.

        Returns:
            List of Document models.
        """
        return self.find_models({"candidate_id": candidate_id}, order_by="uploaded_at")

    def list_by_status(self, status: DocumentStatus) -> List[Document]:
        return self.find_models({"status": DocumentStatus(status).value}, order_by="uploaded_at")
