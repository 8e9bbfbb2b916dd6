"""Repository for interview data access operations."""

from typing import List

from supabase import Client

from talentbridge.constants import INTERVIEWS_TABLE
from talentbridge.models.interview import Interview
from talentbridge.repositories.base_repository import BaseRepository


class InterviewRepository(BaseRepository):
    """Repository for managing interview persistence.

    Proposed time slots are stored as a JSONB array on the interview row.
    """

    entity_name = "Interview"
    model_class = Interview

    def __init__(self, db_client: Client):
        """Initialize the repository with a database client.

        Args:
            db_client: Supabase client instance.
        """
        super().__init__(db_client, INTERVIEWS_TABLE)

    def list_for_participant(self, user_id: str) -> List[Interview]:
        """Retrieve interviews where the user is the employer or the candidate.

        Args:
            user_id: Employer or candidate ID.

        Returns:
            Interviews sorted newest first.
        """
        as_employer = self.find_models({"employer_id": user_id}, order_by="created_at")
        as_candidate = self.find_models({"candidate_id": user_id}, order_by="created_at")

        merged = {interview.id: interview for interview in as_employer + as_candidate}
        return sorted(
            merged.values(),
            key=lambda interview: interview.created_at.timestamp() if interview.created_at else 0,
            reverse=True
        )

    def list_all(self) -> List[Interview]:
        return self.find_models(order_by="created_at")
