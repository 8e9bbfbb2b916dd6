"""Repository for candidate and employer account data."""

from typing import List

from supabase import Client

from talentbridge.constants import CANDIDATES_TABLE, EMPLOYERS_TABLE
from talentbridge.models.candidate import Candidate, VerificationStatus
from talentbridge.models.employer import Employer
from talentbridge.repositories.base_repository import BaseRepository


class CandidateRepository(BaseRepository):
    """Repository for managing candidate profile persistence.

    Attributes:
        db_client: Supabase client instance for database operations.
        table_name: Name of the candidates table.
    """

    entity_name = "Candidate"
    model_class = Candidate

    def __init__(self, db_client: Client):
        """Initialize the repository with a database client.

        Args:
            db_client: Supabase client instance.
        """
        super().__init__(db_client, CANDIDATES_TABLE)

    def list_by_verification_status(self, status: VerificationStatus) -> List[Candidate]:
        """Retrieve all candidates in a verification status.

        Args:
            status: Verification status to filter on.

        Returns:
            Candidates ordered by most recently updated first.
        """
        return self.find_models(
            {"verification_status": VerificationStatus(status).value},
            order_by="updated_at"
        )


class EmployerRepository(BaseRepository):
    """Repository for managing employer account persistence."""

    entity_name = "Employer"
    model_class = Employer

    def __init__(self, db_client: Client):
        super().__init__(db_client, EMPLOYERS_TABLE)

    def list_by_verification_status(self, status: VerificationStatus) -> List[Employer]:
        return self.find_models(
            {"verification_status": VerificationStatus(status).value},
            order_by="updated_at"
        )
