"""Repository for employer/candidate pipeline relations."""

from typing import List, Optional

from supabase import Client

from talentbridge.constants import RELATIONS_TABLE
from talentbridge.models.relation import EmployerCandidateRelation
from talentbridge.repositories.base_repository import BaseRepository


class RelationRepository(BaseRepository):
    """Repository for pipeline relations.

    Relations are keyed by the (employer_id, candidate_id) pair and are
    never deleted, only status-transitioned.
    """

    entity_name = "Relation"
    model_class = EmployerCandidateRelation

    def __init__(self, db_client: Client):
        super().__init__(db_client, RELATIONS_TABLE)

    def get_by_pair(self, employer_id: str, candidate_id: str) -> Optional[EmployerCandidateRelation]:
        """Retrieve the relation between one employer and one candidate.

        Args:
            employer_id: Employer's unique identifier.
            candidate_id: Candidate's unique identifier.

        Returns:
            The relation if the employer has engaged the candidate, None otherwise.
        """
        return self.to_model(self.find_one(employer_id=employer_id, candidate_id=candidate_id))

    def list_for_employer(self, employer_id: str) -> List[EmployerCandidateRelation]:
        return self.find_models({"employer_id": employer_id}, order_by="updated_at")

    def list_all(self) -> List[EmployerCandidateRelation]:
        return self.find_models(order_by="updated_at")

    def delete(self, record_id: str) -> bool:
        raise NotImplementedError("Relations are never deleted")
