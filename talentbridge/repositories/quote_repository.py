"""Repository for quote requests."""

from typing import Dict, Iterable, List, Optional

from supabase import Client

from talentbridge.constants import QUOTE_REQUESTS_TABLE
from talentbridge.lifecycle.quotes import OPEN_QUOTE_STATUSES
from talentbridge.models.quote import QuoteRequest
from talentbridge.repositories.base_repository import BaseRepository


class QuoteRepository(BaseRepository):
    """Repository for quote requests and their options.

    Options are stored as a JSONB array on the request row.
    """

    entity_name = "Quote request"
    model_class = QuoteRequest

    def __init__(self, db_client: Client):
        super().__init__(db_client, QUOTE_REQUESTS_TABLE)

    def get_open_for_relation(self, relation_id: str) -> Optional[QuoteRequest]:
        """Retrieve the open (pending or approved) quote of a relation.

        Args:
            relation_id: The relation's unique identifier.

        Returns:
            The most recent open quote request, or None.
        """
        rows = self.find_many(
            {"relation_id": relation_id},
            in_filters={"status": [status.value for status in OPEN_QUOTE_STATUSES]},
            order_by="requested_at",
            limit=1
        )
        return self.to_model(rows[0]) if rows else None

    def get_open_for_relations(self, relation_ids: Iterable[str]) -> Dict[str, QuoteRequest]:
        """Map relation ID -> open quote for a batch of relations."""
        relation_ids = list(relation_ids)
        if not relation_ids:
            return {}

        quotes = self.find_models(
            in_filters={
                "relation_id": relation_ids,
                "status": [status.value for status in OPEN_QUOTE_STATUSES],
            },
            order_by="requested_at",
            desc=False
        )
        # Ascending order, so the newest open quote wins
        return {quote.relation_id: quote for quote in quotes}

    def list_for_employer(self, employer_id: str) -> List[QuoteRequest]:
        return self.find_models({"employer_id": employer_id}, order_by="requested_at")

    def list_all(self) -> List[QuoteRequest]:
        return self.find_models(order_by="requested_at")
