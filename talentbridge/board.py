"""Client-side view of an employer's pipeline with optimistic moves.

A move is applied locally first, then persisted. The server's answer is
committed over the local guess; a failure rolls the card back and the
board reloads from the server.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set

from talentbridge.errors import NotFoundError, TransitionInFlightError
from talentbridge.lifecycle import pipeline
from talentbridge.models.quote import QuoteRequest
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus
from talentbridge.services.pipeline_service import RelationUpdate, RelationView

logger = logging.getLogger(__name__)


@dataclass
class PendingMove:
    """A move applied locally but not yet confirmed by the server."""
    candidate_id: str
    previous: EmployerCandidateRelation
    target: PipelineStatus


class PipelineBoard:
    """Local pipeline state for one employer.

    Only one move per candidate may be in flight; a second move on the same
    card raises TransitionInFlightError until the first commits or rolls back.

    Attributes:
        relations: Candidate ID -> relation as currently displayed.
        open_quotes: Candidate ID -> open quote, used to derive the lock.
    """

    def __init__(self, views: Optional[Iterable[RelationView]] = None):
        self.relations: Dict[str, EmployerCandidateRelation] = {}
        self.open_quotes: Dict[str, QuoteRequest] = {}
        self._in_flight: Set[str] = set()
        self.reload(views or [])

    def reload(self, views: Iterable[RelationView]) -> None:
        """Replace the local state with a fresh server listing."""
        views = list(views)
        self.relations = {view.relation.candidate_id: view.relation for view in views}
        self.open_quotes = {
            view.relation.candidate_id: view.open_quote
            for view in views
            if view.open_quote is not None
        }
        self._in_flight.clear()

    def get(self, candidate_id: str) -> EmployerCandidateRelation:
        relation = self.relations.get(candidate_id)
        if relation is None:
            raise NotFoundError("Relation for candidate", candidate_id)
        return relation

    def column(self, status: PipelineStatus) -> List[EmployerCandidateRelation]:
        """Cards currently displayed in one pipeline column."""
        status = PipelineStatus(status)
        return [relation for relation in self.relations.values() if relation.status == status]

    def lock_reason(self, candidate_id: str) -> Optional[str]:
        return pipeline.lock_reason(self.get(candidate_id), self.open_quotes.get(candidate_id))

    def is_busy(self, candidate_id: str) -> bool:
        return candidate_id in self._in_flight

    def apply_optimistic(self, candidate_id: str, status: PipelineStatus) -> PendingMove:
        """Show a move locally before the server has confirmed it.

        Raises:
            TransitionInFlightError: If the card already has a move in flight.
            LockedByQuoteError: If an open quote holds the card.
            TerminalStageLockedError: If the card is interviewed or hired.
        """
        if self.is_busy(candidate_id):
            raise TransitionInFlightError(candidate_id)

        previous = self.get(candidate_id)
        moved = pipeline.move(previous, status, self.open_quotes.get(candidate_id))

        self.relations[candidate_id] = moved
        self._in_flight.add(candidate_id)
        return PendingMove(candidate_id=candidate_id, previous=previous, target=PipelineStatus(status))

    def commit(self, pending: PendingMove, update: RelationUpdate) -> EmployerCandidateRelation:
        """Replace the optimistic guess with the server's relation."""
        self.relations[pending.candidate_id] = update.relation
        if update.quote is not None:
            self.open_quotes[pending.candidate_id] = update.quote
        self._in_flight.discard(pending.candidate_id)
        return update.relation

    def rollback(self, pending: PendingMove) -> EmployerCandidateRelation:
        """Restore the card to where it was before the optimistic move."""
        self.relations[pending.candidate_id] = pending.previous
        self._in_flight.discard(pending.candidate_id)
        logger.warning(
            f"Rolled back move of candidate {pending.candidate_id} to {pending.target.value}"
        )
        return pending.previous

    def move_card(
        self,
        candidate_id: str,
        status: PipelineStatus,
        persist: Callable[[str, PipelineStatus], RelationUpdate],
        load: Optional[Callable[[], List[RelationView]]] = None
    ) -> EmployerCandidateRelation:
        """Run the full optimistic protocol for one drag.

        Args:
            candidate_id: Card being moved.
            status: Target column.
            persist: Sends the move to the server and returns its RelationUpdate.
            load: Fetches a fresh listing after a failed move.

        Returns:
            The relation as confirmed by the server.

        Raises:
            LifecycleError: Whatever the local guards or the server rejected with.
            Exception: Transport failures from ``persist`` are re-raised after
                the card is rolled back.
        """
        pending = self.apply_optimistic(candidate_id, status)
        try:
            update = persist(candidate_id, pending.target)
        except Exception:
            self.rollback(pending)
            if load is not None:
                self.reload(load())
            raise
        return self.commit(pending, update)
