"""Tests for the pipeline state machine and PipelineService."""

import pytest

from talentbridge.constants import AUDIT_LOGS_TABLE, QUOTE_REQUESTS_TABLE, RELATIONS_TABLE
from talentbridge.errors import (
    AuthorizationError,
    EmployerNotVerifiedError,
    LockedByQuoteError,
    PersistenceError,
    TerminalStageLockedError,
)
from talentbridge.lifecycle import pipeline
from talentbridge.models.quote import QuoteRequest, QuoteStatus
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus
from tests.conftest import CANDIDATE_ID, EMPLOYER_ID


def make_relation(status):
    return EmployerCandidateRelation(
        id="rel-1", employer_id=EMPLOYER_ID, candidate_id=CANDIDATE_ID, status=status
    )


def make_quote(status):
    return QuoteRequest(
        id="q-1", relation_id="rel-1", employer_id=EMPLOYER_ID, candidate_id=CANDIDATE_ID, status=status
    )


class TestMove:
    """Direct moves and their guards."""

    def test_free_move_any_direction(self):
        """Without locks, moves in either direction are accepted."""
        moved = pipeline.move(make_relation(PipelineStatus.SHORTLISTED), PipelineStatus.POTENTIAL)

        assert moved.status == PipelineStatus.POTENTIAL
        assert moved.updated_at is not None

    def test_move_to_same_status_is_noop(self):
        relation = make_relation(PipelineStatus.SHORTLISTED)

        assert pipeline.move(relation, PipelineStatus.SHORTLISTED) is relation

    @pytest.mark.parametrize("quote_status", [QuoteStatus.PENDING, QuoteStatus.APPROVED])
    def test_open_quote_locks_relation(self, quote_status):
        """An open quote pins the relation at asked_quote."""
        relation = make_relation(PipelineStatus.ASKED_QUOTE)

        with pytest.raises(LockedByQuoteError) as exc_info:
            pipeline.move(relation, PipelineStatus.SHORTLISTED, make_quote(quote_status))

        assert exc_info.value.details["quote_id"] == "q-1"
        assert relation.status == PipelineStatus.ASKED_QUOTE

    @pytest.mark.parametrize("quote_status", [QuoteStatus.REJECTED, QuoteStatus.PAID])
    def test_closed_quote_does_not_lock(self, quote_status):
        relation = make_relation(PipelineStatus.ASKED_QUOTE)

        moved = pipeline.move(relation, PipelineStatus.SHORTLISTED, make_quote(quote_status))

        assert moved.status == PipelineStatus.SHORTLISTED

    @pytest.mark.parametrize("status", [PipelineStatus.INTERVIEWED, PipelineStatus.HIRED])
    def test_terminal_stages_refuse_direct_moves(self, status):
        """Interviewed and hired never move by drag."""
        with pytest.raises(TerminalStageLockedError):
            pipeline.move(make_relation(status), PipelineStatus.SHORTLISTED)

    def test_force_status_bypasses_guards(self):
        relation = make_relation(PipelineStatus.INTERVIEWED)

        assert pipeline.force_status(relation, PipelineStatus.HIRED).status == PipelineStatus.HIRED

    def test_advance_never_moves_backwards(self):
        hired = make_relation(PipelineStatus.HIRED)
        shortlisted = make_relation(PipelineStatus.SHORTLISTED)

        assert pipeline.advance_to_at_least(hired, PipelineStatus.INTERVIEWED) is hired
        assert pipeline.advance_to_at_least(shortlisted, PipelineStatus.INTERVIEWED).status == PipelineStatus.INTERVIEWED

    def test_lock_reason(self):
        assert pipeline.lock_reason(make_relation(PipelineStatus.ASKED_QUOTE), make_quote(QuoteStatus.PENDING)) == "quote"
        assert pipeline.lock_reason(make_relation(PipelineStatus.HIRED)) == "terminal"
        assert pipeline.lock_reason(make_relation(PipelineStatus.POTENTIAL)) is None


class TestUpdateRelationStatus:
    """Moves through the service."""

    def test_creates_relation_on_first_move(self, services, db, employer_session, seed_candidate):
        seed_candidate()

        update = services.pipeline.update_relation_status(
            employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.SHORTLISTED
        )

        assert update.relation.status == PipelineStatus.SHORTLISTED
        assert len(db.rows(RELATIONS_TABLE)) == 1
        assert db.rows(AUDIT_LOGS_TABLE)[-1]["action"] == "CANDIDATE_STATUS_UPDATED"

    def test_entering_asked_quote_creates_quote(self, services, db, employer_session, seed_candidate, seed_employer, seed_relation):
        seed_candidate()
        seed_employer()
        seed_relation(PipelineStatus.SHORTLISTED)

        update = services.pipeline.update_relation_status(
            employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.ASKED_QUOTE
        )

        assert update.quote_created is True
        assert update.quote_already_pending is False
        assert update.quote.status == QuoteStatus.PENDING
        assert len(db.rows(QUOTE_REQUESTS_TABLE)) == 1

    def test_existing_quote_reported_not_duplicated(self, services, db, employer_session, seed_candidate, seed_employer, seed_relation):
        """Re-entering asked_quote reuses the open quote."""
        seed_candidate()
        seed_employer()
        seed_relation(PipelineStatus.SHORTLISTED)
        db.seed(QUOTE_REQUESTS_TABLE, make_quote(QuoteStatus.PENDING).model_dump(mode="json"))

        update = services.pipeline.update_relation_status(
            employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.ASKED_QUOTE
        )

        assert update.quote_already_pending is True
        assert update.quote.id == "q-1"
        assert len(db.rows(QUOTE_REQUESTS_TABLE)) == 1

    def test_unverified_employer_cannot_enter_asked_quote(self, services, db, employer_session, seed_candidate, seed_employer, seed_relation):
        seed_candidate()
        seed_employer(verification_status="pending")
        seed_relation(PipelineStatus.SHORTLISTED)

        with pytest.raises(EmployerNotVerifiedError):
            services.pipeline.update_relation_status(
                employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.ASKED_QUOTE
            )

        assert db.rows(RELATIONS_TABLE)[0]["status"] == "shortlisted"

    def test_locked_move_leaves_status_unchanged(self, services, db, employer_session, seed_candidate, seed_relation):
        seed_candidate()
        seed_relation(PipelineStatus.ASKED_QUOTE)
        db.seed(QUOTE_REQUESTS_TABLE, make_quote(QuoteStatus.APPROVED).model_dump(mode="json"))

        with pytest.raises(LockedByQuoteError):
            services.pipeline.update_relation_status(
                employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.POTENTIAL
            )

        assert db.rows(RELATIONS_TABLE)[0]["status"] == "asked_quote"

    def test_interviewed_to_shortlisted_rejected(self, services, db, employer_session, seed_candidate, seed_relation):
        """Dragging an interviewed candidate back is refused."""
        seed_candidate()
        seed_relation(PipelineStatus.INTERVIEWED)

        with pytest.raises(TerminalStageLockedError):
            services.pipeline.update_relation_status(
                employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.SHORTLISTED
            )

        assert db.rows(RELATIONS_TABLE)[0]["status"] == "interviewed"

    def test_other_employer_cannot_move(self, services, employer_session, seed_candidate):
        seed_candidate()

        with pytest.raises(AuthorizationError):
            services.pipeline.update_relation_status(
                employer_session, CANDIDATE_ID, "emp-2", PipelineStatus.SHORTLISTED
            )

    def test_database_failure_raises_persistence_error(self, services, db, employer_session, seed_candidate, seed_relation):
        seed_candidate()
        seed_relation(PipelineStatus.POTENTIAL)
        db.failing_tables.add(RELATIONS_TABLE)

        with pytest.raises(PersistenceError):
            services.pipeline.update_relation_status(
                employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.SHORTLISTED
            )


class TestListRelations:

    def test_lock_flags_are_derived(self, services, db, employer_session, seed_candidate, seed_relation):
        """Listings mark quote-locked and terminal cards."""
        seed_candidate()
        seed_relation(PipelineStatus.ASKED_QUOTE)
        seed_relation(PipelineStatus.HIRED, id="rel-2", candidate_id="cand-2")
        db.seed(QUOTE_REQUESTS_TABLE, make_quote(QuoteStatus.PENDING).model_dump(mode="json"))

        views = {view.relation.id: view for view in services.pipeline.list_relations(employer_session, EMPLOYER_ID)}

        assert views["rel-1"].locked_by_quote is True
        assert views["rel-1"].candidate.id == CANDIDATE_ID
        assert views["rel-2"].terminal_locked is True
        assert views["rel-2"].locked_by_quote is False

    def test_all_relations_is_staff_only(self, services, employer_session):
        with pytest.raises(AuthorizationError):
            services.pipeline.list_all_relations(employer_session)

    def test_get_or_create_relation_is_idempotent(self, services, db, employer_session, seed_candidate):
        """A second call returns the stored relation rather than a new one."""
        seed_candidate()

        first = services.pipeline.get_or_create_relation(employer_session, CANDIDATE_ID, EMPLOYER_ID)
        second = services.pipeline.get_or_create_relation(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert first.id == second.id
        assert first.status == PipelineStatus.POTENTIAL
        assert len(db.rows(RELATIONS_TABLE)) == 1
