"""Tests for the quote/payment workflow."""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from talentbridge.constants import AUDIT_LOGS_TABLE, QUOTE_REQUESTS_TABLE, RELATIONS_TABLE
from talentbridge.errors import (
    AuthorizationError,
    DuplicatePendingQuoteError,
    EmployerNotVerifiedError,
    InvalidTransitionError,
    LockedByQuoteError,
    NoOptionSelectedError,
    NotFoundError,
    PaymentNotConfirmedError,
    PersistenceError,
)
from talentbridge.lifecycle import quotes
from talentbridge.main import build_services
from talentbridge.models.quote import QuoteDecision, QuoteRequest, QuoteStatus
from talentbridge.models.relation import PipelineStatus
from tests.conftest import CANDIDATE_ID, EMPLOYER_ID


def pending_quote():
    return QuoteRequest(id="q-1", relation_id="rel-1", employer_id=EMPLOYER_ID, candidate_id=CANDIDATE_ID)


class TestQuoteMachine:
    """Pure quote transitions."""

    def test_approve_attaches_default_packages(self):
        approved = quotes.approve(pending_quote())

        assert approved.status == QuoteStatus.APPROVED
        assert [option.name for option in approved.options] == ["Essential Package", "Executive Package"]
        assert approved.options[0].total == Decimal("10000")
        assert approved.options[1].total == Decimal("16000")

    def test_cost_estimate_overrides_essential_label(self):
        approved = quotes.approve(pending_quote(), cost_estimate="€9,000")

        assert approved.options[0].cost_estimate == "€9,000"
        assert approved.options[1].cost_estimate == "€15,000 - €18,000"

    def test_staff_options_lose_selected_flag(self):
        """Incoming options never arrive pre-selected."""
        options = quotes.build_options([
            {"name": "Custom", "items": [{"label": "Fee", "amount": 500}], "selected": True}
        ])

        assert options[0].selected is False
        assert options[0].id

    def test_select_option_is_exclusive(self):
        """Exactly one option is selected after each selection."""
        approved = quotes.approve(pending_quote())
        first, second = approved.options

        once = quotes.select_option(approved, first.id)
        twice = quotes.select_option(once, second.id)

        assert [option.selected for option in twice.options] == [False, True]
        assert twice.selected_option_id == second.id

    def test_select_unknown_option(self):
        with pytest.raises(NotFoundError):
            quotes.select_option(quotes.approve(pending_quote()), "missing")

    def test_select_requires_approved(self):
        with pytest.raises(InvalidTransitionError):
            quotes.select_option(pending_quote(), "any")

    def test_pay_requires_selection(self):
        with pytest.raises(NoOptionSelectedError):
            quotes.pay(quotes.approve(pending_quote()))

    def test_reject_only_from_pending(self):
        rejected = quotes.reject(pending_quote())

        assert rejected.status == QuoteStatus.REJECTED
        with pytest.raises(InvalidTransitionError):
            quotes.reject(rejected)

    def test_format_amount(self):
        assert quotes.format_amount(Decimal("10000")) == "€10,000.00"


class TestRequestQuote:

    def test_request_creates_relation_and_locks_it(self, services, db, employer_session, seed_candidate, seed_employer):
        """A first request creates the relation at asked_quote."""
        seed_candidate()
        seed_employer()

        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert quote.status == QuoteStatus.PENDING
        relation = db.rows(RELATIONS_TABLE)[0]
        assert relation["status"] == "asked_quote"
        assert relation["id"] == quote.relation_id
        assert db.rows(AUDIT_LOGS_TABLE)[-1]["action"] == "QUOTE_REQUESTED"

    def test_duplicate_request_rejected(self, services, db, employer_session, seed_candidate, seed_employer):
        """A second request while one is open stores nothing new."""
        seed_candidate()
        seed_employer()
        first = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        with pytest.raises(DuplicatePendingQuoteError) as exc_info:
            services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert exc_info.value.quote_id == first.id
        assert len(db.rows(QUOTE_REQUESTS_TABLE)) == 1

    def test_unverified_employer_refused(self, services, db, employer_session, seed_candidate, seed_employer):
        seed_candidate()
        seed_employer(verification_status="unverified")

        with pytest.raises(EmployerNotVerifiedError):
            services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert db.rows(QUOTE_REQUESTS_TABLE) == []

    def test_only_staff_resolve(self, services, employer_session, seed_candidate, seed_employer):
        seed_candidate()
        seed_employer()
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        with pytest.raises(AuthorizationError):
            services.quotes.resolve_quote(employer_session, quote.id, QuoteDecision.APPROVED)


class TestQuoteRoundTrip:
    """Full request -> approve -> select -> pay cycle."""

    def test_payment_hires_candidate(self, services, db, employer_session, staff_session, seed_candidate, seed_employer):
        seed_candidate()
        seed_employer()

        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)
        approved = services.quotes.resolve_quote(staff_session, quote.id, QuoteDecision.APPROVED)
        selected = services.quotes.select_option(employer_session, quote.id, approved.options[1].id)
        result = services.quotes.pay_quote(employer_session, quote.id)

        assert selected.selected_option.name == "Executive Package"
        assert result.quote.status == QuoteStatus.PAID
        assert result.quote.paid_at is not None
        assert result.relation.status == PipelineStatus.HIRED

        actions = [row["action"] for row in db.rows(AUDIT_LOGS_TABLE)]
        assert actions[-3:] == ["QUOTE_RESOLVED", "QUOTE_OPTION_SELECTED", "QUOTE_PAID"]

    def test_lock_holds_until_resolved(self, services, db, employer_session, staff_session, seed_candidate, seed_employer):
        """The relation cannot be dragged while the quote is open, then unlocks on rejection."""
        seed_candidate()
        seed_employer()
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        with pytest.raises(LockedByQuoteError):
            services.pipeline.update_relation_status(
                employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.SHORTLISTED
            )
        assert db.rows(RELATIONS_TABLE)[0]["status"] == "asked_quote"

        services.quotes.resolve_quote(staff_session, quote.id, QuoteDecision.REJECTED)
        update = services.pipeline.update_relation_status(
            employer_session, CANDIDATE_ID, EMPLOYER_ID, PipelineStatus.SHORTLISTED
        )
        assert update.relation.status == PipelineStatus.SHORTLISTED

    def test_new_request_allowed_after_payment(self, services, db, employer_session, staff_session, seed_candidate, seed_employer):
        """A paid quote no longer blocks a new request on the same relation."""
        seed_candidate()
        seed_employer()
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)
        approved = services.quotes.resolve_quote(staff_session, quote.id, QuoteDecision.APPROVED)
        services.quotes.select_option(employer_session, quote.id, approved.options[0].id)
        services.quotes.pay_quote(employer_session, quote.id)

        second = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert second.id != quote.id
        assert len(db.rows(QUOTE_REQUESTS_TABLE)) == 2
        assert db.rows(RELATIONS_TABLE)[0]["status"] == "hired"

    def test_pay_without_selection(self, services, employer_session, staff_session, seed_candidate, seed_employer):
        seed_candidate()
        seed_employer()
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)
        services.quotes.resolve_quote(staff_session, quote.id, QuoteDecision.APPROVED)

        with pytest.raises(NoOptionSelectedError):
            services.quotes.pay_quote(employer_session, quote.id)

    def test_declined_payment_changes_nothing(self, db, employer_session, staff_session, seed_candidate, seed_employer):
        """A gateway refusal leaves quote and relation untouched."""
        gateway = Mock()
        gateway.capture.return_value = False
        services = build_services(db, payment_gateway=gateway)
        seed_candidate()
        seed_employer()
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)
        approved = services.quotes.resolve_quote(staff_session, quote.id, QuoteDecision.APPROVED)
        services.quotes.select_option(employer_session, quote.id, approved.options[0].id)

        with pytest.raises(PaymentNotConfirmedError):
            services.quotes.pay_quote(employer_session, quote.id)

        gateway.capture.assert_called_once()
        assert db.rows(QUOTE_REQUESTS_TABLE)[0]["status"] == "approved"
        assert db.rows(RELATIONS_TABLE)[0]["status"] == "asked_quote"

    def test_payment_hires_from_any_stage(self, services, db, employer_session, staff_session, seed_candidate, seed_employer, seed_relation):
        """Even an interviewed relation ends hired."""
        seed_candidate()
        seed_employer()
        seed_relation(PipelineStatus.INTERVIEWED)
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)
        approved = services.quotes.resolve_quote(staff_session, quote.id, QuoteDecision.APPROVED)
        services.quotes.select_option(employer_session, quote.id, approved.options[0].id)

        result = services.quotes.pay_quote(employer_session, quote.id)

        assert result.relation.status == PipelineStatus.HIRED


def approve_and_select(services, employer_session, staff_session):
    """Request, approve and select the Essential Package; returns the quote ID."""
    quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)
    approved = services.quotes.resolve_quote(staff_session, quote.id, QuoteDecision.APPROVED)
    services.quotes.select_option(employer_session, quote.id, approved.options[0].id)
    return quote.id


class TestPaymentFailures:
    """Payment stays retryable when storage fails part way."""

    def test_relation_outage_blocks_capture(self, db, employer_session, staff_session, seed_candidate, seed_employer):
        """No money is taken when the relation cannot be loaded."""
        gateway = Mock()
        gateway.capture.return_value = True
        services = build_services(db, payment_gateway=gateway)
        seed_candidate()
        seed_employer()
        quote_id = approve_and_select(services, employer_session, staff_session)
        db.failing_tables.add(RELATIONS_TABLE)

        with pytest.raises(PersistenceError):
            services.quotes.pay_quote(employer_session, quote_id)

        gateway.capture.assert_not_called()
        assert db.rows(QUOTE_REQUESTS_TABLE)[0]["status"] == "approved"

    def test_retry_after_hire_write_failure(self, db, employer_session, staff_session, seed_candidate, seed_employer):
        """A paid quote whose relation was not hired finishes the hire on retry."""
        gateway = Mock()
        gateway.capture.return_value = True
        services = build_services(db, payment_gateway=gateway)
        seed_candidate()
        seed_employer()
        quote_id = approve_and_select(services, employer_session, staff_session)
        db.failing_writes.add(RELATIONS_TABLE)

        with pytest.raises(PersistenceError):
            services.quotes.pay_quote(employer_session, quote_id)

        assert db.rows(QUOTE_REQUESTS_TABLE)[0]["status"] == "paid"
        assert db.rows(RELATIONS_TABLE)[0]["status"] == "asked_quote"

        db.failing_writes.clear()
        result = services.quotes.pay_quote(employer_session, quote_id)

        assert result.quote.status == QuoteStatus.PAID
        assert result.relation.status == PipelineStatus.HIRED
        assert db.rows(RELATIONS_TABLE)[0]["status"] == "hired"
        gateway.capture.assert_called_once()

    def test_retry_after_quote_write_failure_charges_once(self, services, db, employer_session, staff_session, seed_candidate, seed_employer):
        """The gateway keys captures by quote, so a retry does not charge twice."""
        seed_candidate()
        seed_employer()
        quote_id = approve_and_select(services, employer_session, staff_session)
        db.failing_writes.add(QUOTE_REQUESTS_TABLE)

        with pytest.raises(PersistenceError):
            services.quotes.pay_quote(employer_session, quote_id)

        assert db.rows(QUOTE_REQUESTS_TABLE)[0]["status"] == "approved"

        db.failing_writes.clear()
        result = services.quotes.pay_quote(employer_session, quote_id)

        assert result.relation.status == PipelineStatus.HIRED
        assert services.quotes.payment_gateway.captured == {quote_id: Decimal("10000")}

    def test_paying_twice_is_harmless(self, services, db, employer_session, staff_session, seed_candidate, seed_employer):
        seed_candidate()
        seed_employer()
        quote_id = approve_and_select(services, employer_session, staff_session)

        services.quotes.pay_quote(employer_session, quote_id)
        again = services.quotes.pay_quote(employer_session, quote_id)

        assert again.relation.status == PipelineStatus.HIRED
        assert len(services.quotes.payment_gateway.captured) == 1


class TestRequestQuoteFailures:

    def test_relation_write_failure_leaves_no_quote(self, services, db, employer_session, seed_candidate, seed_employer, seed_relation):
        """The relation is advanced before the quote exists, so a retry is not a duplicate."""
        seed_candidate()
        seed_employer()
        seed_relation(PipelineStatus.SHORTLISTED)
        db.failing_writes.add(RELATIONS_TABLE)

        with pytest.raises(PersistenceError):
            services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert db.rows(QUOTE_REQUESTS_TABLE) == []

        db.failing_writes.clear()
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert quote.status == QuoteStatus.PENDING
        assert db.rows(RELATIONS_TABLE)[0]["status"] == "asked_quote"

    def test_quote_insert_failure_can_be_retried(self, services, db, employer_session, seed_candidate, seed_employer, seed_relation):
        seed_candidate()
        seed_employer()
        seed_relation(PipelineStatus.SHORTLISTED)
        db.failing_writes.add(QUOTE_REQUESTS_TABLE)

        with pytest.raises(PersistenceError):
            services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        db.failing_writes.clear()
        quote = services.quotes.request_quote(employer_session, CANDIDATE_ID, EMPLOYER_ID)

        assert len(db.rows(QUOTE_REQUESTS_TABLE)) == 1
        assert quote.relation_id == "rel-1"
