"""Error taxonomy for the candidate lifecycle engine.

Every rejected transition raises one of these. Each error carries a stable
``code`` plus optional ``details`` so callers (and the HTTP layer) can tell
the actor exactly which requirement failed.
"""

from typing import Any, Dict, List, Optional


class LifecycleError(Exception):
    """Base class for all lifecycle errors.

    Attributes:
        code: Stable machine-readable error code.
        message: Human-readable description.
        details: Extra structured data for the caller.
    """

    code = "lifecycle_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses."""
        payload = {"error": self.code, "detail": self.message}
        payload.update(self.details)
        return payload


# Guard violations: recoverable by the actor fixing the named requirement

class GuardViolationError(LifecycleError):
    code = "guard_violation"


class IncompleteProfileError(GuardViolationError):
    """Submission attempted while checklist items are still missing."""

    code = "incomplete_profile"

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            f"Profile is incomplete, missing: {', '.join(self.missing)}",
            {"missing": self.missing},
        )


class InvalidTransitionError(GuardViolationError):
    code = "invalid_transition"

    def __init__(self, machine: str, current: str, event: str):
        self.machine = machine
        self.current = current
        self.event = event
        super().__init__(
            f"Cannot {event} a {machine} in status '{current}'",
            {"machine": machine, "current": current, "event": event},
        )


class MissingReasonError(GuardViolationError):
    code = "missing_reason"

    def __init__(self):
        super().__init__("A rejection reason is required")


class LockedByQuoteError(GuardViolationError):
    code = "locked_by_quote"

    def __init__(self, candidate_id: str, quote_id: str):
        super().__init__(
            "This candidate has an open quote request. "
            "The status cannot change until the quote is resolved.",
            {"candidate_id": candidate_id, "quote_id": quote_id},
        )


class TerminalStageLockedError(GuardViolationError):
    code = "terminal_stage_locked"

    def __init__(self, candidate_id: str, status: str):
        super().__init__(
            "Candidates in the interview stage or beyond must progress "
            "via the quote/payment flow.",
            {"candidate_id": candidate_id, "status": status},
        )


class CandidateNotVerifiedError(GuardViolationError):
    code = "candidate_not_verified"

    def __init__(self, candidate_id: str):
        super().__init__(
            f"Candidate {candidate_id} must be verified first",
            {"candidate_id": candidate_id},
        )


class EmployerNotVerifiedError(GuardViolationError):
    code = "employer_not_verified"

    def __init__(self, employer_id: str):
        super().__init__(
            "Verified account required",
            {"employer_id": employer_id},
        )


class StageNotSchedulableError(GuardViolationError):
    code = "stage_not_schedulable"

    def __init__(self, status: str):
        super().__init__(
            f"Interviews cannot be scheduled while the candidate is '{status}'",
            {"status": status},
        )


class NoOptionSelectedError(GuardViolationError):
    code = "no_option_selected"

    def __init__(self, quote_id: str):
        super().__init__(
            f"Quote request {quote_id} has no selected option",
            {"quote_id": quote_id},
        )


class PaymentNotConfirmedError(GuardViolationError):
    code = "payment_not_confirmed"

    def __init__(self, quote_id: str):
        super().__init__(
            f"Payment for quote request {quote_id} was not confirmed",
            {"quote_id": quote_id},
        )


# Duplicates: the UI treats these as idempotent success

class DuplicateRequestError(LifecycleError):
    code = "duplicate_request"


class DuplicatePendingQuoteError(DuplicateRequestError):
    code = "duplicate_pending_quote"

    def __init__(self, quote_id: str):
        self.quote_id = quote_id
        super().__init__(
            "Quote request already exists",
            {"quote_id": quote_id},
        )


class AuthorizationError(LifecycleError):
    code = "forbidden"


class NotFoundError(LifecycleError):
    code = "not_found"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} with ID {entity_id} not found")


class PersistenceError(LifecycleError):
    code = "persistence_error"


class TransitionInFlightError(LifecycleError):
    code = "transition_in_flight"

    def __init__(self, candidate_id: str):
        super().__init__(
            f"A status change for candidate {candidate_id} is already in progress",
            {"candidate_id": candidate_id},
        )
