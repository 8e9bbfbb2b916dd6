"""Quote/payment state machine.

    pending --approve--> approved --select_option--> approved (+selection) --pay--> paid
    pending --reject--> rejected

A quote is "open" while pending or approved; an open quote locks its
relation at asked_quote and blocks a second request on the same relation.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from talentbridge.constants import CURRENCY_SYMBOL, DEFAULT_QUOTE_PACKAGES
from talentbridge.errors import InvalidTransitionError, NoOptionSelectedError, NotFoundError
from talentbridge.models.quote import QuoteOption, QuoteRequest, QuoteStatus


OPEN_QUOTE_STATUSES = (QuoteStatus.PENDING, QuoteStatus.APPROVED)


def is_open(quote: QuoteRequest) -> bool:
    return quote.status in OPEN_QUOTE_STATUSES


def _require_status(quote: QuoteRequest, expected: QuoteStatus, event: str) -> None:
    if quote.status != expected:
        raise InvalidTransitionError("quote request", QuoteStatus(quote.status).value, event)


def default_options(cost_estimate: Optional[str] = None) -> List[QuoteOption]:
    """Build the standard Essential/Executive packages with fresh IDs.

    Args:
        cost_estimate: Optional staff estimate replacing the Essential label.
    """
    options = []
    for index, package in enumerate(DEFAULT_QUOTE_PACKAGES):
        data = dict(package)
        if index == 0 and cost_estimate:
            data["cost_estimate"] = cost_estimate
        options.append(QuoteOption(id=str(uuid.uuid4()), **data))
    return options


def build_options(raw_options: List[Dict[str, Any]]) -> List[QuoteOption]:
    """Validate staff-supplied options, assigning IDs where missing.

    Any incoming ``selected`` flag is cleared; selection belongs to the employer.
    """
    options = []
    for raw in raw_options:
        data = dict(raw)
        data.setdefault("id", str(uuid.uuid4()))
        data["selected"] = False
        options.append(QuoteOption(**data))
    return options


def approve(
    quote: QuoteRequest,
    options: Optional[List[QuoteOption]] = None,
    cost_estimate: Optional[str] = None
) -> QuoteRequest:
    """Approve a pending quote and attach its options."""
    _require_status(quote, QuoteStatus.PENDING, "approve")

    return quote.model_copy(update={
        "status": QuoteStatus.APPROVED,
        "options": options if options else default_options(cost_estimate),
        "cost_estimate": cost_estimate,
        "resolved_at": datetime.now(timezone.utc),
    })


def reject(quote: QuoteRequest) -> QuoteRequest:
    """Reject a pending quote. Terminal; unlocks the relation."""
    _require_status(quote, QuoteStatus.PENDING, "reject")

    return quote.model_copy(update={
        "status": QuoteStatus.REJECTED,
        "resolved_at": datetime.now(timezone.utc),
    })


def select_option(quote: QuoteRequest, option_id: str) -> QuoteRequest:
    """Select one option, clearing any previous selection.

    Raises:
        InvalidTransitionError: If the quote is not approved.
        NotFoundError: If no option has ``option_id``.
    """
    _require_status(quote, QuoteStatus.APPROVED, "select an option on")

    if not any(option.id == option_id for option in quote.options):
        raise NotFoundError("Quote option", option_id)

    options = [
        option.model_copy(update={"selected": option.id == option_id})
        for option in quote.options
    ]
    return quote.model_copy(update={"options": options, "selected_option_id": option_id})


def pay(quote: QuoteRequest) -> QuoteRequest:
    """Mark an approved quote with a selected option as paid.

    Raises:
        InvalidTransitionError: If the quote is not approved.
        NoOptionSelectedError: If no option was selected.
    """
    _require_status(quote, QuoteStatus.APPROVED, "pay")

    if quote.selected_option is None:
        raise NoOptionSelectedError(quote.id)

    return quote.model_copy(update={
        "status": QuoteStatus.PAID,
        "paid_at": datetime.now(timezone.utc),
    })


def format_amount(amount: Decimal, symbol: str = CURRENCY_SYMBOL) -> str:
    """Render an amount for display, e.g. ``€10,000.00``."""
    return f"{symbol}{Decimal(amount):,.2f}"
