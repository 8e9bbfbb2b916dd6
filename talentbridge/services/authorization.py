"""Role and ownership checks run before any mutation."""

from talentbridge.errors import AuthorizationError
from talentbridge.models.session import Role, Session


def require_role(session: Session, *roles: Role) -> None:
    """Raise AuthorizationError unless the caller has one of ``roles``."""
    if session.role not in roles:
        allowed = ", ".join(role.value for role in roles)
        raise AuthorizationError(f"This action requires one of the roles: {allowed}")


def require_staff(session: Session) -> None:
    require_role(session, Role.STAFF, Role.ADMIN)


def require_candidate_owner(session: Session, candidate_id: str) -> None:
    """Only the candidate themself may act."""
    if session.role != Role.CANDIDATE or session.user_id != candidate_id:
        raise AuthorizationError("Only the candidate may perform this action")


def require_employer_owner(session: Session, employer_id: str) -> None:
    """Only the employer owning the relation may act."""
    if session.role != Role.EMPLOYER or session.user_id != employer_id:
        raise AuthorizationError("Only the relation's employer may perform this action")


def require_owner_or_staff(session: Session, *owner_ids: str) -> None:
    """Staff, or any of the listed participants, may act."""
    if session.is_staff:
        return
    if session.user_id not in owner_ids:
        raise AuthorizationError("Forbidden")
