"""Explicit caller context passed into every service operation."""

from pydantic import BaseModel
from enum import Enum


class Role(str, Enum):
    """Account role of the caller."""
    CANDIDATE = "candidate"
    EMPLOYER = "employer"
    STAFF = "staff"
    ADMIN = "admin"


class Session(BaseModel):
    """Who is calling.

    Resolved by the external identity provider and handed to the core;
    the core never looks the caller up on its own.

    Attributes:
        user_id: ID of the authenticated user.
        role: Role of the authenticated user.
    """
    user_id: str
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.STAFF, Role.ADMIN)
