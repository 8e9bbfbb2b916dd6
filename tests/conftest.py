"""
Shared pytest fixtures for the lifecycle engine tests.
Provides an in-memory database, wired services, sessions and seed data.
"""

import pytest
from typing import Any, Dict

from talentbridge.constants import (
    CANDIDATES_TABLE,
    DOCUMENTS_TABLE,
    EMPLOYERS_TABLE,
    RELATIONS_TABLE,
)
from talentbridge.main import build_services
from talentbridge.models.candidate import Candidate, VerificationStatus
from talentbridge.models.document import Document
from talentbridge.models.employer import Employer
from talentbridge.models.relation import EmployerCandidateRelation, PipelineStatus
from talentbridge.models.session import Role, Session
from tests.fakes import FakeSupabaseClient


CANDIDATE_ID = "cand-1"
EMPLOYER_ID = "emp-1"


def complete_candidate_data(**overrides: Any) -> Dict[str, Any]:
    """Profile data that passes every profile checklist item."""
    data = {
        "id": CANDIDATE_ID,
        "first_name": "Ana",
        "last_name": "Silva",
        "email": "ana@example.com",
        "headline": "Senior Nurse",
        "bio": "Ten years in intensive care.",
        "phone": "+351 900 000 000",
        "location": "Lisbon",
        "nationality": "Portuguese",
        "birth_date": "1990-04-02",
        "years_of_experience": "10",
        "sector": "Healthcare",
        "salary_expectation": "45000",
        "skills": ["ICU", "Triage", "Patient care"],
        "languages": ["Portuguese", "German"],
        "experience": [{"title": "Nurse", "company": "Hospital Santa Maria"}],
        "education": [{"institution": "University of Lisbon", "degree": "BSc Nursing"}],
    }
    data.update(overrides)
    return data


def complete_candidate(**overrides: Any) -> Candidate:
    return Candidate(**complete_candidate_data(**overrides))


def required_documents(candidate_id: str = CANDIDATE_ID):
    return [
        Document(id="doc-id", candidate_id=candidate_id, type="passport", name="Passport"),
        Document(id="doc-edu", candidate_id=candidate_id, type="diploma", name="Nursing degree"),
        Document(id="doc-cv", candidate_id=candidate_id, type="cv", name="CV 2024"),
    ]


def complete_employer_data(**overrides: Any) -> Dict[str, Any]:
    data = {
        "id": EMPLOYER_ID,
        "company_name": "Klinikum Nord GmbH",
        "industry": "Healthcare",
        "company_size": "500-1000",
        "founded_year": "1972",
        "society_type": "GmbH",
        "register_number": "HRB 12345",
        "contact_email": "hr@klinikum-nord.de",
        "verification_status": VerificationStatus.VERIFIED.value,
    }
    data.update(overrides)
    return data


@pytest.fixture
def db():
    """Empty in-memory database."""
    return FakeSupabaseClient()


@pytest.fixture
def services(db):
    return build_services(db)


@pytest.fixture
def candidate_session():
    return Session(user_id=CANDIDATE_ID, role=Role.CANDIDATE)


@pytest.fixture
def employer_session():
    return Session(user_id=EMPLOYER_ID, role=Role.EMPLOYER)


@pytest.fixture
def staff_session():
    return Session(user_id="staff-1", role=Role.STAFF)


@pytest.fixture
def admin_session():
    return Session(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def seed_candidate(db):
    """Insert a candidate row; returns a factory taking field overrides."""
    def _seed(**overrides: Any) -> Candidate:
        candidate = complete_candidate(**overrides)
        db.seed(CANDIDATES_TABLE, candidate.model_dump(mode="json"))
        return candidate
    return _seed


@pytest.fixture
def seed_documents(db):
    def _seed(candidate_id: str = CANDIDATE_ID):
        documents = required_documents(candidate_id)
        for document in documents:
            db.seed(DOCUMENTS_TABLE, document.model_dump(mode="json"))
        return documents
    return _seed


@pytest.fixture
def seed_employer(db):
    def _seed(**overrides: Any) -> Employer:
        employer = Employer(**complete_employer_data(**overrides))
        db.seed(EMPLOYERS_TABLE, employer.model_dump(mode="json"))
        return employer
    return _seed


@pytest.fixture
def seed_relation(db):
    def _seed(status: PipelineStatus = PipelineStatus.POTENTIAL, **overrides: Any) -> EmployerCandidateRelation:
        data = {
            "id": "rel-1",
            "employer_id": EMPLOYER_ID,
            "candidate_id": CANDIDATE_ID,
            "status": status,
        }
        data.update(overrides)
        relation = EmployerCandidateRelation(**data)
        db.seed(RELATIONS_TABLE, relation.model_dump(mode="json"))
        return relation
    return _seed
