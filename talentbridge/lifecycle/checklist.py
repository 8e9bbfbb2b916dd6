"""Profile and document completeness checks gating verification submission.

Everything here is pure: no repositories, no network. The verification
service calls these before letting a candidate (or employer) into review.
"""

from typing import Iterable, List, Optional

from pydantic import BaseModel

from talentbridge.constants import (
    DOCUMENT_KEYWORDS,
    MIN_SKILLS,
    REQUIRED_DOCUMENT_LABELS,
    REQUIRED_EMPLOYER_FIELDS,
    REQUIRED_PROFILE_FIELDS,
    REQUIRED_PROFILE_LISTS,
)
from talentbridge.models.candidate import Candidate
from talentbridge.models.document import Document
from talentbridge.models.employer import Employer


class ProfileEvaluation(BaseModel):
    """Result of a profile completeness check.

    Attributes:
        complete: True when nothing is missing.
        missing: Wire names of every missing field, in checklist order.
    """
    complete: bool
    missing: List[str] = []


class DocumentChecklist(BaseModel):
    """Which document categories are covered by the uploaded set."""
    has_id: bool = False
    has_education: bool = False
    has_cv: bool = False
    has_references: bool = False

    @property
    def missing(self) -> List[str]:
        """Labels of required categories with no matching document."""
        covered = {
            "id": self.has_id,
            "education": self.has_education,
            "cv": self.has_cv,
        }
        return [label for category, label in REQUIRED_DOCUMENT_LABELS.items() if not covered[category]]


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def evaluate_profile(candidate: Candidate) -> ProfileEvaluation:
    """Check every required profile field and list what is missing.

    Args:
        candidate: Candidate to evaluate.

    Returns:
        ProfileEvaluation listing every missing item, not just the first.
    """
    missing = [
        wire_name
        for attribute, wire_name in REQUIRED_PROFILE_FIELDS.items()
        if _is_blank(getattr(candidate, attribute))
    ]

    for attribute, wire_name in REQUIRED_PROFILE_LISTS.items():
        if not getattr(candidate, attribute):
            missing.append(wire_name)

    if len(candidate.skills) < MIN_SKILLS:
        missing.append("skills")

    if not candidate.languages:
        missing.append("languages")

    return ProfileEvaluation(complete=not missing, missing=missing)


def classify_document(document_type: Optional[str]) -> Optional[str]:
    """Map a document type onto a checklist category.

    Matching is a case-insensitive substring test against each category's
    keywords. Categories are tried in declaration order and the first
    match wins, so a document counts towards one category at most.

    Args:
        document_type: Raw document type string.

    Returns:
        Category key ("id", "education", "cv", "references") or None.
    """
    normalized = (document_type or "").lower()
    if not normalized:
        return None

    for category, keywords in DOCUMENT_KEYWORDS.items():
        if any(keyword in normalized for keyword in keywords):
            return category

    return None


def evaluate_documents(documents: Iterable[Document]) -> DocumentChecklist:
    """Work out which document categories the candidate has covered."""
    categories = {classify_document(document.type) for document in documents}
    return DocumentChecklist(
        has_id="id" in categories,
        has_education="education" in categories,
        has_cv="cv" in categories,
        has_references="references" in categories,
    )


def missing_requirements(candidate: Candidate, documents: Iterable[Document]) -> List[str]:
    """Every missing profile field followed by every missing document category."""
    profile = evaluate_profile(candidate)
    return profile.missing + evaluate_documents(documents).missing


def can_submit_for_review(candidate: Candidate, documents: Iterable[Document]) -> bool:
    """True iff the profile is complete and ID, education and CV documents exist."""
    return not missing_requirements(candidate, list(documents))


def profile_progress(candidate: Candidate, documents: Iterable[Document]) -> int:
    """Percentage of checklist items met, rounded down.

    Items are the required profile fields, the required lists, skills,
    languages and the three required document categories.
    """
    total_items = (
        len(REQUIRED_PROFILE_FIELDS)
        + len(REQUIRED_PROFILE_LISTS)
        + 2
        + len(REQUIRED_DOCUMENT_LABELS)
    )
    missing_count = len(missing_requirements(candidate, list(documents)))
    return (total_items - missing_count) * 100 // total_items


def evaluate_employer_profile(employer: Employer) -> ProfileEvaluation:
    """Check the company details an employer must fill before review."""
    missing = [
        wire_name
        for attribute, wire_name in REQUIRED_EMPLOYER_FIELDS.items()
        if _is_blank(getattr(employer, attribute))
    ]
    return ProfileEvaluation(complete=not missing, missing=missing)
