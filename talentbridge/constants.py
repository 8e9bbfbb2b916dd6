"""Application-wide constants and configuration values."""

# Profile checklist: attribute name -> wire name reported as missing
REQUIRED_PROFILE_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "headline": "headline",
    "bio": "bio",
    "phone": "phone",
    "location": "location",
    "nationality": "nationality",
    "birth_date": "birthDate",
    "years_of_experience": "yearsOfExperience",
    "sector": "sector",
    "salary_expectation": "salaryExpectation",
}

REQUIRED_PROFILE_LISTS = {
    "experience": "experience",
    "education": "education",
}

MIN_SKILLS = 3

# Company checklist an employer must fill before submitting for review
REQUIRED_EMPLOYER_FIELDS = {
    "company_name": "companyName",
    "industry": "industry",
    "company_size": "companySize",
    "founded_year": "foundedYear",
    "society_type": "societyType",
    "register_number": "registerNumber",
}

# Document classification, tried in this order; first match wins
DOCUMENT_KEYWORDS = {
    "id": ("passport", "id", "identity"),
    "education": ("diploma", "degree", "education", "certificate"),
    "cv": ("cv", "resume"),
    "references": ("reference", "recommendation"),
}

# Required document categories and the names reported when they are missing
REQUIRED_DOCUMENT_LABELS = {
    "id": "idDocument",
    "education": "educationDocument",
    "cv": "cvDocument",
}

# Packages attached when staff approve a quote without explicit options
DEFAULT_ESSENTIAL_ESTIMATE = "€10,000 - €12,000"

DEFAULT_QUOTE_PACKAGES = [
    {
        "name": "Essential Package",
        "cost_estimate": DEFAULT_ESSENTIAL_ESTIMATE,
        "perks": ["Standard Placement", "Basic Support"],
        "items": [
            {"label": "Placement Fee", "amount": 8000, "description": "Recruitment & Vetting"},
            {"label": "Admin Fee", "amount": 2000, "description": "Processing & Compliance"},
        ],
    },
    {
        "name": "Executive Package",
        "cost_estimate": "€15,000 - €18,000",
        "perks": ["Priority Support", "Relocation Assistance", "Onboarding Package"],
        "items": [
            {"label": "Placement Fee", "amount": 10000, "description": "Premium Sourcing"},
            {"label": "Relocation Support", "amount": 4000, "description": "Logistics & Housing"},
            {"label": "Integration Package", "amount": 2000, "description": "Cultural Training"},
        ],
    },
]

CURRENCY_SYMBOL = "€"

# Video room tokens
ROOM_ID_PREFIX = "wdf"

# Table names
CANDIDATES_TABLE = "candidates"
EMPLOYERS_TABLE = "employers"
DOCUMENTS_TABLE = "documents"
RELATIONS_TABLE = "employer_candidate_relations"
QUOTE_REQUESTS_TABLE = "quote_requests"
INTERVIEWS_TABLE = "interviews"
AUDIT_LOGS_TABLE = "audit_logs"

# Logging
LOG_FILE_NAME = "lifecycle_errors.log"
