"""
Supporting-document checklist for the application wizard (step 5).
"""

import os
from typing import Dict, List


MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024

REQUIRED_DOCUMENTS = {
    "id": {
        "name": "Identification Document",
        "description": "Valid South African ID, passport, or driver's license",
        "required": True,
        "accepted": [".pdf", ".jpg", ".jpeg", ".png"],
    },
    "selfie_with_id": {
        "name": "Selfie with ID",
        "description": "Selfie holding the ID document",
        "required": True,
        "accepted": [".jpg", ".jpeg", ".png"],
    },
    "proof_of_income": {
        "name": "Proof of Income",
        "description": "Latest 3 months' payslips (employment letters not accepted)",
        "required": True,
        "accepted": [".pdf", ".jpg", ".jpeg", ".png", ".doc", ".docx"],
    },
    "bank_statements": {
        "name": "Bank Statements",
        "description": "Latest 3 months of bank statements",
        "required": True,
        "accepted": [".pdf", ".csv", ".xls", ".xlsx"],
    },
    "proof_of_address": {
        "name": "Proof of Address",
        "description": "Utility bill, lease agreement, or rates and taxes invoice "
                       "(not older than 3 months)",
        "required": True,
        "accepted": [".pdf", ".jpg", ".jpeg", ".png"],
    },
    "employment_verification": {
        "name": "Employment Verification Document",
        "description": "Letter from employer confirming employment details",
        "required": False,
        "accepted": [".pdf", ".jpg", ".jpeg", ".png", ".doc", ".docx"],
    },
}


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} bytes"
    if size_bytes < 1048576:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / 1048576:.1f} MB"


def validate_upload(doc_type: str, filename: str, size_bytes: int) -> Dict:
    """Check one uploaded file against the checklist entry for doc_type."""
    spec = REQUIRED_DOCUMENTS.get(doc_type)
    if spec is None:
        return {"valid": False, "message": f"Unknown document type '{doc_type}'"}

    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in spec["accepted"]:
        return {
            "valid": False,
            "message": f"{spec['name']}: '{ext or filename}' files are not accepted "
                       f"(allowed: {', '.join(spec['accepted'])})",
        }
    if size_bytes <= 0:
        return {"valid": False, "message": f"{filename} is empty"}
    if size_bytes > MAX_FILE_SIZE_BYTES:
        return {
            "valid": False,
            "message": f"{filename} is {format_file_size(size_bytes)} "
                       f"(maximum {format_file_size(MAX_FILE_SIZE_BYTES)})",
        }
    return {"valid": True, "message": f"{spec['name']} uploaded"}


def get_missing_required_documents(uploaded: Dict[str, List]) -> List[str]:
    """Names of required document types with no uploaded file."""
    return [
        spec["name"] for key, spec in REQUIRED_DOCUMENTS.items()
        if spec["required"] and not uploaded.get(key)
    ]


def get_upload_progress(uploaded: Dict[str, List]) -> float:
    required = [key for key, spec in REQUIRED_DOCUMENTS.items() if spec["required"]]
    done = sum(1 for key in required if uploaded.get(key))
    return done / len(required) * 100
