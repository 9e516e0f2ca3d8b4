"""
Data classification and PII handling for insurance records.
Defines sensitivity levels and provides utilities for data protection.
"""

from enum import Enum
from typing import Any
import re


class DataClassification(Enum):
    """Data sensitivity classification levels."""
    PUBLIC = "public"
    INTERNAL = "internal"
    CONFIDENTIAL = "confidential"
    RESTRICTED = "restricted"  # PHI, medical-assistance numbers


# Field classifications for different data types
FIELD_CLASSIFICATIONS: dict[str, DataClassification] = {
    # Recipient fields
    "name": DataClassification.CONFIDENTIAL,
    "recipient_name": DataClassification.CONFIDENTIAL,
    "receipient_ma": DataClassification.RESTRICTED,
    "recipient_ma": DataClassification.RESTRICTED,

    # Doctor fields
    "doctor_phone_no": DataClassification.CONFIDENTIAL,
    "doctor_number": DataClassification.CONFIDENTIAL,

    # Provider fields
    "provider_name": DataClassification.PUBLIC,
    "provider_code": DataClassification.INTERNAL,
    "phone_no_1": DataClassification.INTERNAL,
    "phone_no_2": DataClassification.INTERNAL,

    # Authorization fields (PHI)
    "procedure_code": DataClassification.RESTRICTED,
    "plan_of_care": DataClassification.RESTRICTED,
    "pa": DataClassification.CONFIDENTIAL,
    "comment_pa": DataClassification.CONFIDENTIAL,
}


# Regex patterns for detecting sensitive data
SENSITIVE_PATTERNS = {
    "ma_number": re.compile(r"\b[A-Z]{0,2}\d{9,12}\b"),
    "phone": re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"),
    "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),
}


def get_field_classification(field_name: str) -> DataClassification:
    """Get the classification level for a field."""
    return FIELD_CLASSIFICATIONS.get(
        field_name.lower(),
        DataClassification.INTERNAL
    )


def mask_value(value: str, classification: DataClassification) -> str:
    """Mask a value based on its classification."""
    if classification in (DataClassification.PUBLIC, DataClassification.INTERNAL):
        return value
    elif classification == DataClassification.CONFIDENTIAL:
        # Show first and last characters
        if len(value) <= 4:
            return "*" * len(value)
        return f"{value[0]}{'*' * (len(value) - 2)}{value[-1]}"
    else:  # RESTRICTED
        return "*" * min(len(value), 8)


def detect_and_mask_pii(text: str) -> str:
    """Detect and mask PII in free-form text."""
    # Phone numbers first so the MA pattern cannot eat them
    def mask_phone(match: re.Match) -> str:
        phone = match.group()
        return f"***-***-{phone[-4:]}"
    masked = SENSITIVE_PATTERNS["phone"].sub(mask_phone, text)

    masked = SENSITIVE_PATTERNS["ma_number"].sub("*********", masked)

    # Mask emails (keep domain visible)
    def mask_email(match: re.Match) -> str:
        email = match.group()
        local, domain = email.rsplit("@", 1)
        return f"{local[0]}***@{domain}"
    masked = SENSITIVE_PATTERNS["email"].sub(mask_email, masked)

    return masked


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Sanitize a dictionary for safe logging."""
    sanitized = {}

    for key, value in data.items():
        classification = get_field_classification(key)

        if value is None:
            sanitized[key] = None
        elif isinstance(value, str):
            if classification in [DataClassification.CONFIDENTIAL, DataClassification.RESTRICTED]:
                sanitized[key] = mask_value(value, classification)
            else:
                sanitized[key] = value
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_for_logging(item) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized

