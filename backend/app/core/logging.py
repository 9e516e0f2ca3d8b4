"""
Logging configuration with field masking for sensitive data
"""
import logging
import re
from typing import Any

from app.core.config import settings
from app.core.data_classification import detect_and_mask_pii, sanitize_for_logging


LOGGER_NAME = "insurance_records"

# Patterns to mask in logs
MASK_PATTERNS = [
    (r"""(['"]?re(?:cei|ci)pient_ma['"]?\s*[:=]\s*)['"]?[^'",}\s]*['"]?""", r"\1'***'"),
    (r"""(['"]?(?:doctor_phone_no|phone_no_[12])['"]?\s*[:=]\s*)['"]?[^'",}\s]*['"]?""", r"\1'***'"),
]


class MaskingFormatter(logging.Formatter):
    """Custom formatter that masks sensitive fields and PII in free text."""

    def format(self, record: logging.LogRecord) -> str:
        message = detect_and_mask_pii(super().format(record))
        for pattern, replacement in MASK_PATTERNS:
            message = re.sub(pattern, replacement, message, flags=re.IGNORECASE)
        return message


def setup_logging() -> logging.Logger:
    """Configure application logging."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

        formatter = MaskingFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)

    return logger


# Global logger instance
logger = setup_logging()


def get_logger(name: str) -> logging.Logger:
    """Child of the application logger, sharing its handler."""
    if name.startswith("app."):
        name = name[len("app."):]
    return logger.getChild(name)


def log_audit_event(event_type: str, details: dict[str, Any]) -> None:
    """Log an audit event for a record mutation."""
    logger.info(
        f"AUDIT: {event_type} | details={sanitize_for_logging(details)}"
    )
