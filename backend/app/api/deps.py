"""
API dependencies
"""
from app.db import get_db
from app.api.errors import service_errors

__all__ = [
    "get_db",
    "service_errors",
]
