"""
API routes package
"""
from app.api.routes import insurance, providers

__all__ = [
    "insurance",
    "providers",
]
