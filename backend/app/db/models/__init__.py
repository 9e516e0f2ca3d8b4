"""
Database models package
"""
from app.db.models.insurance import (
    InsuranceProvider, InsuranceReceipient, DoctorDetails, InsuranceDetails
)

__all__ = [
    "InsuranceProvider",
    "InsuranceReceipient",
    "DoctorDetails",
    "InsuranceDetails",
]
