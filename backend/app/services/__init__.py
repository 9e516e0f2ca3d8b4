"""
Services package
"""
from app.services.insurance_details import (
    ListingFilters,
    ranges_overlap,
    list_insurance_details,
    create_insurance_details,
    update_insurance_details,
)
from app.services.providers import clear_default_flag, create_provider, update_provider

__all__ = [
    "ListingFilters",
    "ranges_overlap",
    "list_insurance_details",
    "create_insurance_details",
    "update_insurance_details",
    "clear_default_flag",
    "create_provider",
    "update_provider",
]
