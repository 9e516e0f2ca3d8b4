"""
Insurance details service: listing query builder and the supersession rule.

An authorization is "active" while is_active is true. Storing a new
authorization whose service dates overlap an active one for the same
recipient retires the old row (is_active = false) instead of editing it.
"""
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.core.logging import get_logger, log_audit_event
from app.db.models import InsuranceDetails, InsuranceProvider, InsuranceReceipient, DoctorDetails
from app.services.db_utils import transaction
from app.services.errors import RecordNotFoundError, InvalidRecordError

logger = get_logger(__name__)

SORT_FIELDS = {
    "date": InsuranceDetails.from_service_date,
    "name": InsuranceReceipient.name,
}

REQUIRED_FIELDS = ("provider_id", "recipient_id", "doctor_id", "from_service_date", "to_service_date")

REFERENCES = {
    "provider_id": (InsuranceProvider, "Insurance provider"),
    "recipient_id": (InsuranceReceipient, "Recipient"),
    "doctor_id": (DoctorDetails, "Doctor"),
}


@dataclass
class ListingFilters:
    """Filter and sort dimensions accepted by the listing endpoint."""
    search_term: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    sort_by: str = "date"
    sort_order: str = "asc"
    is_default: Optional[bool] = None


def ranges_overlap(existing_from: date, existing_to: date, new_from: date, new_to: date) -> bool:
    """Closed-interval overlap; touching endpoints count as overlapping."""
    return existing_to >= new_from and existing_from <= new_to


def paginate(page: int, records_per_page: int) -> Tuple[int, int]:
    """Return (limit, offset) for a 1-based page number."""
    limit = records_per_page
    return limit, (page - 1) * limit


def total_pages(total_records: int, limit: int) -> int:
    return math.ceil(total_records / limit)


def build_listing_query(db: Session, filters: ListingFilters) -> Query:
    """
    Build the filtered and sorted listing query, without pagination.

    Rows are (InsuranceDetails, provider_name, recipient_name, recipient_ma,
    doctor_name, doctor_phone_no). All three joins are inner joins, so
    details missing a provider, recipient or doctor are excluded.
    """
    query = (
        db.query(
            InsuranceDetails,
            InsuranceProvider.provider_name.label("provider_name"),
            InsuranceReceipient.name.label("recipient_name"),
            InsuranceReceipient.receipient_ma.label("recipient_ma"),
            DoctorDetails.doctor_name.label("doctor_name"),
            DoctorDetails.doctor_phone_no.label("doctor_phone_no"),
        )
        .join(InsuranceProvider, InsuranceDetails.provider_id == InsuranceProvider.id)
        .join(InsuranceReceipient, InsuranceDetails.recipient_id == InsuranceReceipient.id)
        .join(DoctorDetails, InsuranceDetails.doctor_id == DoctorDetails.id)
    )

    if filters.is_default is not None:
        query = query.filter(InsuranceProvider.is_default.is_(filters.is_default))

    if filters.search_term:
        term = filters.search_term.lower()
        query = query.filter(
            func.lower(InsuranceReceipient.name).contains(term, autoescape=True)
            | func.lower(InsuranceReceipient.receipient_ma).contains(term, autoescape=True)
        )

    if filters.from_date and filters.to_date:
        query = query.filter(
            InsuranceDetails.from_service_date.between(filters.from_date, filters.to_date)
        )
    elif filters.from_date:
        query = query.filter(InsuranceDetails.from_service_date >= filters.from_date)
    elif filters.to_date:
        query = query.filter(InsuranceDetails.from_service_date <= filters.to_date)

    sort_column = SORT_FIELDS.get(filters.sort_by)
    if sort_column is not None:
        if (filters.sort_order or "").lower() == "desc":
            query = query.order_by(sort_column.desc())
        else:
            query = query.order_by(sort_column.asc())

    return query


def list_insurance_details(
    db: Session,
    filters: ListingFilters,
    page: int = 1,
    records_per_page: int = 10,
) -> Tuple[List[Any], int]:
    """Return one page of listing rows and the total number of matches."""
    query = build_listing_query(db, filters)
    total_records = query.order_by(None).count()

    limit, offset = paginate(page, records_per_page)
    rows = query.limit(limit).offset(offset).all()
    return rows, total_records


def get_insurance_details(db: Session, details_id: int) -> Optional[Any]:
    """
    Single details row with provider_name, doctor_name and doctor_number,
    or None. Provider and doctor are inner-joined like the listing.
    """
    return (
        db.query(
            InsuranceDetails,
            InsuranceProvider.provider_name.label("provider_name"),
            DoctorDetails.doctor_name.label("doctor_name"),
            DoctorDetails.doctor_phone_no.label("doctor_number"),
        )
        .join(InsuranceProvider, InsuranceDetails.provider_id == InsuranceProvider.id)
        .join(DoctorDetails, InsuranceDetails.doctor_id == DoctorDetails.id)
        .filter(InsuranceDetails.id == details_id)
        .first()
    )


def find_overlapping_active(
    db: Session,
    recipient_id: int,
    from_service_date: date,
    to_service_date: date,
    exclude_id: Optional[int] = None,
) -> List[InsuranceDetails]:
    """Active rows of the recipient whose service range overlaps the given one."""
    query = db.query(InsuranceDetails).filter(
        InsuranceDetails.recipient_id == recipient_id,
        InsuranceDetails.is_active.is_(True),
        InsuranceDetails.to_service_date >= from_service_date,
        InsuranceDetails.from_service_date <= to_service_date,
    )
    if exclude_id is not None:
        query = query.filter(InsuranceDetails.id != exclude_id)
    return query.order_by(InsuranceDetails.id).all()


def _require_references(db: Session, fields: Dict[str, Any]) -> None:
    for field, (model, label) in REFERENCES.items():
        if field in fields and db.get(model, fields[field]) is None:
            raise RecordNotFoundError(label, fields[field])


def _lock_recipient(db: Session, recipient_id: int) -> None:
    """Serialize supersession per recipient (no-op on SQLite)."""
    db.query(InsuranceReceipient.id).filter(
        InsuranceReceipient.id == recipient_id
    ).with_for_update().first()


def _map_units(fields: Dict[str, Any], creating: bool) -> Dict[str, Any]:
    # NOTE: units is stored from procedure_val and the submitted "units"
    # value is ignored. Existing clients depend on this mapping; confirm with
    # the product owner before reading from "units" instead.
    fields = dict(fields)
    fields.pop("units", None)
    if "procedure_val" in fields:
        fields["units"] = fields.pop("procedure_val")
    elif creating:
        fields["units"] = None
    return fields


def _check_date_range(from_service_date: date, to_service_date: date) -> None:
    if to_service_date < from_service_date:
        raise InvalidRecordError("to_service_date must not be earlier than from_service_date")


def _retire_overlapping(
    db: Session,
    recipient_id: int,
    from_service_date: date,
    to_service_date: date,
    exclude_id: Optional[int] = None,
) -> List[int]:
    """Retire every overlapping active row; returns their ids."""
    _lock_recipient(db, recipient_id)
    superseded = []
    for existing in find_overlapping_active(
        db, recipient_id, from_service_date, to_service_date, exclude_id=exclude_id
    ):
        existing.is_active = False
        superseded.append(existing.id)
        logger.info(
            f"Superseding insurance details {existing.id} for recipient {recipient_id}"
        )
    return superseded


def create_insurance_details(db: Session, fields: Dict[str, Any]) -> InsuranceDetails:
    """
    Store a new active authorization, retiring every overlapping active one.

    `fields` holds the request body; see _map_units for procedure_val.
    """
    fields = _map_units(fields, creating=True)
    missing = [name for name in REQUIRED_FIELDS if fields.get(name) is None]
    if missing:
        raise InvalidRecordError(f"Missing required fields: {', '.join(missing)}")
    _check_date_range(fields["from_service_date"], fields["to_service_date"])

    with transaction(db):
        _require_references(db, fields)
        superseded = _retire_overlapping(
            db,
            fields["recipient_id"],
            fields["from_service_date"],
            fields["to_service_date"],
        )

        details = InsuranceDetails(**fields, is_active=True)
        db.add(details)

    db.refresh(details)

    log_audit_event(
        "insurance_details.created",
        {
            "id": details.id,
            "recipient_id": details.recipient_id,
            "superseded_ids": superseded,
        },
    )
    return details


def update_insurance_details(
    db: Session, details_id: int, changes: Dict[str, Any]
) -> InsuranceDetails:
    """
    Overwrite an authorization with the supplied fields.

    Active rows of the same recipient overlapping the resulting date range
    (other than this one) are retired first, as on create. A retired row is
    edited in place: it stays inactive and supersedes nothing.
    """
    changes = _map_units(changes, creating=False)
    if not changes:
        raise InvalidRecordError("No changes found in data")
    nulled = [name for name in REQUIRED_FIELDS if name in changes and changes[name] is None]
    if nulled:
        raise InvalidRecordError(f"Fields cannot be null: {', '.join(nulled)}")

    with transaction(db):
        details = db.query(InsuranceDetails).filter(
            InsuranceDetails.id == details_id
        ).with_for_update().first()
        if details is None:
            raise RecordNotFoundError("Insurance details", details_id)

        recipient_id = changes.get("recipient_id", details.recipient_id)
        from_service_date = changes.get("from_service_date", details.from_service_date)
        to_service_date = changes.get("to_service_date", details.to_service_date)
        _check_date_range(from_service_date, to_service_date)

        _require_references(db, changes)
        superseded = []
        if details.is_active:
            superseded = _retire_overlapping(
                db, recipient_id, from_service_date, to_service_date, exclude_id=details.id
            )

        for field, value in changes.items():
            setattr(details, field, value)

    db.refresh(details)

    log_audit_event(
        "insurance_details.updated",
        {
            "id": details.id,
            "fields": sorted(changes),
            "superseded_ids": superseded,
        },
    )
    return details


def delete_insurance_details(db: Session, details_id: int) -> bool:
    """Hard-delete by id. Returns False when no row matched."""
    with transaction(db):
        deleted = db.query(InsuranceDetails).filter(
            InsuranceDetails.id == details_id
        ).delete(synchronize_session=False)

    if deleted:
        log_audit_event("insurance_details.deleted", {"id": details_id})
    return bool(deleted)
