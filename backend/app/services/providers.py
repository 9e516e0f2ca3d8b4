"""
Insurance provider service.

At most one provider may be the default. Whenever a provider is stored with
is_default set, the flag is cleared on every other provider in the same
transaction; the partial unique index on is_default backs this up.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger, log_audit_event
from app.db.models import InsuranceProvider
from app.services.db_utils import transaction
from app.services.errors import RecordNotFoundError, InvalidRecordError

logger = get_logger(__name__)

UPDATABLE_FIELDS = (
    "provider_name",
    "phone_no_1",
    "phone_no_2",
    "logo_location",
    "is_default",
    "provider_code",
)


def clear_default_flag(db: Session, exclude_id: Optional[int] = None) -> int:
    """Unset is_default on all providers (except exclude_id). Returns rows changed."""
    query = db.query(InsuranceProvider).filter(InsuranceProvider.is_default.is_(True))
    if exclude_id is not None:
        query = query.filter(InsuranceProvider.id != exclude_id)
    cleared = query.update({InsuranceProvider.is_default: False}, synchronize_session="fetch")
    if cleared:
        logger.info(f"Cleared default flag on {cleared} provider(s)")
    return cleared


def list_providers(db: Session, is_default: Optional[bool] = None) -> List[InsuranceProvider]:
    query = db.query(InsuranceProvider)
    if is_default is not None:
        query = query.filter(InsuranceProvider.is_default.is_(is_default))
    return query.order_by(InsuranceProvider.id).all()


def get_provider(db: Session, provider_id: int) -> Optional[InsuranceProvider]:
    return db.get(InsuranceProvider, provider_id)


def create_provider(db: Session, fields: Dict[str, Any]) -> InsuranceProvider:
    """Insert a provider, taking over the default flag when is_default is set."""
    fields = {name: value for name, value in fields.items() if name in UPDATABLE_FIELDS}
    if not fields.get("provider_name"):
        raise InvalidRecordError("provider_name is required")
    fields["is_default"] = bool(fields.get("is_default"))

    with transaction(db):
        if fields["is_default"]:
            clear_default_flag(db)
        provider = InsuranceProvider(**fields)
        db.add(provider)

    db.refresh(provider)

    log_audit_event(
        "insurance_provider.created",
        {"id": provider.id, "provider_name": provider.provider_name, "is_default": provider.is_default},
    )
    return provider


def update_provider(db: Session, provider_id: int, changes: Dict[str, Any]) -> InsuranceProvider:
    """Field-level update; raises InvalidRecordError when nothing is supplied."""
    changes = {name: value for name, value in changes.items() if name in UPDATABLE_FIELDS}
    if not changes:
        raise InvalidRecordError("No changes found in data")
    if "provider_name" in changes and not changes["provider_name"]:
        raise InvalidRecordError("provider_name cannot be empty")
    if "is_default" in changes:
        changes["is_default"] = bool(changes["is_default"])

    with transaction(db):
        provider = get_provider(db, provider_id)
        if provider is None:
            raise RecordNotFoundError("Insurance provider", provider_id)

        if changes.get("is_default"):
            clear_default_flag(db, exclude_id=provider.id)

        for field, value in changes.items():
            setattr(provider, field, value)

    db.refresh(provider)

    log_audit_event(
        "insurance_provider.updated",
        {"id": provider.id, "fields": sorted(changes)},
    )
    return provider


def delete_provider(db: Session, provider_id: int) -> bool:
    """Hard-delete by id. Returns False when no row matched."""
    with transaction(db):
        deleted = db.query(InsuranceProvider).filter(
            InsuranceProvider.id == provider_id
        ).delete(synchronize_session=False)

    if deleted:
        log_audit_event("insurance_provider.deleted", {"id": provider_id})
    return bool(deleted)
