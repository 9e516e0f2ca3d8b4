"""
Insurance providers API routes
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.api.deps import get_db, service_errors
from app.services.providers import (
    list_providers,
    get_provider,
    create_provider,
    update_provider,
    delete_provider,
)
from app.services.uploads import save_logo, discard_logo

router = APIRouter()


# Response schemas
class ProviderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    provider_name: str
    phone_no_1: Optional[str] = None
    phone_no_2: Optional[str] = None
    logo_location: Optional[str] = None
    is_default: bool
    provider_code: Optional[str] = None


class ProviderEnvelope(BaseModel):
    message: str
    data: ProviderResponse


class ProviderListEnvelope(BaseModel):
    message: str
    data: List[ProviderResponse]


class MessageResponse(BaseModel):
    message: str


@router.post("/", response_model=ProviderEnvelope, status_code=status.HTTP_201_CREATED)
async def add_provider(
    provider_name: str = Form(...),
    phone_no_1: Optional[str] = Form(None),
    phone_no_2: Optional[str] = Form(None),
    is_default: bool = Form(False),
    provider_code: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """Add an insurance provider with an optional logo."""
    with service_errors("Error adding provider"):
        logo_location = await save_logo(logo) if logo is not None and logo.filename else None
        try:
            provider = create_provider(
                db,
                {
                    "provider_name": provider_name,
                    "phone_no_1": phone_no_1,
                    "phone_no_2": phone_no_2,
                    "logo_location": logo_location,
                    "is_default": is_default,
                    "provider_code": provider_code,
                },
            )
        except Exception:
            if logo_location:
                discard_logo(logo_location)
            raise

    return ProviderEnvelope(
        message="Insurance Provider added successfully",
        data=ProviderResponse.model_validate(provider),
    )


@router.get("/", response_model=ProviderListEnvelope)
async def get_providers(
    is_default: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    """List providers, optionally only the default (or non-default) ones."""
    with service_errors("Error fetching provider"):
        providers = list_providers(db, is_default=is_default)

    if not providers:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return ProviderListEnvelope(
        message="Insurance Providers fetched successfully",
        data=[ProviderResponse.model_validate(p) for p in providers],
    )


@router.get("/{provider_id}", response_model=ProviderEnvelope)
async def get_single_provider(
    provider_id: int,
    db: Session = Depends(get_db),
):
    """Get provider by ID."""
    with service_errors("Error fetching provider"):
        provider = get_provider(db, provider_id)

    if provider is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return ProviderEnvelope(
        message="Insurance Provider fetched successfully",
        data=ProviderResponse.model_validate(provider),
    )


@router.put("/{provider_id}", response_model=ProviderEnvelope)
async def edit_provider(
    provider_id: int,
    provider_name: Optional[str] = Form(None),
    phone_no_1: Optional[str] = Form(None),
    phone_no_2: Optional[str] = Form(None),
    is_default: Optional[bool] = Form(None),
    provider_code: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """Update provider fields; a new logo replaces the stored one."""
    changes = {
        name: value
        for name, value in {
            "provider_name": provider_name,
            "phone_no_1": phone_no_1,
            "phone_no_2": phone_no_2,
            "is_default": is_default,
            "provider_code": provider_code,
        }.items()
        if value is not None
    }

    with service_errors("Error updating provider"):
        if get_provider(db, provider_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Provider not found",
            )
        if logo is not None and logo.filename:
            changes["logo_location"] = await save_logo(logo)
        try:
            provider = update_provider(db, provider_id, changes)
        except Exception:
            if "logo_location" in changes:
                discard_logo(changes["logo_location"])
            raise

    return ProviderEnvelope(
        message="Provider updated successfully",
        data=ProviderResponse.model_validate(provider),
    )


@router.delete("/{provider_id}", response_model=MessageResponse)
async def remove_provider(
    provider_id: int,
    db: Session = Depends(get_db),
):
    """Delete provider by ID."""
    with service_errors("Error deleting provider"):
        deleted = delete_provider(db, provider_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Provider not found",
        )

    return MessageResponse(message="Provider deleted successfully")
