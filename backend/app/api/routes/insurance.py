"""
Insurance details API routes
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, model_validator
from sqlalchemy.orm import Session

from app.api.deps import get_db, service_errors
from app.core import settings
from app.services.insurance_details import (
    ListingFilters,
    list_insurance_details,
    get_insurance_details,
    create_insurance_details,
    update_insurance_details,
    delete_insurance_details,
    total_pages,
)

router = APIRouter()


# Request/Response schemas
class InsuranceDetailsFields(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    prsrb_prov: Optional[str] = None
    pa: Optional[str] = None
    recipient_is: Optional[str] = None
    procedure_code: Optional[str] = None
    units: Optional[str] = None  # accepted but not stored, see procedure_val
    procedure_val: Optional[str] = None
    plan_of_care: Optional[str] = None
    number_of_days: Optional[int] = None
    max_per_day: Optional[int] = None
    max_per_day_unit: Optional[str] = None
    insurance_status: Optional[str] = None
    mmis_entry: Optional[str] = None
    rsn: Optional[str] = None
    comment_pa: Optional[str] = None


class CreateInsuranceDetailsRequest(InsuranceDetailsFields):
    provider_id: int
    recipient_id: int
    doctor_id: int
    from_service_date: date
    to_service_date: date

    @model_validator(mode="after")
    def validate_service_dates(self) -> "CreateInsuranceDetailsRequest":
        if self.to_service_date < self.from_service_date:
            raise ValueError("to_service_date must not be earlier than from_service_date")
        return self


class UpdateInsuranceDetailsRequest(InsuranceDetailsFields):
    provider_id: Optional[int] = None
    recipient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    from_service_date: Optional[date] = None
    to_service_date: Optional[date] = None


class InsuranceDetailsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    provider_id: int
    recipient_id: int
    doctor_id: int
    prsrb_prov: Optional[str] = None
    pa: Optional[str] = None
    from_service_date: date
    to_service_date: date
    recipient_is: Optional[str] = None
    procedure_code: Optional[str] = None
    units: Optional[str] = None
    plan_of_care: Optional[str] = None
    number_of_days: Optional[int] = None
    max_per_day: Optional[int] = None
    max_per_day_unit: Optional[str] = None
    insurance_status: Optional[str] = None
    mmis_entry: Optional[str] = None
    rsn: Optional[str] = None
    comment_pa: Optional[str] = None
    is_active: bool


class InsuranceListRow(InsuranceDetailsResponse):
    provider_name: str
    recipient_name: str
    recipient_ma: Optional[str] = None
    doctor_name: str
    doctor_phone_no: Optional[str] = None


class InsuranceSingleRow(InsuranceDetailsResponse):
    provider_name: str
    doctor_name: str
    doctor_number: Optional[str] = None


class PaginationResponse(BaseModel):
    totalRecords: int
    totalPages: int
    recordsPerPage: int
    currentPage: int


class InsuranceListResponse(BaseModel):
    message: str
    data: List[InsuranceListRow]
    pagination: PaginationResponse


class InsuranceDetailsEnvelope(BaseModel):
    message: str
    success: bool = True
    data: InsuranceDetailsResponse


class InsuranceSingleEnvelope(BaseModel):
    message: str
    data: InsuranceSingleRow


class MessageResponse(BaseModel):
    message: str


@router.get("/", response_model=InsuranceListResponse)
async def list_insurance(
    searchTerm: Optional[str] = None,
    fromDate: Optional[date] = None,
    toDate: Optional[date] = None,
    sortBy: str = "date",
    sortOrder: str = "asc",
    recordsPerPage: int = Query(settings.DEFAULT_RECORDS_PER_PAGE, ge=1),
    page: int = Query(1, ge=1),
    is_default: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    """List insurance details with search, date filter, sorting and pagination."""
    filters = ListingFilters(
        search_term=searchTerm,
        from_date=fromDate,
        to_date=toDate,
        sort_by=sortBy,
        sort_order=sortOrder,
        is_default=is_default,
    )

    with service_errors("Failed to get insurance details"):
        rows, total_records = list_insurance_details(
            db, filters, page=page, records_per_page=recordsPerPage
        )

    return InsuranceListResponse(
        message="Data fetched successfully",
        data=[
            InsuranceListRow(
                **row.InsuranceDetails.to_dict(),
                provider_name=row.provider_name,
                recipient_name=row.recipient_name,
                recipient_ma=row.recipient_ma,
                doctor_name=row.doctor_name,
                doctor_phone_no=row.doctor_phone_no,
            )
            for row in rows
        ],
        pagination=PaginationResponse(
            totalRecords=total_records,
            totalPages=total_pages(total_records, recordsPerPage),
            recordsPerPage=recordsPerPage,
            currentPage=page,
        ),
    )


@router.post("/", response_model=InsuranceDetailsEnvelope, status_code=status.HTTP_201_CREATED)
async def create_insurance(
    request: CreateInsuranceDetailsRequest,
    db: Session = Depends(get_db),
):
    """Create insurance details, superseding an overlapping active record."""
    with service_errors("Failed to create insurance details"):
        details = create_insurance_details(db, request.model_dump())

    return InsuranceDetailsEnvelope(
        message="New insurance created successfully",
        data=InsuranceDetailsResponse.model_validate(details),
    )


@router.put("/{details_id}", response_model=InsuranceDetailsEnvelope)
async def update_insurance(
    details_id: int,
    request: UpdateInsuranceDetailsRequest,
    db: Session = Depends(get_db),
):
    """Update insurance details by id."""
    with service_errors("Failed to update insurance details"):
        details = update_insurance_details(
            db, details_id, request.model_dump(exclude_unset=True)
        )

    return InsuranceDetailsEnvelope(
        message="Insurance details updated successfully",
        data=InsuranceDetailsResponse.model_validate(details),
    )


@router.get("/{details_id}", response_model=InsuranceSingleEnvelope)
async def get_insurance(
    details_id: int,
    db: Session = Depends(get_db),
):
    """Get one insurance details record with provider and doctor names."""
    with service_errors("Failed to get insurance details"):
        row = get_insurance_details(db, details_id)

    if row is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return InsuranceSingleEnvelope(
        message="Insurance details fetched successfully",
        data=InsuranceSingleRow(
            **row.InsuranceDetails.to_dict(),
            provider_name=row.provider_name,
            doctor_name=row.doctor_name,
            doctor_number=row.doctor_number,
        ),
    )


@router.delete("/{details_id}", response_model=MessageResponse)
async def delete_insurance(
    details_id: int,
    db: Session = Depends(get_db),
):
    """Delete insurance details by id."""
    with service_errors("Failed to delete insurance details"):
        deleted = delete_insurance_details(db, details_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Insurance details not found",
        )

    return MessageResponse(message="Insurance details deleted successfully")
