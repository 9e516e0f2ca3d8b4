"""
Insurance provider, recipient, doctor and insurance details database models
"""
from typing import Any, Dict

from sqlalchemy import Column, String, Date, Integer, Boolean, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


def _columns_dict(instance) -> Dict[str, Any]:
    return {
        column.key: getattr(instance, column.key)
        for column in instance.__table__.columns
    }


class InsuranceProvider(Base):
    """Insurance company that issues authorizations."""

    __tablename__ = "insurance_providers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_name = Column(String(255), nullable=False)
    phone_no_1 = Column(String(20), nullable=True)
    phone_no_2 = Column(String(20), nullable=True)
    logo_location = Column(String(500), nullable=True)  # public path, e.g. /uploads/<file>
    is_default = Column(Boolean, default=False, nullable=False)
    provider_code = Column(String(50), nullable=True)

    # Relationships
    insurance_details = relationship("InsuranceDetails", back_populates="provider")

    def __repr__(self) -> str:
        return f"<InsuranceProvider {self.provider_name} (default={self.is_default})>"

    def to_dict(self) -> Dict[str, Any]:
        return _columns_dict(self)


# At most one default provider
Index(
    "uq_insurance_providers_single_default",
    InsuranceProvider.is_default,
    unique=True,
    postgresql_where=InsuranceProvider.is_default.is_(True),
    sqlite_where=InsuranceProvider.is_default.is_(True),
)


class InsuranceReceipient(Base):
    """Person receiving services under an insurance authorization."""

    __tablename__ = "insurance_receipients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    receipient_ma = Column(String(50), nullable=True, index=True)  # Medical Assistance number

    insurance_details = relationship("InsuranceDetails", back_populates="recipient")

    def __repr__(self) -> str:
        return f"<InsuranceReceipient {self.id}>"


class DoctorDetails(Base):
    """Prescribing doctor referenced by insurance details."""

    __tablename__ = "doctor_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doctor_name = Column(String(255), nullable=False)
    doctor_phone_no = Column(String(20), nullable=True)

    insurance_details = relationship("InsuranceDetails", back_populates="doctor")

    def __repr__(self) -> str:
        return f"<DoctorDetails {self.doctor_name}>"


class InsuranceDetails(Base):
    """
    Insurance authorization for a recipient over a service-date range.

    Rows are never edited into a new contract: a newer overlapping
    authorization deactivates the old row and is inserted alongside it.
    """

    __tablename__ = "insurance_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_id = Column(Integer, ForeignKey("insurance_providers.id"), nullable=False)
    recipient_id = Column(Integer, ForeignKey("insurance_receipients.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctor_details.id"), nullable=False)

    prsrb_prov = Column(String(100), nullable=True)  # prescribing provider
    pa = Column(String(100), nullable=True)  # prior authorization number
    from_service_date = Column(Date, nullable=False)
    to_service_date = Column(Date, nullable=False)
    recipient_is = Column(String(100), nullable=True)
    procedure_code = Column(String(50), nullable=True)
    units = Column(String(50), nullable=True)
    plan_of_care = Column(String(255), nullable=True)
    number_of_days = Column(Integer, nullable=True)
    max_per_day = Column(Integer, nullable=True)
    max_per_day_unit = Column(String(20), nullable=True)
    insurance_status = Column(String(50), nullable=True)
    mmis_entry = Column(String(100), nullable=True)
    rsn = Column(String(100), nullable=True)
    comment_pa = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    provider = relationship("InsuranceProvider", back_populates="insurance_details")
    recipient = relationship("InsuranceReceipient", back_populates="insurance_details")
    doctor = relationship("DoctorDetails", back_populates="insurance_details")

    __table_args__ = (
        Index("ix_insurance_details_recipient_active", "recipient_id", "is_active"),
        Index("ix_insurance_details_from_service_date", "from_service_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<InsuranceDetails {self.id} recipient={self.recipient_id} "
            f"{self.from_service_date}..{self.to_service_date} active={self.is_active}>"
        )

    def to_dict(self) -> Dict[str, Any]:
        return _columns_dict(self)
