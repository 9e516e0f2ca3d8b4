"""
Seed script for populating the database with sample insurance records.
Run with: python data/seed_insurance.py
"""
import sys
from pathlib import Path
from datetime import date

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from app.db import SessionLocal, init_db
from app.db.models import InsuranceProvider, InsuranceReceipient, DoctorDetails, InsuranceDetails
from app.services.insurance_details import create_insurance_details


SAMPLE_PROVIDERS = [
    {"provider_name": "Medical Assistance", "provider_code": "MA", "phone_no_1": "800-555-0100", "is_default": True},
    {"provider_name": "Keystone Health Plan", "provider_code": "KHP", "phone_no_1": "800-555-0142", "phone_no_2": "800-555-0143"},
    {"provider_name": "Community Care Partners", "provider_code": "CCP", "phone_no_1": "800-555-0177"},
]

SAMPLE_RECIPIENTS = [
    {"name": "Alex Morgan", "receipient_ma": "1000234567"},
    {"name": "Jordan Lee", "receipient_ma": "1000987654"},
    {"name": "Sam Rivera", "receipient_ma": "1000555123"},
]

SAMPLE_DOCTORS = [
    {"doctor_name": "Dr. Priya Shah", "doctor_phone_no": "215-555-0190"},
    {"doctor_name": "Dr. Marcus Bell", "doctor_phone_no": "215-555-0111"},
]


def seed_reference_data(db: Session):
    """Insert providers, recipients and doctors."""
    providers = [InsuranceProvider(**data) for data in SAMPLE_PROVIDERS]
    recipients = [InsuranceReceipient(**data) for data in SAMPLE_RECIPIENTS]
    doctors = [DoctorDetails(**data) for data in SAMPLE_DOCTORS]

    db.add_all(providers + recipients + doctors)
    db.commit()
    return providers, recipients, doctors


def seed_insurance():
    """Seed the database with sample insurance records."""
    init_db()
    db = SessionLocal()

    try:
        if db.query(InsuranceProvider).count():
            print("Database already has providers, skipping seed.")
            return

        providers, recipients, doctors = seed_reference_data(db)
        print(f"  Created {len(providers)} providers, {len(recipients)} recipients, {len(doctors)} doctors")

        for index, recipient in enumerate(recipients):
            create_insurance_details(db, {
                "provider_id": providers[index % len(providers)].id,
                "recipient_id": recipient.id,
                "doctor_id": doctors[index % len(doctors)].id,
                "pa": f"PA-2024-{index + 1:04d}",
                "from_service_date": date(2024, 1, 1),
                "to_service_date": date(2024, 6, 30),
                "procedure_code": "W1726",
                "procedure_val": "120",
                "number_of_days": 5,
                "max_per_day": 8,
                "max_per_day_unit": "units",
                "insurance_status": "approved",
            })

        # Renewal that supersedes the first recipient's authorization
        create_insurance_details(db, {
            "provider_id": providers[0].id,
            "recipient_id": recipients[0].id,
            "doctor_id": doctors[0].id,
            "pa": "PA-2024-0100",
            "from_service_date": date(2024, 6, 1),
            "to_service_date": date(2024, 12, 31),
            "procedure_code": "W1726",
            "procedure_val": "160",
            "insurance_status": "approved",
        })

        print("\n" + "="*60)
        print("SEEDING COMPLETE!")
        print("="*60)

        print(f"\nDatabase Summary:")
        print(f"  Providers: {db.query(InsuranceProvider).count()}")
        print(f"  Recipients: {db.query(InsuranceReceipient).count()}")
        print(f"  Doctors: {db.query(DoctorDetails).count()}")
        print(f"  Insurance Details: {db.query(InsuranceDetails).count()}")
        print(f"  Active Insurance Details: {db.query(InsuranceDetails).filter(InsuranceDetails.is_active.is_(True)).count()}")
        print()

    except Exception as e:
        print(f"\nError: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_insurance()
