"""
Tests for the supersession rule on insurance details create/update.
"""

import pytest
from datetime import date

from app.db.models import InsuranceDetails
from app.services.insurance_details import (
    ranges_overlap,
    find_overlapping_active,
    create_insurance_details,
    update_insurance_details,
)
from app.services.errors import RecordNotFoundError, InvalidRecordError


def _fields(provider, recipient, doctor, from_service_date, to_service_date, **extra):
    fields = {
        "provider_id": provider.id,
        "recipient_id": recipient.id,
        "doctor_id": doctor.id,
        "from_service_date": from_service_date,
        "to_service_date": to_service_date,
    }
    fields.update(extra)
    return fields


class TestRangesOverlap:
    """Test the closed-interval overlap predicate."""

    def test_disjoint_ranges(self):
        assert ranges_overlap(date(2024, 1, 1), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 28)) is False

    def test_partial_overlap(self):
        assert ranges_overlap(date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 15), date(2024, 2, 15)) is True

    def test_containment(self):
        assert ranges_overlap(date(2024, 1, 1), date(2024, 12, 31), date(2024, 3, 1), date(2024, 3, 2)) is True

    def test_boundary_equality_overlaps(self):
        """Existing end equal to new start counts as overlap."""
        assert ranges_overlap(date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 31), date(2024, 2, 28)) is True
        assert ranges_overlap(date(2024, 2, 1), date(2024, 2, 28), date(2024, 1, 1), date(2024, 2, 1)) is True

    def test_new_range_before_existing(self):
        assert ranges_overlap(date(2024, 3, 1), date(2024, 3, 31), date(2024, 1, 1), date(2024, 2, 29)) is False


class TestCreateSupersession:
    """Test supersession when creating insurance details."""

    def test_overlapping_active_record_is_deactivated(
        self, db, make_details, test_provider, test_recipient, test_doctor
    ):
        old = make_details(test_recipient, date(2024, 1, 1), date(2024, 6, 30))

        new = create_insurance_details(db, _fields(
            test_provider, test_recipient, test_doctor, date(2024, 6, 1), date(2024, 12, 31)
        ))

        db.refresh(old)
        assert old.is_active is False
        assert new.is_active is True
        active = db.query(InsuranceDetails).filter(
            InsuranceDetails.recipient_id == test_recipient.id,
            InsuranceDetails.is_active.is_(True),
        ).all()
        assert [d.id for d in active] == [new.id]

    def test_every_overlapping_active_record_is_deactivated(
        self, db, make_details, test_provider, test_recipient, test_doctor
    ):
        january = make_details(test_recipient, date(2024, 1, 1), date(2024, 1, 31))
        june = make_details(test_recipient, date(2024, 6, 1), date(2024, 6, 30))

        new = create_insurance_details(db, _fields(
            test_provider, test_recipient, test_doctor, date(2024, 1, 1), date(2024, 12, 31)
        ))

        db.refresh(january)
        db.refresh(june)
        assert january.is_active is False
        assert june.is_active is False
        active = db.query(InsuranceDetails).filter(
            InsuranceDetails.recipient_id == test_recipient.id,
            InsuranceDetails.is_active.is_(True),
        ).all()
        assert [d.id for d in active] == [new.id]

    def test_no_overlap_leaves_existing_untouched(
        self, db, make_details, test_provider, test_recipient, test_doctor
    ):
        old = make_details(test_recipient, date(2024, 1, 1), date(2024, 1, 31))

        new = create_insurance_details(db, _fields(
            test_provider, test_recipient, test_doctor, date(2024, 2, 1), date(2024, 2, 29)
        ))

        db.refresh(old)
        assert old.is_active is True
        assert new.is_active is True
        assert db.query(InsuranceDetails).count() == 2

    def test_boundary_day_supersedes(
        self, db, make_details, test_provider, test_recipient, test_doctor
    ):
        old = make_details(test_recipient, date(2024, 1, 1), date(2024, 1, 31))

        create_insurance_details(db, _fields(
            test_provider, test_recipient, test_doctor, date(2024, 1, 31), date(2024, 2, 29)
        ))

        db.refresh(old)
        assert old.is_active is False

    def test_other_recipient_not_affected(
        self, db, make_details, test_provider, test_recipient, other_recipient, test_doctor
    ):
        other = make_details(other_recipient, date(2024, 1, 1), date(2024, 6, 30))

        create_insurance_details(db, _fields(
            test_provider, test_recipient, test_doctor, date(2024, 1, 1), date(2024, 6, 30)
        ))

        db.refresh(other)
        assert other.is_active is True

    def test_inactive_records_are_ignored(self, db, make_details, test_recipient):
        make_details(test_recipient, date(2024, 1, 1), date(2024, 6, 30), is_active=False)

        found = find_overlapping_active(db, test_recipient.id, date(2024, 3, 1), date(2024, 3, 31))

        assert found == []

    def test_units_taken_from_procedure_val(
        self, db, test_provider, test_recipient, test_doctor
    ):
        details = create_insurance_details(db, _fields(
            test_provider, test_recipient, test_doctor, date(2024, 1, 1), date(2024, 1, 31),
            units="999", procedure_val="120",
        ))

        assert details.units == "120"

    def test_units_empty_without_procedure_val(
        self, db, test_provider, test_recipient, test_doctor
    ):
        details = create_insurance_details(db, _fields(
            test_provider, test_recipient, test_doctor, date(2024, 1, 1), date(2024, 1, 31),
            units="999",
        ))

        assert details.units is None

    def test_unknown_recipient_rejected(self, db, test_provider, test_recipient, test_doctor):
        fields = _fields(test_provider, test_recipient, test_doctor, date(2024, 1, 1), date(2024, 1, 31))
        fields["recipient_id"] = 9999

        with pytest.raises(RecordNotFoundError):
            create_insurance_details(db, fields)
        assert db.query(InsuranceDetails).count() == 0

    def test_reversed_dates_rejected(self, db, test_provider, test_recipient, test_doctor):
        with pytest.raises(InvalidRecordError):
            create_insurance_details(db, _fields(
                test_provider, test_recipient, test_doctor, date(2024, 2, 1), date(2024, 1, 1)
            ))


class TestUpdateSupersession:
    """Test supersession when updating insurance details."""

    def test_update_into_overlap_deactivates_other_record(
        self, db, make_details, test_recipient
    ):
        first = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31))
        second = make_details(test_recipient, date(2024, 5, 1), date(2024, 6, 30))

        updated = update_insurance_details(db, second.id, {"from_service_date": date(2024, 3, 15)})

        db.refresh(first)
        assert first.is_active is False
        assert updated.is_active is True
        assert updated.from_service_date == date(2024, 3, 15)

    def test_update_does_not_deactivate_itself(self, db, make_details, test_recipient):
        details = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31))

        updated = update_insurance_details(db, details.id, {"to_service_date": date(2024, 4, 30)})

        assert updated.is_active is True
        assert updated.to_service_date == date(2024, 4, 30)

    def test_update_uses_new_recipient(
        self, db, make_details, test_recipient, other_recipient
    ):
        other = make_details(other_recipient, date(2024, 1, 1), date(2024, 3, 31))
        details = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31))

        update_insurance_details(db, details.id, {"recipient_id": other_recipient.id})

        db.refresh(other)
        assert other.is_active is False

    def test_update_maps_procedure_val_only_when_supplied(self, db, make_details, test_recipient):
        details = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31), units="40")

        updated = update_insurance_details(db, details.id, {"units": "999", "rsn": "renewal"})
        assert updated.units == "40"
        assert updated.rsn == "renewal"

        updated = update_insurance_details(db, details.id, {"procedure_val": "80"})
        assert updated.units == "80"

    def test_update_missing_record(self, db):
        with pytest.raises(RecordNotFoundError):
            update_insurance_details(db, 4242, {"rsn": "x"})

    def test_update_rejects_reversed_dates(self, db, make_details, test_recipient):
        details = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31))

        with pytest.raises(InvalidRecordError):
            update_insurance_details(db, details.id, {"from_service_date": date(2024, 4, 1)})

    def test_update_rejects_null_required_field(self, db, make_details, test_recipient):
        details = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31))

        with pytest.raises(InvalidRecordError):
            update_insurance_details(db, details.id, {"provider_id": None})

    def test_update_of_retired_record_leaves_active_record(
        self, db, make_details, test_recipient
    ):
        live = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31))
        retired = make_details(test_recipient, date(2023, 1, 1), date(2023, 3, 31), is_active=False)

        updated = update_insurance_details(db, retired.id, {
            "from_service_date": date(2023, 1, 2),
            "to_service_date": date(2024, 1, 15),
        })

        db.refresh(live)
        assert live.is_active is True
        assert updated.is_active is False
        assert updated.to_service_date == date(2024, 1, 15)

    def test_update_with_only_ignored_units_rejected(self, db, make_details, test_recipient):
        details = make_details(test_recipient, date(2024, 1, 1), date(2024, 3, 31), units="40")

        with pytest.raises(InvalidRecordError):
            update_insurance_details(db, details.id, {"units": "5"})
