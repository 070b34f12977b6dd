"""
Tests for the serial allocator.
"""
import pytest
from datetime import datetime
from fastapi import HTTPException

from ticketwise.api.utils.sequencers import allocate_serials, peek_next_serial
from ticketwise.models import Level, SerialCounter, Sheet


def counter_value(db, level, year):
    counter = db.query(SerialCounter).filter_by(level=level, year=year).first()
    return counter.last_used if counter else None


class TestAllocateSerials:
    """Tests for allocate_serials."""

    def test_first_allocation_starts_at_one(self, db):
        assert allocate_serials(db, Level.P, 24, year=2025) == (1, 24)
        db.commit()
        assert counter_value(db, Level.P, 2025) == 24

    def test_consecutive_allocations_are_contiguous(self, db):
        first = allocate_serials(db, Level.C, 12, year=2025)
        second = allocate_serials(db, Level.C, 36, year=2025)
        db.commit()

        assert first == (1, 12)
        assert second == (13, 48)

    def test_partitions_are_independent(self, db):
        allocate_serials(db, Level.P, 24, year=2025)
        assert allocate_serials(db, Level.L, 12, year=2025) == (1, 12)
        assert allocate_serials(db, Level.P, 12, year=2026) == (1, 12)
        db.commit()

    def test_rejects_non_positive_count(self, db):
        with pytest.raises(HTTPException) as exc:
            allocate_serials(db, Level.P, 0, year=2025)
        assert exc.value.status_code == 400

    def test_exact_limit_is_allowed(self, db):
        assert allocate_serials(db, Level.S, 9999, year=2025) == (1, 9999)

    def test_over_limit_leaves_counter_unchanged(self, db):
        allocate_serials(db, Level.E, 9990, year=2025)
        db.commit()

        with pytest.raises(HTTPException) as exc:
            allocate_serials(db, Level.E, 12, year=2025)
        db.rollback()

        assert exc.value.status_code == 400
        assert "Yearly limit exceeded for E-25" in exc.value.detail
        assert "only 9 serial(s) remain" in exc.value.detail
        assert counter_value(db, Level.E, 2025) == 9990

    def test_counter_seeded_from_existing_sheets(self, db):
        """Sheets persisted before the counter existed are never reissued."""
        db.add(Sheet(
            id="sheet-legacy", level=Level.P, pack_size=24, start_number=1, end_number=24,
            generation_date=datetime(2025, 1, 10), is_deleted=True
        ))
        db.commit()

        assert allocate_serials(db, Level.P, 12, year=2025) == (25, 36)


class TestPeekNextSerial:
    """Tests for peek_next_serial."""

    def test_clean_partition(self, db):
        assert peek_next_serial(db, Level.P, 2025) == 1

    def test_does_not_reserve(self, db):
        allocate_serials(db, Level.P, 24, year=2025)
        db.commit()

        assert peek_next_serial(db, Level.P, 2025) == 25
        assert peek_next_serial(db, Level.P, 2025) == 25
        assert counter_value(db, Level.P, 2025) == 24
