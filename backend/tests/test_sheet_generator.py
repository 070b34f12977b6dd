"""
Tests for batch sheet generation.
"""
import pytest
from datetime import datetime
from fastapi import HTTPException

from ticketwise.models import Level, SerialCounter, Sheet
from ticketwise.services.sheet_generator import (
    MAX_GENERATIONS, generate_sheets, next_start_number, split_range
)

YEAR_2025 = datetime(2025, 3, 14, 9, 30)


class TestSplitRange:
    """Tests for split_range."""

    def test_consecutive_subranges(self):
        assert split_range(1, 2, 24) == [(1, 24), (25, 48)]
        assert split_range(49, 3, 12) == [(49, 60), (61, 72), (73, 84)]


class TestGenerateSheets:
    """Tests for generate_sheets."""

    def test_batch_is_contiguous_and_ordered(self, db):
        sheets = generate_sheets(db, Level.P, 24, 2, now=YEAR_2025)

        assert [(s.start_number, s.end_number) for s in sheets] == [(1, 24), (25, 48)]
        assert all(s.pack_size == 24 for s in sheets)
        assert all(not s.is_assigned and s.downloads == 0 for s in sheets)
        assert sheets[0].start_code == "P-250001"
        assert sheets[1].end_code == "P-250048"

    def test_ranges_cover_partition_without_gaps(self, db):
        """Successive calls never overlap and cover [1, last_used]."""
        for pack_size, generations in [(12, 1), (36, 2), (24, 3)]:
            generate_sheets(db, Level.C, pack_size, generations, now=YEAR_2025)

        ranges = sorted(
            (s.start_number, s.end_number)
            for s in db.query(Sheet).filter(Sheet.level == Level.C).all()
        )
        covered = [n for start, end in ranges for n in range(start, end + 1)]
        counter = db.query(SerialCounter).filter_by(level=Level.C, year=2025).one()

        assert covered == list(range(1, counter.last_used + 1))
        assert counter.last_used == 12 + 72 + 72

    def test_partitions_do_not_interfere(self, db):
        generate_sheets(db, Level.P, 24, 1, now=YEAR_2025)
        sheets = generate_sheets(db, Level.S, 12, 1, now=YEAR_2025)
        next_year = generate_sheets(db, Level.P, 12, 1, now=datetime(2026, 1, 2))

        assert (sheets[0].start_number, sheets[0].end_number) == (1, 12)
        assert (next_year[0].start_number, next_year[0].end_number) == (1, 12)

    def test_over_limit_creates_nothing(self, db):
        generate_sheets(db, Level.E, 36, 100, now=YEAR_2025)
        generate_sheets(db, Level.E, 36, 100, now=YEAR_2025)
        before = db.query(Sheet).count()

        # 7200 used, 2799 left: 78 x 36 = 2808 does not fit
        with pytest.raises(HTTPException) as exc:
            generate_sheets(db, Level.E, 36, 78, now=YEAR_2025)

        assert exc.value.status_code == 400
        assert db.query(Sheet).count() == before
        assert db.query(SerialCounter).filter_by(level=Level.E, year=2025).one().last_used == 7200

    def test_invalid_pack_size(self, db):
        with pytest.raises(HTTPException) as exc:
            generate_sheets(db, Level.P, 20, 1, now=YEAR_2025)
        assert exc.value.status_code == 400

    def test_invalid_generations(self, db):
        for generations in (0, MAX_GENERATIONS + 1):
            with pytest.raises(HTTPException) as exc:
                generate_sheets(db, Level.P, 12, generations, now=YEAR_2025)
            assert exc.value.status_code == 400

    def test_next_start_number(self, db):
        assert next_start_number(db, Level.L, 2025) == 1
        generate_sheets(db, Level.L, 36, 1, now=YEAR_2025)
        assert next_start_number(db, Level.L, 2025) == 37
