"""
Sequencers - Serial number allocation for ticket sheets

IMPORTANT: the 'serial_counters' table is the single source of truth.
The counter row of a (level, year) partition is locked (SELECT ... FOR UPDATE)
for the whole allocate-then-commit transaction, so two concurrent generations
can never receive overlapping ranges. Numbers never restart, even if sheets
are deleted.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple
from fastapi import HTTPException
from sqlalchemy import func, extract
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ticketwise.models.sheet import Sheet, Level, SERIAL_MAX
from ticketwise.models.serial_counter import SerialCounter

logger = logging.getLogger(__name__)


def _highest_issued_serial(db: Session, level: Level, year: int) -> int:
    """Max end_number over every persisted sheet of the partition (soft deleted included)"""
    highest = db.query(func.max(Sheet.end_number)).filter(
        Sheet.level == level,
        extract("year", Sheet.generation_date) == year
    ).scalar()
    return highest or 0


def _lock_counter(db: Session, level: Level, year: int) -> SerialCounter:
    """
    Returns the partition counter, locked for update.

    First use of a partition: the counter is seeded from the sheets already
    persisted for it. A concurrent first insert hits the unique constraint,
    in which case the row written by the other request is read instead.
    """
    query = db.query(SerialCounter).filter(
        SerialCounter.level == level,
        SerialCounter.year == year
    ).with_for_update()

    counter = query.first()
    if counter:
        return counter

    counter = SerialCounter(
        level=level,
        year=year,
        last_used=_highest_issued_serial(db, level, year)
    )
    try:
        with db.begin_nested():
            db.add(counter)
    except IntegrityError:
        logger.info(f"[SERIAL] Counter {level.value}-{year} created concurrently, reloading")
        counter = query.populate_existing().one()

    return counter


def peek_next_serial(db: Session, level: Level, year: Optional[int] = None) -> int:
    """
    Next serial that would be issued for the partition (read only, no lock).
    Used to preview sheet numbers before generating them.
    """
    year = year or datetime.utcnow().year
    counter = db.query(SerialCounter).filter(
        SerialCounter.level == level,
        SerialCounter.year == year
    ).first()

    last_used = counter.last_used if counter else _highest_issued_serial(db, level, year)
    return last_used + 1


def allocate_serials(
    db: Session,
    level: Level,
    count: int,
    year: Optional[int] = None
) -> Tuple[int, int]:
    """
    Reserves `count` contiguous serials in the (level, year) partition.

    The allocation is all-or-nothing: when it would go past 9999 nothing is
    reserved and the counter is left untouched. The caller owns the
    transaction and must commit (or roll back) together with the rows that
    use the range.

    Args:
        db: Database session
        level: Education level of the partition
        count: Number of serials requested (> 0)
        year: Full year of the partition (default: current year)

    Returns:
        Inclusive range (start, end)

    Raises:
        HTTPException 400 if count is not positive or the yearly limit would be exceeded

    Usage:
        start, end = allocate_serials(db, Level.P, 48)
        # First batch of the year: (1, 48)
    """
    if count < 1:
        raise HTTPException(status_code=400, detail="Serial count must be positive")

    year = year or datetime.utcnow().year
    counter = _lock_counter(db, level, year)

    if counter.last_used + count > SERIAL_MAX:
        available = SERIAL_MAX - counter.last_used
        partition = f"{level.value}-{year % 100:02d}"
        logger.warning(
            f"[SERIAL] Refused {count} serials for {partition}: "
            f"last used {counter.last_used}, {available} left"
        )
        raise HTTPException(
            status_code=400,
            detail=(
                f"Yearly limit exceeded for {partition}: requested {count} tickets "
                f"but only {available} serial(s) remain (last used {counter.last_used}, "
                f"short by {count - available})"
            )
        )

    start = counter.last_used + 1
    counter.last_used += count

    # Flush so the reservation is part of the pending transaction
    db.flush()

    return start, counter.last_used
