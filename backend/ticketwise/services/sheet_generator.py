"""
Sheet generation: turns one serial allocation into a batch of numbered sheets
"""
import logging
import uuid
from datetime import datetime
from typing import List, Optional
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ticketwise.api.utils.sequencers import allocate_serials, peek_next_serial
from ticketwise.models.sheet import Sheet, Level, PACK_SIZES

logger = logging.getLogger(__name__)

MAX_GENERATIONS = 100


def new_sheet_id() -> str:
    return f"sheet-{uuid.uuid4().hex}"


def split_range(start: int, generations: int, pack_size: int) -> List[tuple]:
    """
    Splits the contiguous range starting at `start` into `generations`
    consecutive sub-ranges of `pack_size` serials, in order.

        split_range(1, 2, 24)  ->  [(1, 24), (25, 48)]
    """
    return [
        (start + k * pack_size, start + (k + 1) * pack_size - 1)
        for k in range(generations)
    ]


def generate_sheets(
    db: Session,
    level: Level,
    pack_size: int,
    generations: int,
    now: Optional[datetime] = None
) -> List[Sheet]:
    """
    Generates `generations` sheets of `pack_size` tickets for `level`.

    One allocation covers the whole batch and the counter update is
    committed together with the sheets, so either every sheet is created
    or none is.

    Raises:
        HTTPException 400 on invalid input or when the yearly serial limit
        of the partition would be exceeded
    """
    if pack_size not in PACK_SIZES:
        allowed = ", ".join(str(s) for s in PACK_SIZES)
        raise HTTPException(status_code=400, detail=f"Invalid pack size {pack_size}. Allowed: {allowed}")
    if generations < 1 or generations > MAX_GENERATIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Number of sheets must be between 1 and {MAX_GENERATIONS}"
        )

    now = now or datetime.utcnow()

    try:
        start, _ = allocate_serials(db, level, generations * pack_size, year=now.year)

        sheets = [
            Sheet(
                id=new_sheet_id(),
                level=level,
                pack_size=pack_size,
                start_number=first,
                end_number=last,
                is_assigned=False,
                downloads=0,
                generation_date=now,
            )
            for first, last in split_range(start, generations, pack_size)
        ]
        db.add_all(sheets)
        db.commit()
    except Exception:
        db.rollback()
        raise

    for sheet in sheets:
        db.refresh(sheet)

    logger.info(
        f"[SHEETS] Generated {generations} sheet(s) of {pack_size} for "
        f"{level.value}-{now.year % 100:02d}: {sheets[0].start_number}..{sheets[-1].end_number}"
    )
    return sheets


def next_start_number(db: Session, level: Level, year: Optional[int] = None) -> int:
    """First serial the next generated sheet of `level` would start at"""
    return peek_next_serial(db, level, year)
