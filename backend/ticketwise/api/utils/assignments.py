"""
Sheet Assignments - keeps sheets, families and tickets consistent

A sheet belongs to a family when both sides agree: sheet.family_id points at
the family and the family lists the sheet id in sheet_ids. Every route that
moves a sheet goes through these helpers, never through setattr.

Tickets materialized from a sheet belong to the family that opened the pack.
When the sheet leaves that family its unused tickets are deleted, so the
next owner can materialize the same codes again.
"""
import logging
from typing import List
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ticketwise.api.utils.db_helpers import get_by_id, bulk_get
from ticketwise.models.family import Family
from ticketwise.models.sheet import Sheet
from ticketwise.models.ticket import Ticket

logger = logging.getLogger(__name__)


def release_sheets(db: Session, family_id: str, sheets: List[Sheet]) -> int:
    """
    Unassigns the sheets and deletes the tickets the family materialized
    from them. Does not touch family.sheet_ids nor commit.

    Returns:
        Number of tickets deleted

    Raises:
        HTTPException 409 if one of those tickets was already used
    """
    if not sheets:
        return 0

    sheet_ids = [s.id for s in sheets]
    tickets = db.query(Ticket).filter(
        Ticket.family_id == family_id,
        Ticket.sheet_id.in_(sheet_ids)
    )

    used = sorted({t.sheet_id for t in tickets.filter(Ticket.is_used == True).all()})
    if used:
        raise HTTPException(
            status_code=409,
            detail=f"Sheets have used tickets and cannot leave family {family_id}: {used}"
        )

    removed = tickets.delete(synchronize_session=False)
    for sheet in sheets:
        sheet.is_assigned = False
        sheet.family_id = None

    logger.info(f"[SHEETS] Released {len(sheets)} sheet(s) of family {family_id} ({removed} ticket(s) deleted)")
    return removed


def assign_sheets(db: Session, family: Family, sheet_ids: List[str]) -> List[str]:
    """
    Makes the family own exactly `sheet_ids`: listed sheets are assigned,
    sheets dropped from the list are released. Does not commit.

    Returns:
        The deduplicated list to store in family.sheet_ids

    Raises:
        HTTPException 404 for unknown sheets
        HTTPException 409 for deleted sheets or sheets of another family
    """
    wanted = list(dict.fromkeys(sheet_ids))
    sheets = bulk_get(db, Sheet, wanted, "Sheet")

    unavailable = [
        s.id for s in sheets
        if s.is_deleted or (s.is_assigned and s.family_id not in (None, family.id))
    ]
    if unavailable:
        raise HTTPException(
            status_code=409,
            detail=f"Sheets already assigned or deleted: {unavailable}"
        )

    released = [
        s for s in db.query(Sheet).filter(Sheet.family_id == family.id).all()
        if s.id not in wanted
    ]
    release_sheets(db, family.id, released)

    for sheet in sheets:
        sheet.is_assigned = True
        sheet.family_id = family.id

    return wanted


def attach_sheet(db: Session, sheet: Sheet, family_id: str) -> Family:
    """
    Adds one sheet to a family, on both sides. Does not commit.

    Raises:
        HTTPException 404 if the family does not exist
        HTTPException 409 if the sheet is deleted or owned by another family
    """
    family = get_by_id(db, Family, family_id, error_message="Family not found")

    if sheet.is_deleted or (sheet.family_id and sheet.family_id != family.id):
        raise HTTPException(
            status_code=409,
            detail=f"Sheet {sheet.id} already assigned or deleted"
        )

    if sheet.id not in (family.sheet_ids or []):
        family.sheet_ids = list(family.sheet_ids or []) + [sheet.id]
    sheet.is_assigned = True
    sheet.family_id = family.id
    return family


def detach_sheet(db: Session, sheet: Sheet) -> None:
    """
    Removes one sheet from the family owning it, on both sides. Does not commit.
    No-op for unassigned sheets.
    """
    family_id = sheet.family_id
    if not family_id:
        sheet.is_assigned = False
        return

    family = db.get(Family, family_id)
    if family is not None:
        family.sheet_ids = [i for i in (family.sheet_ids or []) if i != sheet.id]

    release_sheets(db, family_id, [sheet])
