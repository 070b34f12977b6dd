"""
Family routes

Assigning sheets to a family happens through the upsert: sheets listed in
sheet_ids are flagged as assigned to it, sheets dropped from the list are
released and lose the unused tickets materialized from them.
"""
import logging
import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ticketwise.api.deps import get_db, get_current_user
from ticketwise.api.utils import get_by_id, assign_sheets
from ticketwise.models.family import Family
from ticketwise.models.sheet import Sheet, Level
from ticketwise.models.ticket import Ticket
from ticketwise.models.user import User
from ticketwise.schemas.family import FamilyUpsert, FamilyResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[FamilyResponse])
def list_families(
    level: Optional[Level] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(Family)
    if level:
        query = query.filter(Family.level == level)
    return query.order_by(Family.created_at.desc()).all()


@router.get("/{family_id}", response_model=FamilyResponse)
def get_family(
    family_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_by_id(db, Family, family_id, error_message="Family not found")


@router.post("", response_model=FamilyResponse)
def upsert_family(
    data: FamilyUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Creates the family, or replaces it when the id already exists
    """
    family = None
    if data.id:
        family = get_by_id(db, Family, data.id, raise_not_found=False)

    created = family is None
    if created:
        family = Family(id=data.id or f"family-{uuid.uuid4().hex}")
        db.add(family)

    payload = data.model_dump(mode="json", exclude={"id", "sheet_ids", "level"})
    for field, value in payload.items():
        setattr(family, field, value)
    family.level = data.level

    try:
        family.sheet_ids = assign_sheets(db, family, data.sheet_ids)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(family)
    logger.info(f"[FAMILIES] Family {family.id} {'created' if created else 'updated'} "
                f"with {len(family.sheet_ids)} sheet(s)")
    return family


@router.delete("/{family_id}", status_code=204)
def delete_family(
    family_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Deletes the family with its tickets and releases its sheets"""
    family = get_by_id(db, Family, family_id, error_message="Family not found")

    removed = db.query(Ticket).filter(Ticket.family_id == family_id).delete(synchronize_session=False)
    sheets = db.query(Sheet).filter(Sheet.family_id == family_id).all()
    for sheet in sheets:
        sheet.is_assigned = False
        sheet.family_id = None
    db.delete(family)
    db.commit()

    logger.info(f"[FAMILIES] Family {family_id} deleted ({removed} ticket(s), {len(sheets)} sheet(s) released)")
    return None
