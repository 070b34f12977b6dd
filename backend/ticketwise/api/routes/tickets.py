"""
Ticket routes

Tickets are materialized lazily: the first time a family's pack is opened,
every serial of its sheets becomes a Ticket row, and sheets assigned later
are materialized on the next open. Afterwards only the validation state
changes.
"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional, List

from ticketwise.api.deps import get_db, get_current_user
from ticketwise.api.utils import get_by_id, bulk_get
from ticketwise.models.family import Family
from ticketwise.models.sheet import Sheet
from ticketwise.models.ticket import Ticket
from ticketwise.models.user import User, UserRole
from ticketwise.schemas.ticket import (
    TicketResponse, TicketListResponse, TicketBulkUpsert,
    TicketValidationRequest, TicketValidationResponse
)
from ticketwise.services.ticket_materializer import materialize_tickets

logger = logging.getLogger(__name__)

router = APIRouter()


def _ticket_list(tickets: List[Ticket]) -> TicketListResponse:
    used = sum(1 for t in tickets if t.is_used)
    return TicketListResponse(
        tickets=[TicketResponse.model_validate(t) for t in tickets],
        total=len(tickets),
        used=used,
        remaining=len(tickets) - used
    )


def _family_tickets(db: Session, family_id: str) -> List[Ticket]:
    return db.query(Ticket).filter(Ticket.family_id == family_id).order_by(Ticket.id).all()


@router.get("", response_model=TicketListResponse)
def list_tickets(
    family_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Tickets of a family (404 when it has none yet).
    Without family_id, every ticket (requires ADMIN).
    """
    if not family_id:
        if current_user.role != UserRole.ADMIN:
            raise HTTPException(status_code=403, detail="Access denied: administrators only")
        return _ticket_list(db.query(Ticket).order_by(Ticket.id).all())

    tickets = _family_tickets(db, family_id)
    if not tickets:
        raise HTTPException(status_code=404, detail="No tickets found for this family")
    return _ticket_list(tickets)


@router.post("", response_model=TicketListResponse)
def upsert_tickets(
    data: TicketBulkUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Bulk create-or-update by ticket id"""
    ids = [item.id for item in data.tickets]
    existing = {t.id: t for t in db.query(Ticket).filter(Ticket.id.in_(ids)).all()}

    saved = []
    for item in data.tickets:
        ticket = existing.get(item.id)
        if ticket is None:
            ticket = Ticket(**item.model_dump())
            db.add(ticket)
            existing[item.id] = ticket
        else:
            for field, value in item.model_dump().items():
                setattr(ticket, field, value)
        saved.append(ticket)

    db.commit()
    for ticket in saved:
        db.refresh(ticket)

    logger.info(f"[TICKETS] Upserted {len(saved)} ticket(s)")
    return _ticket_list(sorted({t.id: t for t in saved}.values(), key=lambda t: t.id))


@router.post("/validate", response_model=TicketValidationResponse)
def validate_tickets(
    data: TicketValidationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Marks tickets of a family as used (or unused)

    Only existing tickets are updated, never created: unknown ids answer
    404 and tickets of another family 400, with nothing written.
    """
    ids = list(dict.fromkeys(item.id for item in data.tickets))
    tickets = {t.id: t for t in bulk_get(db, Ticket, ids, "Ticket")}

    foreign = [t.id for t in tickets.values() if t.family_id != data.family_id]
    if foreign:
        raise HTTPException(
            status_code=400,
            detail=f"Tickets do not belong to family {data.family_id}: {foreign}"
        )

    validated_by = data.validated_by or "system"
    now = datetime.utcnow()
    updated = []

    for item in data.tickets:
        ticket = tickets[item.id]
        if ticket.is_used == item.is_used:
            continue
        ticket.is_used = item.is_used
        ticket.validated_at = now if item.is_used else None
        ticket.validated_by = validated_by if item.is_used else None
        updated.append(ticket)

    db.commit()
    for ticket in updated:
        db.refresh(ticket)

    logger.info(f"[TICKETS] {len(updated)} ticket(s) updated for family {data.family_id} by {validated_by}")
    return TicketValidationResponse(
        updated=len(updated),
        tickets=[TicketResponse.model_validate(t) for t in updated]
    )


@router.post("/families/{family_id}/open", response_model=TicketListResponse)
def open_family_pack(
    family_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Returns the tickets of a family, materializing them on first open

    Opening twice never duplicates tickets: only the family's active sheets
    without any ticket yet are materialized. A sheet added after the first
    open is therefore materialized on the next one.

    Raises:
        HTTPException 400 if the family has no active sheet and no ticket
        HTTPException 409 if the codes already exist for another family
    """
    family = get_by_id(db, Family, family_id, error_message="Family not found")

    tickets = _family_tickets(db, family_id)
    materialized = {t.sheet_id for t in tickets}
    pending = [sheet_id for sheet_id in (family.sheet_ids or []) if sheet_id not in materialized]

    sheets = []
    if pending:
        sheets = db.query(Sheet).filter(
            Sheet.id.in_(pending),
            Sheet.is_deleted == False
        ).all()

    if not sheets:
        if not tickets:
            raise HTTPException(status_code=400, detail="Family has no assigned sheets")
        return _ticket_list(tickets)

    new_tickets = materialize_tickets(family, sheets)
    codes = [t.id for t in new_tickets]

    try:
        db.add_all(new_tickets)
        db.commit()
    except IntegrityError:
        db.rollback()
        tickets = _family_tickets(db, family_id)
        owned = {t.id for t in tickets}
        missing = [code for code in codes if code not in owned]
        if missing:
            logger.error(f"[TICKETS] Cannot open family {family_id}: {len(missing)} code(s) held by another family")
            raise HTTPException(
                status_code=409,
                detail=f"Tickets already exist for another family: {missing}"
            )
        # Another request opened the same pack first
        logger.warning(f"[TICKETS] Concurrent open for family {family_id}, reloading")
        return _ticket_list(tickets)

    logger.info(f"[TICKETS] Materialized {len(new_tickets)} ticket(s) for family {family_id}")
    return _ticket_list(_family_tickets(db, family_id))


@router.delete("/{ticket_id}", status_code=204)
def delete_ticket(
    ticket_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ticket = get_by_id(db, Ticket, ticket_id, error_message="Ticket not found")
    db.delete(ticket)
    db.commit()
    logger.info(f"[TICKETS] Ticket {ticket_id} deleted")
    return None
