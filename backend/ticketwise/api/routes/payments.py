"""
Payment routes

Payments live inside the family document; this router flattens them and
derives their status for the payments screen.
"""
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional

from ticketwise.api.deps import get_db, get_current_user
from ticketwise.api.utils import get_by_id
from ticketwise.models.family import Family
from ticketwise.models.user import User
from ticketwise.schemas.family import (
    PaymentEntry, PaymentTotals, PaymentListResponse, ChequeUpdate
)

logger = logging.getLogger(__name__)

router = APIRouter()


def payment_status(payment: dict, today: Optional[date] = None) -> str:
    """
    Explicit status when set, otherwise overdue once the due date has
    passed, otherwise pending
    """
    if payment.get("status"):
        return payment["status"]

    due_date = payment.get("due_date")
    if due_date:
        today = today or date.today()
        if date.fromisoformat(str(due_date)[:10]) < today:
            return "overdue"
    return "pending"


def _entry(family: Family, index: int, payment: dict, today: date) -> PaymentEntry:
    return PaymentEntry(
        family_id=family.id,
        family_name=family.display_name,
        index=index,
        method=payment["method"],
        amount=payment.get("amount", 0),
        status=payment_status(payment, today),
        due_date=payment.get("due_date"),
        date=payment.get("date"),
        cheque_received=payment.get("cheque_received")
    )


def _update_payment(db: Session, family_id: str, index: int, changes: dict) -> PaymentEntry:
    family = get_by_id(db, Family, family_id, error_message="Family not found")

    payments = [dict(p) for p in family.payments or []]
    if index < 0 or index >= len(payments):
        raise HTTPException(status_code=404, detail="Payment not found")

    payments[index].update(changes)
    family.payments = payments
    db.commit()
    db.refresh(family)

    return _entry(family, index, family.payments[index], date.today())


@router.get("", response_model=PaymentListResponse)
def list_payments(
    family_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Every family payment with its derived status, plus totals per status"""
    query = db.query(Family)
    if family_id:
        query = query.filter(Family.id == family_id)

    today = date.today()
    entries = []
    totals = PaymentTotals()

    for family in query.order_by(Family.created_at).all():
        for index, payment in enumerate(family.payments or []):
            entry = _entry(family, index, payment, today)
            setattr(totals, entry.status, getattr(totals, entry.status) + entry.amount)
            entries.append(entry)

    return PaymentListResponse(payments=entries, totals=totals, count=len(entries))


@router.post("/{family_id}/{index}/complete", response_model=PaymentEntry)
def complete_payment(
    family_id: str,
    index: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Marks the payment completed, dated today"""
    entry = _update_payment(db, family_id, index, {
        "status": "completed",
        "date": date.today().isoformat()
    })
    logger.info(f"[PAYMENTS] Payment {index} of family {family_id} completed by user {current_user.id}")
    return entry


@router.post("/{family_id}/{index}/cheque", response_model=PaymentEntry)
def mark_cheque(
    family_id: str,
    index: int,
    data: ChequeUpdate = ChequeUpdate(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Records whether the cheque of a cheque payment was received"""
    family = get_by_id(db, Family, family_id, error_message="Family not found")
    payments = family.payments or []
    if 0 <= index < len(payments) and payments[index].get("method") != "cheque":
        raise HTTPException(status_code=400, detail="Payment is not a cheque")

    entry = _update_payment(db, family_id, index, {"cheque_received": data.cheque_received})
    logger.info(f"[PAYMENTS] Cheque {index} of family {family_id} received={data.cheque_received}")
    return entry
