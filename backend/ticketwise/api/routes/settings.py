"""
Settings routes: hourly pricing per level and the ticket logo
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ticketwise.api.deps import get_db, get_current_user, require_admin
from ticketwise.config import settings
from ticketwise.models.setting import Logo, PricingSettings, DEFAULT_PRICING, TICKET_LOGO_KEY
from ticketwise.models.user import User
from ticketwise.schemas.settings import PricingSchema, LogoPayload, LogoResponse
from ticketwise.services.sheet_renderer import is_valid_logo

logger = logging.getLogger(__name__)

router = APIRouter()


# ============ PRICING ============

@router.get("/pricing", response_model=PricingSchema)
def get_pricing(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Saved hourly rates, or the defaults when nothing was saved yet"""
    pricing = db.query(PricingSettings).first()
    return PricingSchema(**(pricing.as_dict() if pricing else DEFAULT_PRICING))


@router.put("/pricing", response_model=PricingSchema)
def update_pricing(
    data: PricingSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Replaces the hourly rates (requires ADMIN)"""
    pricing = db.query(PricingSettings).first()
    if not pricing:
        pricing = PricingSettings()
        db.add(pricing)

    for level, rate in data.model_dump().items():
        setattr(pricing, level, rate)
    pricing.updated_by = current_user.id

    db.commit()
    db.refresh(pricing)

    logger.info(f"[SETTINGS] Pricing updated by user {current_user.id}: {pricing.as_dict()}")
    return PricingSchema(**pricing.as_dict())


# ============ LOGO ============

@router.get("/logo", response_model=LogoResponse)
def get_logo(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Ticket logo; `logo` is null when the placeholder is in use"""
    logo = db.query(Logo).filter_by(key=TICKET_LOGO_KEY).first()
    return LogoResponse(logo=logo.data_uri if logo else None, is_default=logo is None)


@router.post("/logo", response_model=LogoResponse)
def upload_logo(
    data: LogoPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Stores the ticket logo as a data URI

    Raises:
        400 when the value is not a data:image/ URI or its base64 payload is corrupt
        413 when it is larger than LOGO_MAX_BYTES
    """
    if not is_valid_logo(data.data_uri):
        raise HTTPException(status_code=400, detail="Logo must be a data:image/ URI with a decodable payload")

    size = len(data.data_uri.encode("utf-8"))
    if size > settings.LOGO_MAX_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Logo is too large ({size} bytes, max {settings.LOGO_MAX_BYTES})"
        )

    logo = db.query(Logo).filter_by(key=TICKET_LOGO_KEY).first()
    if logo:
        logo.data_uri = data.data_uri
    else:
        logo = Logo(key=TICKET_LOGO_KEY, data_uri=data.data_uri)
        db.add(logo)

    db.commit()

    logger.info(f"[SETTINGS] Ticket logo updated by user {current_user.id} ({size} bytes)")
    return LogoResponse(logo=logo.data_uri, is_default=False)
