"""
Ticket sheet routes

Generation goes through the serial allocator only. The bulk upsert may
touch the mutable fields of existing sheets, never their serial ranges, and
assigns sheets on both sides (sheet.family_id and the family's sheet_ids).
"""
import io
import logging
import zipfile
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session
from typing import Optional, List

from ticketwise.api.deps import get_db, get_current_user, require_admin
from ticketwise.api.utils import get_by_id, bulk_get, attach_sheet, detach_sheet
from ticketwise.models.sheet import Sheet, Level, SERIAL_MAX
from ticketwise.models.setting import Logo, TICKET_LOGO_KEY
from ticketwise.models.user import User, UserRole
from ticketwise.core.ticket_codes import format_ticket_code
from ticketwise.schemas.sheet import (
    SheetResponse, SheetListResponse, SheetGenerateRequest, SheetGenerateResponse,
    SheetBulkUpdate, SheetExportRequest, NextStartResponse
)
from ticketwise.services.pdf_service import pdf_service
from ticketwise.services.sheet_generator import generate_sheets, next_start_number
from ticketwise.services.sheet_renderer import render_sheet_svg, sheet_filename

logger = logging.getLogger(__name__)

router = APIRouter()

SVG_MEDIA_TYPE = "image/svg+xml"


def get_ticket_logo(db: Session) -> Optional[str]:
    """Stored ticket logo, None when never uploaded"""
    logo = db.query(Logo).filter_by(key=TICKET_LOGO_KEY).first()
    return logo.data_uri if logo else None


def _active_sheet(db: Session, sheet_id: str) -> Sheet:
    sheet = get_by_id(db, Sheet, sheet_id, error_message="Sheet not found")
    if sheet.is_deleted:
        raise HTTPException(status_code=404, detail="Sheet not found")
    return sheet


def _export_sheets(db: Session, sheet_ids: List[str]) -> List[Sheet]:
    """Sheets in the requested order, with downloads already incremented"""
    found = {s.id: s for s in bulk_get(db, Sheet, list(dict.fromkeys(sheet_ids)), "Sheet")}
    deleted = [s.id for s in found.values() if s.is_deleted]
    if deleted:
        raise HTTPException(status_code=404, detail=f"Sheets not found: {', '.join(deleted)}")

    sheets = [found[sheet_id] for sheet_id in dict.fromkeys(sheet_ids)]
    for sheet in sheets:
        sheet.downloads = (sheet.downloads or 0) + 1
    return sheets


def _apply_sheet_update(db: Session, sheet: Sheet, changes: dict) -> None:
    """
    Applies one partial update. Assignment changes keep the family's
    sheet_ids in sync and deleting a sheet detaches it first.
    """
    if changes.get("downloads") is not None:
        sheet.downloads = changes["downloads"]

    if changes.get("is_deleted") is True:
        detach_sheet(db, sheet)
        sheet.is_deleted = True
        return
    if changes.get("is_deleted") is False:
        sheet.is_deleted = False

    family_id = changes.get("family_id")
    if changes.get("is_assigned") is False or ("family_id" in changes and family_id is None):
        detach_sheet(db, sheet)
    elif family_id:
        attach_sheet(db, sheet, family_id)
    elif changes.get("is_assigned") and not sheet.family_id:
        raise HTTPException(status_code=400, detail=f"Sheet {sheet.id}: family_id is required to assign it")


# ============ LISTING ============

@router.get("", response_model=SheetListResponse)
def list_sheets(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    is_assigned: Optional[bool] = None,
    family_id: Optional[str] = None,
    level: Optional[Level] = None,
    pack_size: Optional[int] = None
):
    """
    Lists sheets, newest first. Soft-deleted sheets are never returned.
    """
    query = db.query(Sheet).filter(Sheet.is_deleted == False)

    if is_assigned is not None:
        query = query.filter(Sheet.is_assigned == is_assigned)
    if family_id:
        query = query.filter(Sheet.family_id == family_id)
    if level:
        query = query.filter(Sheet.level == level)
    if pack_size:
        query = query.filter(Sheet.pack_size == pack_size)

    items = query.order_by(Sheet.generation_date.desc(), Sheet.start_number.desc()).all()
    return SheetListResponse(
        items=[SheetResponse.model_validate(s) for s in items],
        total=len(items)
    )


@router.get("/next-start", response_model=NextStartResponse)
def get_next_start(
    level: Level,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """First serial the next generated sheet of this level will use (read-only)"""
    year = datetime.utcnow().year
    next_start = next_start_number(db, level, year)
    return NextStartResponse(
        level=level,
        year=year,
        next_start=next_start,
        next_code=format_ticket_code(level, year, min(next_start, SERIAL_MAX)),
        remaining=max(SERIAL_MAX - next_start + 1, 0)
    )


# ============ GENERATION ============

@router.post("/generate", response_model=SheetGenerateResponse, status_code=201)
def generate(
    data: SheetGenerateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """
    Generates a batch of consecutive sheets (requires ADMIN)

    Either the whole batch is created or nothing is (400 when the yearly
    serial limit would be exceeded).
    """
    sheets = generate_sheets(db, data.level, data.pack_size, data.generations)
    logger.info(f"[SHEETS] Batch of {len(sheets)} generated by user {current_user.id}")
    return SheetGenerateResponse(
        sheets=[SheetResponse.model_validate(s) for s in sheets],
        count=len(sheets)
    )


@router.post("", response_model=SheetListResponse)
def upsert_sheets(
    data: SheetBulkUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Bulk partial update of existing sheets (assignment, downloads, soft delete)

    Unknown ids answer 404: new sheets only come from /generate.
    """
    sheets = {s.id: s for s in bulk_get(db, Sheet, [item.id for item in data.sheets], "Sheet")}

    try:
        for item in data.sheets:
            _apply_sheet_update(db, sheets[item.id], item.model_dump(exclude_unset=True, exclude={"id"}))
        db.commit()
    except Exception:
        db.rollback()
        raise

    items = [sheets[item.id] for item in data.sheets]
    for sheet in items:
        db.refresh(sheet)

    return SheetListResponse(
        items=[SheetResponse.model_validate(s) for s in items],
        total=len(items)
    )


# ============ RENDERING & EXPORT ============

@router.get("/{sheet_id}/svg")
def preview_svg(
    sheet_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """SVG preview, without barcodes. Does not count as a download."""
    sheet = _active_sheet(db, sheet_id)
    svg = render_sheet_svg(sheet, get_ticket_logo(db), with_barcode=False)
    return Response(content=svg, media_type=SVG_MEDIA_TYPE)


@router.post("/{sheet_id}/download")
def download_svg(
    sheet_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Printable SVG (with barcodes) as an attachment; downloads + 1"""
    sheet = _active_sheet(db, sheet_id)
    svg = render_sheet_svg(sheet, get_ticket_logo(db))

    sheet.downloads = (sheet.downloads or 0) + 1
    db.commit()

    return Response(
        content=svg,
        media_type=SVG_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{sheet_filename(sheet)}"'}
    )


@router.post("/export/pdf")
def export_pdf(
    data: SheetExportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """One A3 page per selected sheet (requires ADMIN)"""
    sheets = _export_sheets(db, data.sheet_ids)
    pdf_bytes = pdf_service.render_sheets(sheets, get_ticket_logo(db))
    db.commit()

    logger.info(f"[PDF] Exported {len(sheets)} sheet(s)")
    filename = f"sheets-{datetime.utcnow():%Y%m%d-%H%M%S}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/export/zip")
def export_zip(
    data: SheetExportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """ZIP of printable SVGs, one file per selected sheet (requires ADMIN)"""
    sheets = _export_sheets(db, data.sheet_ids)
    logo = get_ticket_logo(db)

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for sheet in sheets:
            archive.writestr(sheet_filename(sheet), render_sheet_svg(sheet, logo))
    db.commit()

    logger.info(f"[SHEETS] Exported {len(sheets)} sheet(s) as ZIP")
    filename = f"sheets-{datetime.utcnow():%Y%m%d-%H%M%S}.zip"
    return Response(
        content=buffer.getvalue(),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


# ============ DELETION ============

@router.delete("/{sheet_id}", status_code=204)
def delete_sheet(
    sheet_id: str,
    hard: bool = Query(False, description="Remove the row instead of hiding it"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Soft delete by default: the sheet disappears from the app but its
    serials stay burned. Hard delete requires ADMIN.

    Either way the sheet first leaves its family along with the unused
    tickets materialized from it (409 when some were already used).
    """
    sheet = get_by_id(db, Sheet, sheet_id, error_message="Sheet not found")

    if hard and current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Access denied: administrators only")

    try:
        detach_sheet(db, sheet)
        if hard:
            db.delete(sheet)
        else:
            sheet.is_deleted = True
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"[SHEETS] Sheet {sheet_id} {'hard' if hard else 'soft'} deleted by user {current_user.id}")
    return None
