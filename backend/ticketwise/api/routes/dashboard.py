"""
Dashboard routes - overview counters and chart data
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func, case
from typing import List, Optional
from pydantic import BaseModel
from datetime import datetime, timedelta

from ticketwise.api.deps import get_db, get_current_user
from ticketwise.models.family import Family
from ticketwise.models.sheet import Sheet, Level, LEVEL_LABELS
from ticketwise.models.teacher import Teacher
from ticketwise.models.user import User, UserRole

router = APIRouter()

RECENT_DAYS = 7
TOP_DOWNLOADS = 5


# ============ SCHEMAS ============

class OverviewResponse(BaseModel):
    total_sheets: int
    unassigned_sheets: int
    total_families: int
    total_teachers: int
    total_users: Optional[int] = None  # admins only
    recent_sheets: int
    total_tickets_generated: int
    total_downloads: int


class LevelChartEntry(BaseModel):
    level: Level
    label: str
    total: int
    assigned: int
    unassigned: int


class TopSheetEntry(BaseModel):
    id: str
    level: Level
    start_number: int
    end_number: int
    downloads: int
    generation_date: datetime
    display_name: str


class ChartsResponse(BaseModel):
    sheets_by_level: List[LevelChartEntry]
    top_downloaded_sheets: List[TopSheetEntry]


class DashboardResponse(BaseModel):
    overview: OverviewResponse
    charts: ChartsResponse


# ============ ENDPOINTS ============

@router.get("", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Dashboard statistics. Soft-deleted sheets are left out.

    Returns:
    - Overview counters (user count for admins only)
    - Sheets per level, split assigned/unassigned
    - Top 5 most downloaded sheets
    """
    sheets = db.query(Sheet).filter(Sheet.is_deleted == False)

    total_sheets = sheets.count()
    unassigned = sheets.filter(Sheet.is_assigned == False).count()
    recent = sheets.filter(
        Sheet.generation_date >= datetime.utcnow() - timedelta(days=RECENT_DAYS)
    ).count()

    tickets_total, downloads_total = db.query(
        func.coalesce(func.sum(Sheet.pack_size), 0),
        func.coalesce(func.sum(Sheet.downloads), 0)
    ).filter(Sheet.is_deleted == False).one()

    by_level = db.query(
        Sheet.level,
        func.count(Sheet.id),
        func.sum(case((Sheet.is_assigned == True, 1), else_=0))
    ).filter(Sheet.is_deleted == False).group_by(Sheet.level).all()

    top = sheets.order_by(Sheet.downloads.desc(), Sheet.generation_date.desc()).limit(TOP_DOWNLOADS).all()

    overview = OverviewResponse(
        total_sheets=total_sheets,
        unassigned_sheets=unassigned,
        total_families=db.query(Family).count(),
        total_teachers=db.query(Teacher).count(),
        total_users=db.query(User).count() if current_user.role == UserRole.ADMIN else None,
        recent_sheets=recent,
        total_tickets_generated=int(tickets_total),
        total_downloads=int(downloads_total)
    )

    charts = ChartsResponse(
        sheets_by_level=[
            LevelChartEntry(
                level=level,
                label=LEVEL_LABELS[level],
                total=count,
                assigned=int(assigned or 0),
                unassigned=count - int(assigned or 0)
            )
            for level, count, assigned in sorted(by_level, key=lambda row: list(Level).index(row[0]))
        ],
        top_downloaded_sheets=[
            TopSheetEntry(
                id=s.id,
                level=s.level,
                start_number=s.start_number,
                end_number=s.end_number,
                downloads=s.downloads,
                generation_date=s.generation_date,
                display_name=s.start_code
            )
            for s in top
        ]
    )

    return DashboardResponse(overview=overview, charts=charts)
