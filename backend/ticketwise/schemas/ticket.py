from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from ticketwise.models.sheet import Level


class TicketBase(BaseModel):
    id: str = Field(..., min_length=1, max_length=32, description="Printed code, e.g. P-250001")
    level: Level
    sheet_id: str
    family_id: str
    is_used: bool = False


class TicketUpsert(TicketBase):
    pass


class TicketBulkUpsert(BaseModel):
    tickets: List[TicketUpsert] = Field(..., min_length=1)


class TicketResponse(TicketBase):
    validated_at: Optional[datetime] = None
    validated_by: Optional[str] = None

    class Config:
        from_attributes = True


class TicketListResponse(BaseModel):
    tickets: List[TicketResponse]
    total: int
    used: int
    remaining: int


class TicketValidationItem(BaseModel):
    id: str
    is_used: bool


class TicketValidationRequest(BaseModel):
    """Bulk is_used update for tickets that already exist"""
    family_id: str
    tickets: List[TicketValidationItem] = Field(..., min_length=1)
    validated_by: Optional[str] = None


class TicketValidationResponse(BaseModel):
    updated: int
    tickets: List[TicketResponse]
