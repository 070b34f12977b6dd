from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from ticketwise.models.sheet import Level, PACK_SIZES


class SheetResponse(BaseModel):
    """A generated sheet, with its first and last ticket codes"""
    id: str
    level: Level
    pack_size: int
    start_number: int
    end_number: int
    start_code: str
    end_code: str
    is_assigned: bool
    family_id: Optional[str] = None
    downloads: int
    generation_date: datetime
    is_deleted: bool

    class Config:
        from_attributes = True


class SheetListResponse(BaseModel):
    items: List[SheetResponse]
    total: int


class SheetGenerateRequest(BaseModel):
    """Batch generation: `generations` consecutive sheets of `pack_size` tickets"""
    level: Level
    pack_size: int = Field(..., description="12, 24 or 36 tickets")
    generations: int = Field(1, ge=1, le=100)

    @field_validator('pack_size')
    @classmethod
    def validate_pack_size(cls, v):
        if v not in PACK_SIZES:
            raise ValueError(f'Pack size must be one of {", ".join(str(p) for p in PACK_SIZES)}')
        return v


class SheetGenerateResponse(BaseModel):
    sheets: List[SheetResponse]
    count: int


class SheetUpdate(BaseModel):
    """
    Partial update of an existing sheet

    Serial ranges, level and pack size are immutable once generated.
    """
    id: str
    is_assigned: Optional[bool] = None
    family_id: Optional[str] = None
    downloads: Optional[int] = Field(None, ge=0)
    is_deleted: Optional[bool] = None


class SheetBulkUpdate(BaseModel):
    sheets: List[SheetUpdate] = Field(..., min_length=1)


class SheetExportRequest(BaseModel):
    sheet_ids: List[str] = Field(..., min_length=1)


class NextStartResponse(BaseModel):
    level: Level
    year: int
    next_start: int
    next_code: str
    remaining: int
