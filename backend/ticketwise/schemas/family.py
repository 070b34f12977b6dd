from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List, Literal
from datetime import date as Date, datetime
from ticketwise.models.sheet import Level


PaymentMethod = Literal["cash", "cheque", "card"]
PaymentStatus = Literal["pending", "completed", "overdue"]


class Parents(BaseModel):
    father: Optional[str] = None
    mother: Optional[str] = None


class Subject(BaseModel):
    name: str = Field(..., min_length=1)
    hours: float = Field(..., ge=0)
    student_name: Optional[str] = None


class PackDetails(BaseModel):
    hourly_rate: float = Field(..., ge=0)
    reduction: float = Field(0, ge=0)
    reduction_reason: Optional[str] = None
    total: float = Field(..., ge=0)


class Payment(BaseModel):
    method: PaymentMethod
    amount: float = Field(..., ge=0)
    status: Optional[PaymentStatus] = None
    due_date: Optional[Date] = None
    date: Optional[Date] = None
    cheque_received: Optional[bool] = None


class Contact(BaseModel):
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None


class FamilyUpsert(BaseModel):
    """Create or replace a family. Without id a new one is created."""
    id: Optional[str] = Field(None, max_length=64)
    level: Optional[Level] = None
    sheet_ids: List[str] = Field(default_factory=list)
    teacher_ids: List[str] = Field(default_factory=list)
    parents: Parents = Field(default_factory=Parents)
    students: List[str] = Field(default_factory=list)
    subjects: List[Subject] = Field(default_factory=list)
    pack_details: Optional[PackDetails] = None
    payments: List[Payment] = Field(default_factory=list)
    contact: Contact = Field(default_factory=Contact)


class FamilyResponse(BaseModel):
    id: str
    display_name: str
    level: Optional[Level] = None
    sheet_ids: List[str]
    teacher_ids: List[str]
    parents: Parents
    students: List[str]
    subjects: List[Subject]
    pack_details: Optional[PackDetails] = None
    payments: List[Payment]
    contact: Contact
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaymentEntry(BaseModel):
    """One family payment, flattened for the payments screen"""
    family_id: str
    family_name: str
    index: int
    method: PaymentMethod
    amount: float
    status: PaymentStatus
    due_date: Optional[Date] = None
    date: Optional[Date] = None
    cheque_received: Optional[bool] = None


class PaymentTotals(BaseModel):
    pending: float = 0
    completed: float = 0
    overdue: float = 0


class PaymentListResponse(BaseModel):
    payments: List[PaymentEntry]
    totals: PaymentTotals
    count: int


class ChequeUpdate(BaseModel):
    cheque_received: bool = True
