from pydantic import BaseModel, Field, EmailStr, model_validator
from typing import Optional, List
from datetime import datetime


class TeacherBase(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = None


class TeacherCreate(TeacherBase):
    """
    A teacher needs a first/last name (or a single `name` that is split on
    the first space) and at least one specialization
    """
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    name: Optional[str] = Field(None, max_length=200)
    specializations: List[str] = Field(..., min_length=1)

    @model_validator(mode='after')
    def split_name(self):
        if not self.first_name and self.name:
            first, _, last = self.name.strip().partition(" ")
            self.first_name = first
            self.last_name = self.last_name or last.strip()
        if not self.first_name:
            raise ValueError('First name (or name) is required')
        self.last_name = self.last_name or ""
        return self


class TeacherUpdate(TeacherBase):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    specializations: Optional[List[str]] = Field(None, min_length=1)


class TeacherResponse(TeacherBase):
    id: str
    first_name: str
    last_name: str
    name: str
    specializations: List[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
