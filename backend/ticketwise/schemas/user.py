from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from ticketwise.models.user import UserRole


class UserBase(BaseModel):
    """Fields shared by user requests and responses"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: EmailStr
    address: Optional[str] = Field(None, max_length=300)
    number: Optional[str] = Field(None, max_length=30)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    number: Optional[str] = None
    profile_picture: Optional[str] = None
    password: Optional[str] = Field(None, min_length=8)
    role: Optional[UserRole] = None
    active: Optional[bool] = None


class UserResponse(UserBase):
    """User without the password hash"""
    id: int
    name: str
    role: UserRole
    active: bool
    profile_picture: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
