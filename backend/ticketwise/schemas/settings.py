from pydantic import BaseModel, Field
from typing import Optional


class PricingSchema(BaseModel):
    """Hourly rate per level (MAD)"""
    P: float = Field(..., ge=1)
    C: float = Field(..., ge=1)
    L: float = Field(..., ge=1)
    S: float = Field(..., ge=1)
    E: float = Field(..., ge=100)


class LogoPayload(BaseModel):
    data_uri: str = Field(..., min_length=1, description="data:image/... URI")


class LogoResponse(BaseModel):
    logo: Optional[str] = None
    is_default: bool
