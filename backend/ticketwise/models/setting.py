from sqlalchemy import Column, Integer, String, Text, Float
from ticketwise.models.base import Base, TimestampMixin

TICKET_LOGO_KEY = "ticketLogo"

# Hourly rates (MAD) used when nothing was saved yet
DEFAULT_PRICING = {"P": 130.0, "C": 150.0, "L": 180.0, "S": 220.0, "E": 100.0}


class Logo(Base, TimestampMixin):
    """Embeddable images stored inline as data URIs (one row per key)"""
    __tablename__ = "logos"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(50), nullable=False, unique=True)
    data_uri = Column(Text, nullable=False)


class PricingSettings(Base, TimestampMixin):
    """
    Hourly rate per level. Single row.
    """
    __tablename__ = "pricing_settings"

    id = Column(Integer, primary_key=True, index=True)
    P = Column(Float, nullable=False, default=DEFAULT_PRICING["P"])
    C = Column(Float, nullable=False, default=DEFAULT_PRICING["C"])
    L = Column(Float, nullable=False, default=DEFAULT_PRICING["L"])
    S = Column(Float, nullable=False, default=DEFAULT_PRICING["S"])
    E = Column(Float, nullable=False, default=DEFAULT_PRICING["E"])
    updated_by = Column(Integer, nullable=True)

    def as_dict(self) -> dict:
        return {level: getattr(self, level) for level in DEFAULT_PRICING}
