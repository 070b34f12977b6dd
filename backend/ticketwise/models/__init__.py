"""
System models

IMPORTANT: import every model here so Base.metadata.create_all sees all tables
"""

from ticketwise.models.base import Base, TimestampMixin
from ticketwise.models.sheet import Sheet, Level, LEVEL_LABELS, PACK_SIZES, SERIAL_MAX
from ticketwise.models.serial_counter import SerialCounter
from ticketwise.models.ticket import Ticket
from ticketwise.models.family import Family
from ticketwise.models.teacher import Teacher
from ticketwise.models.user import User, UserRole
from ticketwise.models.setting import Logo, PricingSettings, TICKET_LOGO_KEY, DEFAULT_PRICING

__all__ = [
    "Base",
    "TimestampMixin",
    "Sheet",
    "Level",
    "LEVEL_LABELS",
    "PACK_SIZES",
    "SERIAL_MAX",
    "SerialCounter",
    "Ticket",
    "Family",
    "Teacher",
    "User",
    "UserRole",
    "Logo",
    "PricingSettings",
    "TICKET_LOGO_KEY",
    "DEFAULT_PRICING",
]
