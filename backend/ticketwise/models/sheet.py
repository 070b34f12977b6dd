from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SQLEnum, Index, CheckConstraint
from datetime import datetime
import enum
from ticketwise.core.ticket_codes import format_ticket_code
from ticketwise.models.base import Base, TimestampMixin


class Level(str, enum.Enum):
    """
    Education levels. The value is the letter printed on every ticket code.
    """
    P = "P"  # Primaire
    C = "C"  # Collège
    L = "L"  # Lycée
    S = "S"  # Supérieur
    E = "E"  # Spéciale


LEVEL_LABELS = {
    Level.P: "Primaire",
    Level.C: "Collège",
    Level.L: "Lycée",
    Level.S: "Supérieur",
    Level.E: "Spéciale",
}

# Allowed number of tickets per sheet
PACK_SIZES = (12, 24, 36)

# Serials are printed on 4 digits, per (level, year)
SERIAL_MAX = 9999


class Sheet(Base, TimestampMixin):
    """
    A generated, numbered pack of tickets

    IMPORTANT: within one (level, year) partition the ranges
    [start_number, end_number] never overlap. Only the serial allocator
    (api/utils/sequencers.py) hands out new ranges.
    """
    __tablename__ = "sheets"

    id = Column(String(64), primary_key=True)

    level = Column(SQLEnum(Level), nullable=False)
    pack_size = Column(Integer, nullable=False)
    start_number = Column(Integer, nullable=False)
    end_number = Column(Integer, nullable=False)

    # Assignment
    is_assigned = Column(Boolean, default=False, nullable=False)
    family_id = Column(String(64), nullable=True, index=True)

    downloads = Column(Integer, default=0, nullable=False)
    generation_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Soft delete: hidden from the app, still counted by the allocator
    is_deleted = Column(Boolean, default=False, nullable=False)

    @property
    def year(self) -> int:
        """Two digit generation year, part of every ticket code"""
        return self.generation_date.year % 100

    @property
    def start_code(self) -> str:
        return format_ticket_code(self.level, self.generation_date.year, self.start_number)

    @property
    def end_code(self) -> str:
        return format_ticket_code(self.level, self.generation_date.year, self.end_number)

    def __repr__(self):
        return f"<Sheet {self.id} {self.level.value} {self.start_number}-{self.end_number}>"

    __table_args__ = (
        CheckConstraint("start_number >= 1 AND end_number <= 9999", name="ck_sheets_serial_range"),
        CheckConstraint("end_number >= start_number", name="ck_sheets_serial_order"),
        Index("idx_sheets_level_end", "level", "end_number"),
        Index("idx_sheets_assigned", "is_assigned", "is_deleted"),
    )
