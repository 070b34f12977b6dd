"""
Serial counters per (level, year)
Holds the highest serial ever issued, so numbers never restart
even if sheets are deleted.
"""
from sqlalchemy import Column, Integer, Enum as SQLEnum, UniqueConstraint
from ticketwise.models.base import Base, TimestampMixin
from ticketwise.models.sheet import Level


class SerialCounter(Base, TimestampMixin):
    """
    Last serial issued for a (level, year) partition.
    This table must NEVER be cleared.
    """
    __tablename__ = "serial_counters"

    id = Column(Integer, primary_key=True, index=True)
    level = Column(SQLEnum(Level), nullable=False)
    year = Column(Integer, nullable=False)  # full year, e.g. 2025
    last_used = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<SerialCounter {self.level.value}-{self.year % 100:02d} last={self.last_used}>"

    __table_args__ = (
        UniqueConstraint('level', 'year', name='uq_serial_counter_level_year'),
    )
