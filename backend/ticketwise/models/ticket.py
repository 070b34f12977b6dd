from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Index
from ticketwise.models.base import Base, TimestampMixin
from ticketwise.models.sheet import Level


class Ticket(Base, TimestampMixin):
    """
    One printable ticket of a sheet

    The id is the code printed on the sheet, e.g. "P-250001".
    Tickets are materialized once, the first time a family's pack is opened,
    and only is_used (plus validation metadata) changes afterwards.
    """
    __tablename__ = "tickets"

    id = Column(String(32), primary_key=True)
    level = Column(SQLEnum(Level), nullable=False)
    sheet_id = Column(String(64), nullable=False, index=True)
    family_id = Column(String(64), nullable=False, index=True)

    is_used = Column(Boolean, default=False, nullable=False)
    validated_at = Column(DateTime, nullable=True)
    validated_by = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<Ticket {self.id} used={self.is_used}>"

    __table_args__ = (
        Index("idx_tickets_family_id", "family_id", "id"),
    )
