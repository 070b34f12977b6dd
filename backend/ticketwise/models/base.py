from sqlalchemy import Column, DateTime
from datetime import datetime
from ticketwise.database import Base


class TimestampMixin:
    """
    Temporal audit fields
    Every table gets created_at and updated_at
    """
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# Base is defined in database.py
# Re-exported here for convenience
__all__ = ['Base', 'TimestampMixin']
