from sqlalchemy import Column, String, Text, JSON
from ticketwise.models.base import Base, TimestampMixin


class Teacher(Base, TimestampMixin):
    """Tutors assigned to families"""
    __tablename__ = "teachers"

    id = Column(String(64), primary_key=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(200), nullable=True)
    phone = Column(String(30), nullable=True)
    address = Column(String(300), nullable=True)

    specializations = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Teacher {self.name}>"
