from sqlalchemy import Column, String, JSON, Enum as SQLEnum
from ticketwise.models.base import Base, TimestampMixin
from ticketwise.models.sheet import Level


class Family(Base, TimestampMixin):
    """
    A tutoring family

    Nested data (parents, subjects, pack details, payments, contact) is kept
    as JSON, mirroring the document shape the dashboard edits.
    """
    __tablename__ = "families"

    id = Column(String(64), primary_key=True)
    level = Column(SQLEnum(Level), nullable=True)

    sheet_ids = Column(JSON, nullable=False, default=list)
    teacher_ids = Column(JSON, nullable=False, default=list)

    parents = Column(JSON, nullable=False, default=dict)     # {father, mother}
    students = Column(JSON, nullable=False, default=list)    # ["Leo Dupuis", ...]
    subjects = Column(JSON, nullable=False, default=list)    # [{name, hours, student_name}]
    pack_details = Column(JSON, nullable=True)               # {hourly_rate, reduction, reduction_reason, total}
    payments = Column(JSON, nullable=False, default=list)    # [{method, amount, status, due_date, date, cheque_received}]
    contact = Column(JSON, nullable=False, default=dict)     # {address, phone, email}

    @property
    def display_name(self) -> str:
        students = self.students or []
        if not students:
            return "Unknown Family"
        if len(students) > 1:
            return f"{students[0]} (+{len(students) - 1})"
        return students[0]

    def __repr__(self):
        return f"<Family {self.id} {self.display_name}>"
