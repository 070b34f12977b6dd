from sqlalchemy import Column, Integer, String, Boolean, Text, Enum as SQLEnum
import enum
from ticketwise.models.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    """
    Dashboard roles
    """
    ADMIN = "admin"  # Full access: users, pricing, sheet generation and export
    USER = "user"    # Day-to-day staff: families, payments, ticket validation


class User(Base, TimestampMixin):
    """
    Dashboard accounts

    IMPORTANT: email is the login identifier and is unique
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    username = Column(String(100), nullable=True, unique=True)
    email = Column(String(200), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)  # bcrypt

    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    # Profile
    address = Column(String(300), nullable=True)
    number = Column(String(30), nullable=True)
    profile_picture = Column(Text, nullable=True)  # data URI

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<User {self.name} ({self.email})>"
