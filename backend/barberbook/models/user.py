# backend/barberbook/models/user.py
"""
User model.

Clients and professionals both log in as users. Credentials and
registration are owned by the auth service; the scheduling engine only
reads users to label appointment summaries and to reference clients.
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now


class UserRole(str, Enum):
    CLIENT = "CLIENTE"
    BARBER = "BARBER"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('CLIENTE', 'BARBER', 'ADMIN')", name="ck_users_role"),
    )

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    full_name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    phone = Column(String(20), unique=True, index=True, nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CLIENT.value)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    professional = relationship("Professional", back_populates="user", uselist=False)

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.full_name} ({self.role})>"
