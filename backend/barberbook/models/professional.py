# backend/barberbook/models/professional.py
"""
Barbershops and the professionals who work in them.

A professional is the provider whose calendar is booked. Each one is a
user with the BARBER role attached to exactly one barbershop.
"""

from sqlalchemy import Boolean, Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now


class Barbershop(Base):
    __tablename__ = "barbershops"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(120), nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    professionals = relationship("Professional", back_populates="barbershop")
    services = relationship("Service", back_populates="barbershop")

    def __repr__(self) -> str:
        return f"<Barbershop {self.id}: {self.name}>"


class Professional(Base):
    __tablename__ = "professionals"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True)
    barbershop_id = Column(String(26), ForeignKey("barbershops.id"), nullable=False, index=True)
    bio = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_master = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("User", back_populates="professional")
    barbershop = relationship("Barbershop", back_populates="professionals")
    service_overrides = relationship("ProfessionalService", back_populates="professional")

    def __repr__(self) -> str:
        return f"<Professional {self.id}: user={self.user_id} shop={self.barbershop_id}>"
