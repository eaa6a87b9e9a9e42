# backend/barberbook/models/service_catalog.py
"""
Service catalog models.

Two tables describe what can be booked:
- services: the barbershop catalog entry with default duration and price
- professional_services: optional per-professional override of duration
  and/or price for one catalog entry

Both are owned by the catalog; the scheduling engine only reads them.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now


class Service(Base):
    """
    Catalog entry offered by a barbershop.

    Attributes:
        duration_min: Default duration in minutes (> 0)
        price_cents: Default price in minor currency units (>= 0)
        is_active: Whether the shop currently offers the service
    """

    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("duration_min > 0", name="ck_services_duration_positive"),
        CheckConstraint("price_cents >= 0", name="ck_services_price_non_negative"),
    )

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    barbershop_id = Column(String(26), ForeignKey("barbershops.id"), nullable=True, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    duration_min = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    barbershop = relationship("Barbershop", back_populates="services")
    overrides = relationship("ProfessionalService", back_populates="service")

    def __repr__(self) -> str:
        return f"<Service {self.id}: {self.name} {self.duration_min}min {self.price_cents}c>"


class ProfessionalService(Base):
    """
    Per-professional override of a catalog service.

    Each custom field is independently optional: NULL means "use the
    catalog default" for that field only.
    """

    __tablename__ = "professional_services"
    __table_args__ = (
        UniqueConstraint("professional_id", "service_id", name="uq_professional_services_pair"),
        CheckConstraint(
            "custom_duration_min IS NULL OR custom_duration_min > 0",
            name="ck_professional_services_duration_positive",
        ),
        CheckConstraint(
            "custom_price_cents IS NULL OR custom_price_cents >= 0",
            name="ck_professional_services_price_non_negative",
        ),
    )

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    professional_id = Column(String(26), ForeignKey("professionals.id"), nullable=False, index=True)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False, index=True)
    custom_duration_min = Column(Integer, nullable=True)
    custom_price_cents = Column(Integer, nullable=True)

    professional = relationship("Professional", back_populates="service_overrides")
    service = relationship("Service", back_populates="overrides")

    @property
    def duration_override(self) -> Optional[int]:
        return self.custom_duration_min

    @property
    def price_override(self) -> Optional[int]:
        return self.custom_price_cents

    def __repr__(self) -> str:
        return (
            f"<ProfessionalService {self.professional_id}/{self.service_id}: "
            f"duration={self.custom_duration_min} price={self.custom_price_cents}>"
        )
