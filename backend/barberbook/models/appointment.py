# backend/barberbook/models/appointment.py
"""
Appointment model.

An appointment reserves the half-open interval [start_time, end_time) on one
professional's calendar. Duration and price are snapshotted from the catalog
at booking time, so later catalog edits never alter an existing appointment.

Appointments are never deleted: cancelling or closing one is a status change
that keeps the history.
"""

from enum import Enum
import logging
from typing import Any, FrozenSet

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now

logger = logging.getLogger(__name__)


class AppointmentStatus(str, Enum):
    """Appointment lifecycle statuses."""

    PENDING = "PENDING"  # Initial state for every new appointment
    CONFIRMED = "CONFIRMED"  # Accepted by the professional
    COMPLETED = "COMPLETED"  # Service delivered
    CANCELLED = "CANCELLED"  # Withdrawn, interval released
    NO_SHOW = "NO_SHOW"  # Client didn't attend, interval released

    @classmethod
    def parse(cls, value: Any) -> "AppointmentStatus":
        """Coerce a raw value into a status; raises ValueError for anything outside the enum."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip().upper())
        raise ValueError(f"Invalid appointment status: {value!r}")


# Statuses whose interval no longer blocks the professional's calendar
NON_BLOCKING_STATUSES: FrozenSet[AppointmentStatus] = frozenset(
    {AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
)
BLOCKING_STATUSES: FrozenSet[AppointmentStatus] = frozenset(
    set(AppointmentStatus) - NON_BLOCKING_STATUSES
)
TERMINAL_STATUSES: FrozenSet[AppointmentStatus] = frozenset(
    {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
)

STATUS_CHECK_SQL = "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')"
NO_OVERLAP_CONSTRAINT = "appointments_no_overlap_per_professional"


class Appointment(Base):
    """Reservation of one professional's time for one client and one service."""

    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(STATUS_CHECK_SQL, name="ck_appointments_status"),
        CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
        CheckConstraint("total_price_cents >= 0", name="ck_appointments_price_non_negative"),
    )

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    client_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    professional_id = Column(String(26), ForeignKey("professionals.id"), nullable=False)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)

    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)

    status = Column(String(20), nullable=False, default=AppointmentStatus.PENDING.value)
    total_price_cents = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    client = relationship("User", foreign_keys=[client_id])
    professional = relationship("Professional", foreign_keys=[professional_id])
    service = relationship("Service", foreign_keys=[service_id])

    def __repr__(self) -> str:
        return (
            f"<Appointment {self.id}: professional={self.professional_id}, "
            f"client={self.client_id}, {self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def status_enum(self) -> AppointmentStatus:
        return AppointmentStatus.parse(self.status)

    @property
    def is_blocking(self) -> bool:
        """Whether this appointment still occupies its interval."""
        return self.status_enum in BLOCKING_STATUSES

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def set_status(self, status: AppointmentStatus) -> None:
        previous = self.status
        self.status = status.value
        self.updated_at = utc_now()
        logger.info(f"Appointment {self.id} moved from {previous} to {status.value}")


Index(
    "ix_appointments_professional_start",
    Appointment.professional_id,
    Appointment.start_time,
)
