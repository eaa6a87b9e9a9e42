# backend/barberbook/services/appointment_query_service.py
"""
Read-only appointment projections for clients and professionals.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.appointment import Appointment
from ..repositories import RepositoryFactory
from ..repositories.appointment_repository import AppointmentRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppointmentListing:
    """An appointment with the names needed to display it."""

    appointment: Appointment
    service_name: str
    counterpart_name: str


def utc_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[00:00, next 00:00) of ``day`` in UTC."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class AppointmentQueryService(BaseService):
    def __init__(self, db: Session, repository: Optional[AppointmentRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_appointment_repository(db)

    @BaseService.measure_operation("get_appointment")
    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.repository.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundException(
                f"Appointment {appointment_id} not found",
                code="APPOINTMENT_NOT_FOUND",
                details={"appointment_id": appointment_id},
            )
        return appointment

    @BaseService.measure_operation("list_client_appointments")
    def list_client_appointments(self, client_id: str) -> List[AppointmentListing]:
        """Every appointment of the client, any status, latest start first."""
        return [
            AppointmentListing(appointment, service_name, professional_name)
            for appointment, service_name, professional_name in self.repository.list_for_client(
                client_id
            )
        ]

    @BaseService.measure_operation("list_professional_appointments_for_date")
    def list_professional_appointments_for_date(
        self, professional_id: str, day: date
    ) -> List[AppointmentListing]:
        """
        Appointments of the professional starting on ``day`` (UTC), earliest first.

        CANCELLED and NO_SHOW appointments are left out.
        """
        range_start, range_end = utc_day_bounds(day)
        return [
            AppointmentListing(appointment, service_name, client_name)
            for appointment, service_name, client_name in self.repository.list_blocking_for_professional(
                professional_id, range_start, range_end
            )
        ]
