# backend/barberbook/repositories/appointment_repository.py
"""
Appointment Repository for barberbook.

Data access for appointments:
- Range-intersection queries over a professional's blocking appointments
- Transaction-scoped calendar lock per professional (PostgreSQL advisory lock)
- Row locking for status transitions
- Summary projections for client and professional listings
"""

from datetime import datetime
import logging
from typing import List, Optional, Tuple, cast

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from ..core.exceptions import RepositoryException
from ..models.appointment import BLOCKING_STATUSES, Appointment
from ..models.professional import Professional
from ..models.service_catalog import Service
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

AppointmentRow = Tuple[Appointment, str, str]

_BLOCKING_VALUES = sorted(status.value for status in BLOCKING_STATUSES)


class AppointmentRepository(BaseRepository[Appointment]):
    """Repository for appointment persistence and calendar queries."""

    def __init__(self, db: Session):
        super().__init__(db, Appointment)

    # Calendar locking

    def lock_professional_calendar(self, professional_id: str) -> bool:
        """
        Serialize bookings for one professional until the current transaction ends.

        On PostgreSQL this takes ``pg_advisory_xact_lock`` keyed by the
        professional id, so concurrent transactions from any API instance
        queue behind each other. Other dialects rely on the in-process lock
        and return False.
        """
        if self.dialect_name != "postgresql":
            return False
        try:
            self.db.execute(
                select(func.pg_advisory_xact_lock(func.hashtextextended(professional_id, 0)))
            )
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking calendar for {professional_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock professional calendar: {str(e)}") from e

    def get_for_update(self, appointment_id: str) -> Optional[Appointment]:
        """Load one appointment, locking its row for the rest of the transaction."""
        try:
            query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
            if self.dialect_name == "postgresql":
                query = query.with_for_update()
            return cast(Optional[Appointment], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking appointment {appointment_id}: {str(e)}")
            raise RepositoryException(f"Failed to load appointment: {str(e)}") from e

    # Conflict queries

    def find_overlapping(
        self,
        professional_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_appointment_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Appointment]:
        """
        Blocking appointments of ``professional_id`` intersecting [start_time, end_time).

        Two half-open intervals intersect iff a.start < b.end and b.start < a.end,
        so touching endpoints never match.
        """
        try:
            query = self.db.query(Appointment).filter(
                Appointment.professional_id == professional_id,
                Appointment.status.in_(_BLOCKING_VALUES),
                Appointment.start_time < end_time,
                Appointment.end_time > start_time,
            )
            if exclude_appointment_id:
                query = query.filter(Appointment.id != exclude_appointment_id)

            query = query.order_by(Appointment.start_time)
            if limit:
                query = query.limit(limit)
            return cast(List[Appointment], query.all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error querying overlapping appointments: {str(e)}")
            raise RepositoryException(f"Failed to query overlapping appointments: {str(e)}") from e

    # Listings

    def list_for_client(self, client_id: str) -> List[AppointmentRow]:
        """Every appointment of a client with service and professional names, newest first."""
        professional_user = aliased(User)
        try:
            rows = (
                self.db.query(Appointment, Service.name, professional_user.full_name)
                .join(Service, Service.id == Appointment.service_id)
                .join(Professional, Professional.id == Appointment.professional_id)
                .join(professional_user, professional_user.id == Professional.user_id)
                .filter(Appointment.client_id == client_id)
                .order_by(Appointment.start_time.desc(), Appointment.id.desc())
                .all()
            )
            return cast(List[AppointmentRow], [tuple(row) for row in rows])
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing appointments for client {client_id}: {str(e)}")
            raise RepositoryException(f"Failed to list client appointments: {str(e)}") from e

    def list_blocking_for_professional(
        self, professional_id: str, range_start: datetime, range_end: datetime
    ) -> List[AppointmentRow]:
        """
        Blocking appointments starting in [range_start, range_end) with service and
        client names, earliest first.
        """
        client_user = aliased(User)
        try:
            rows = (
                self.db.query(Appointment, Service.name, client_user.full_name)
                .join(Service, Service.id == Appointment.service_id)
                .join(client_user, client_user.id == Appointment.client_id)
                .filter(
                    Appointment.professional_id == professional_id,
                    Appointment.status.in_(_BLOCKING_VALUES),
                    Appointment.start_time >= range_start,
                    Appointment.start_time < range_end,
                )
                .order_by(Appointment.start_time.asc(), Appointment.id.asc())
                .all()
            )
            return cast(List[AppointmentRow], [tuple(row) for row in rows])
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error listing appointments for professional {professional_id}: {str(e)}"
            )
            raise RepositoryException(f"Failed to list professional appointments: {str(e)}") from e

