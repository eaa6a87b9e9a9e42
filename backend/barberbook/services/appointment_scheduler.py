# backend/barberbook/services/appointment_scheduler.py
"""
Appointment Scheduler for barberbook.

Books a client with a professional for one catalog service. Creating an
appointment is a check-then-insert: the overlap check and the insert must
run as one atomic unit per professional, otherwise two requests can both
see a free slot and both commit.

Guards, outermost first:
1. professional_lock: in-process lock (plus Redis when configured)
2. pg_advisory_xact_lock on the professional, taken inside the transaction
3. the appointments_no_overlap_per_professional exclusion constraint

Transactions aborted by the store (serialization failure, deadlock) are
replayed a bounded number of times before surfacing as ServiceException.
Overlaps are reported to the caller and never retried.
"""

from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    AppointmentConflictException,
    InvalidServiceException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..core.professional_lock import professional_lock
from ..database import is_transient_db_error, with_db_retry
from ..models.appointment import NO_OVERLAP_CONSTRAINT, Appointment, AppointmentStatus
from ..models.types import ensure_utc
from ..repositories import RepositoryFactory
from ..repositories.appointment_repository import AppointmentRepository
from .base import BaseService
from .overlap_checker import OverlapChecker
from .service_detail_resolver import EffectiveServiceDetails, ServiceDetailResolver

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATEs raised by the INSERT
_EXCLUSION_VIOLATION = "23P01"
_FOREIGN_KEY_VIOLATION = "23503"


def _find_integrity_error(exc: BaseException) -> Optional[IntegrityError]:
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, IntegrityError):
            return current
        current = current.__cause__
    return None


class AppointmentScheduler(BaseService):
    """Creates appointments without ever double-booking a professional."""

    def __init__(
        self,
        db: Session,
        repository: Optional[AppointmentRepository] = None,
        resolver: Optional[ServiceDetailResolver] = None,
        overlap_checker: Optional[OverlapChecker] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_appointment_repository(db)
        self.resolver = resolver or ServiceDetailResolver(db)
        self.overlap_checker = overlap_checker or OverlapChecker(db, self.repository)

    @BaseService.measure_operation("create_appointment")
    def create(
        self,
        client_id: Optional[str],
        professional_id: Optional[str],
        service_id: Optional[str],
        start_time: Optional[datetime],
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Book ``service_id`` with ``professional_id`` for ``client_id`` at ``start_time``.

        The appointment is stored as PENDING with the duration and price in
        effect for that professional. Naive ``start_time`` values are taken
        to be UTC.

        Raises:
            ValidationException: A required field is missing
            InvalidServiceException: The service cannot be booked with that professional
            AppointmentConflictException: The interval overlaps a blocking appointment
            ServiceException: Store failures, retries exhausted or lock timeout
        """
        self._validate_required(
            client_id=client_id,
            professional_id=professional_id,
            service_id=service_id,
            start_time=start_time,
        )
        details = self._resolve_bookable(professional_id, service_id)

        start = ensure_utc(start_time)
        try:
            end = start + timedelta(minutes=details.duration_minutes)
        except OverflowError as exc:
            raise ValidationException(
                "start_time is too late for the service duration",
                code="INVALID_START_TIME",
                details={
                    "start_time": start.isoformat(),
                    "duration_minutes": details.duration_minutes,
                },
            ) from exc
        cleaned_notes = (notes or "").strip() or None

        self.log_operation(
            "create_appointment",
            client_id=client_id,
            professional_id=professional_id,
            service_id=service_id,
            start_time=start.isoformat(),
            end_time=end.isoformat(),
        )

        def attempt() -> Appointment:
            return self._insert_if_free(
                client_id=client_id,
                professional_id=professional_id,
                service_id=service_id,
                start_time=start,
                end_time=end,
                total_price_cents=details.price_cents,
                notes=cleaned_notes,
            )

        with professional_lock(professional_id):
            try:
                appointment = with_db_retry(
                    "create_appointment",
                    attempt,
                    max_attempts=settings.booking_max_attempts,
                    base_delay=settings.booking_retry_base_delay,
                )
            except (RepositoryException, SQLAlchemyError) as exc:
                raise self._translate_store_error(exc, professional_id, start, end) from exc

        self.logger.info(
            f"Created appointment {appointment.id} for professional {professional_id} "
            f"at {start.isoformat()}"
        )
        return appointment

    def _validate_required(self, **fields: Any) -> None:
        missing = [
            name
            for name, value in fields.items()
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise ValidationException(
                f"Missing required fields: {', '.join(missing)}",
                code="MISSING_REQUIRED_FIELDS",
                details={"missing": missing},
            )
        if not isinstance(fields["start_time"], datetime):
            raise ValidationException(
                "start_time must be a datetime",
                code="INVALID_START_TIME",
                details={"start_time": str(fields["start_time"])},
            )

    def _resolve_bookable(self, professional_id: str, service_id: str) -> EffectiveServiceDetails:
        try:
            details = self.resolver.resolve(professional_id, service_id)
        except NotFoundException as exc:
            raise InvalidServiceException(
                details={"professional_id": professional_id, "service_id": service_id}
            ) from exc

        if not details.is_active and not settings.allow_inactive_services:
            raise InvalidServiceException(
                "Service is not currently offered",
                details={"professional_id": professional_id, "service_id": service_id},
            )
        return details

    def _insert_if_free(
        self,
        *,
        client_id: str,
        professional_id: str,
        service_id: str,
        start_time: datetime,
        end_time: datetime,
        total_price_cents: int,
        notes: Optional[str],
    ) -> Appointment:
        """One complete unit of work: lock calendar, re-check, insert, commit."""
        with self.repository.transaction():
            self.repository.lock_professional_calendar(professional_id)

            conflicts = self.overlap_checker.find_conflicts(
                professional_id, start_time, end_time, limit=1
            )
            if conflicts:
                raise AppointmentConflictException(
                    details=self._conflict_details(professional_id, start_time, end_time, conflicts)
                )

            return self.repository.create(
                client_id=client_id,
                professional_id=professional_id,
                service_id=service_id,
                start_time=start_time,
                end_time=end_time,
                status=AppointmentStatus.PENDING.value,
                total_price_cents=total_price_cents,
                notes=notes,
            )

    @staticmethod
    def _conflict_details(
        professional_id: str,
        start_time: datetime,
        end_time: datetime,
        conflicts: List[Appointment],
    ) -> Dict[str, Any]:
        return {
            "professional_id": professional_id,
            "requested_start": start_time.isoformat(),
            "requested_end": end_time.isoformat(),
            "conflicting_appointments": [
                {
                    "id": conflict.id,
                    "start_time": conflict.start_time.isoformat(),
                    "end_time": conflict.end_time.isoformat(),
                    "status": conflict.status,
                }
                for conflict in conflicts
            ],
        }

    def _translate_store_error(
        self,
        exc: BaseException,
        professional_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> Exception:
        integrity_error = _find_integrity_error(exc)
        if integrity_error is not None:
            orig = getattr(integrity_error, "orig", None)
            pgcode = getattr(orig, "pgcode", None)
            message = str(orig or integrity_error)
            if pgcode == _EXCLUSION_VIOLATION or NO_OVERLAP_CONSTRAINT in message:
                # Another writer committed the interval first
                self.logger.warning(
                    "Exclusion constraint rejected appointment",
                    extra={"professional_id": professional_id},
                )
                return AppointmentConflictException(
                    details={
                        "professional_id": professional_id,
                        "requested_start": start_time.isoformat(),
                        "requested_end": end_time.isoformat(),
                    }
                )
            if pgcode == _FOREIGN_KEY_VIOLATION or "foreign key" in message.lower():
                return InvalidServiceException(
                    "Unknown client or professional",
                    details={"professional_id": professional_id},
                )

        if is_transient_db_error(exc):
            self.logger.error(
                "Appointment creation aborted by repeated store conflicts",
                extra={"professional_id": professional_id, "error": str(exc)},
            )
            return ServiceException(
                "Could not complete the booking, please retry",
                code="STORE_CONFLICT_RETRIES_EXHAUSTED",
                details={"attempts": settings.booking_max_attempts},
            )

        self.logger.error(f"Failed to create appointment: {str(exc)}")
        return ServiceException("Failed to create appointment", code="APPOINTMENT_CREATE_FAILED")
