# backend/barberbook/services/appointment_lifecycle.py
"""
Appointment Lifecycle for barberbook.

Status state machine for existing appointments. Appointments start as
PENDING (set by AppointmentScheduler) and move only along ALLOWED_TRANSITIONS.
COMPLETED, CANCELLED and NO_SHOW are terminal. Moving an appointment to the
status it already has is a no-op, which makes repeated cancels idempotent.

Cancelling or marking NO_SHOW releases the interval: the overlap check
ignores appointments in those statuses.
"""

import logging
from typing import Dict, FrozenSet, Optional, Union

from sqlalchemy.orm import Session

from ..core.exceptions import InvalidTransitionException, NotFoundException, ValidationException
from ..models.appointment import Appointment, AppointmentStatus
from ..repositories import RepositoryFactory
from ..repositories.appointment_repository import AppointmentRepository
from .base import BaseService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    """Whether ``current -> target`` is permitted; staying in place always is."""
    return current == target or target in ALLOWED_TRANSITIONS[current]


class AppointmentLifecycle(BaseService):
    """Applies status transitions to appointments, one locked row at a time."""

    def __init__(self, db: Session, repository: Optional[AppointmentRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_appointment_repository(db)

    @BaseService.measure_operation("cancel_appointment")
    def cancel(self, appointment_id: str) -> Appointment:
        """
        Cancel an appointment, releasing its interval.

        Cancelling an already cancelled appointment returns it unchanged.

        Raises:
            NotFoundException: If the appointment doesn't exist
            InvalidTransitionException: If the appointment is COMPLETED or NO_SHOW
        """
        self.log_operation("cancel_appointment", appointment_id=appointment_id)
        return self._apply(appointment_id, AppointmentStatus.CANCELLED)

    @BaseService.measure_operation("transition_appointment")
    def transition(
        self, appointment_id: str, target_status: Union[AppointmentStatus, str]
    ) -> Appointment:
        """
        Move an appointment to ``target_status``.

        Raises:
            ValidationException: If ``target_status`` is not an appointment status
            NotFoundException: If the appointment doesn't exist
            InvalidTransitionException: If the move is not in ALLOWED_TRANSITIONS
        """
        try:
            target = AppointmentStatus.parse(target_status)
        except ValueError as exc:
            raise ValidationException(
                f"Invalid appointment status: {target_status}",
                code="INVALID_STATUS",
                details={
                    "status": str(target_status),
                    "allowed": [status.value for status in AppointmentStatus],
                },
            ) from exc

        self.log_operation(
            "transition_appointment", appointment_id=appointment_id, target_status=target.value
        )
        return self._apply(appointment_id, target)

    def _apply(self, appointment_id: str, target: AppointmentStatus) -> Appointment:
        with self.transaction():
            appointment = self.repository.get_for_update(appointment_id)
            if appointment is None:
                raise NotFoundException(
                    f"Appointment {appointment_id} not found",
                    code="APPOINTMENT_NOT_FOUND",
                    details={"appointment_id": appointment_id},
                )

            current = appointment.status_enum
            if current == target:
                self.logger.info(
                    f"Appointment {appointment_id} already {target.value}, nothing to do"
                )
                return appointment

            if not can_transition(current, target):
                raise InvalidTransitionException(appointment_id, current.value, target.value)

            appointment.set_status(target)
            self.repository.flush()
            return appointment
