# backend/barberbook/services/overlap_checker.py
"""
Overlap Checker for barberbook.

Answers whether a candidate interval collides with a professional's
calendar. Intervals are half-open [start, end): an appointment ending at
10:30 and another starting at 10:30 do not overlap. Only appointments still
blocking the calendar (anything but CANCELLED and NO_SHOW) are considered.

This check is only safe to act on inside the per-professional serialized
region; see AppointmentScheduler.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..models.appointment import Appointment
from ..models.types import ensure_utc
from ..repositories import RepositoryFactory
from ..repositories.appointment_repository import AppointmentRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """True iff [a_start, a_end) and [b_start, b_end) share at least one instant."""
    return a_start < b_end and b_start < a_end


class OverlapChecker(BaseService):
    """Read-only conflict detection over one professional's blocking appointments."""

    def __init__(self, db: Session, repository: Optional[AppointmentRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_appointment_repository(db)

    @BaseService.measure_operation("find_conflicts")
    def find_conflicts(
        self,
        professional_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_appointment_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Appointment]:
        """
        Blocking appointments of ``professional_id`` intersecting [start_time, end_time),
        earliest first.
        """
        start_time = ensure_utc(start_time)
        end_time = ensure_utc(end_time)
        if end_time <= start_time:
            raise ValidationException(
                "end_time must be after start_time",
                code="INVALID_INTERVAL",
                details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
            )

        return self.repository.find_overlapping(
            professional_id,
            start_time,
            end_time,
            exclude_appointment_id=exclude_appointment_id,
            limit=limit,
        )

    def overlaps(
        self,
        professional_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_appointment_id: Optional[str] = None,
    ) -> bool:
        return bool(
            self.find_conflicts(
                professional_id,
                start_time,
                end_time,
                exclude_appointment_id=exclude_appointment_id,
                limit=1,
            )
        )
