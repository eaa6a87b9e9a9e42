# backend/tests/unit/test_appointment_scheduler_logic.py
"""
Unit tests for AppointmentScheduler decision logic.

Repository, resolver and overlap checker are mocked, so these tests cover
validation, error translation and the retry policy without a database.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, Mock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from barberbook.core.config import settings
from barberbook.core.exceptions import (
    AppointmentConflictException,
    InvalidServiceException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from barberbook.models.appointment import Appointment
from barberbook.repositories.appointment_repository import AppointmentRepository
from barberbook.services.appointment_scheduler import AppointmentScheduler
from barberbook.services.overlap_checker import OverlapChecker
from barberbook.services.service_detail_resolver import (
    EffectiveServiceDetails,
    ServiceDetailResolver,
)

START = datetime(2030, 1, 7, 10, 0, tzinfo=timezone.utc)


class _PgError(Exception):
    def __init__(self, message: str, pgcode: str):
        super().__init__(message)
        self.pgcode = pgcode


def _repository_error(db_error: Exception) -> RepositoryException:
    exc = RepositoryException(f"Failed to create Appointment: {db_error}")
    exc.__cause__ = db_error
    return exc


@pytest.mark.unit
class TestAppointmentSchedulerLogic:
    @pytest.fixture
    def repository(self):
        repository = MagicMock(spec=AppointmentRepository)
        repository.create.side_effect = lambda **kwargs: Appointment(id="01HAPPT", **kwargs)
        return repository

    @pytest.fixture
    def resolver(self):
        resolver = Mock(spec=ServiceDetailResolver)
        resolver.resolve.return_value = EffectiveServiceDetails(
            duration_minutes=45, price_cents=5000, service_name="Corte"
        )
        return resolver

    @pytest.fixture
    def overlap_checker(self):
        checker = Mock(spec=OverlapChecker)
        checker.find_conflicts.return_value = []
        return checker

    @pytest.fixture
    def scheduler(self, repository, resolver, overlap_checker):
        return AppointmentScheduler(
            Mock(spec=Session),
            repository=repository,
            resolver=resolver,
            overlap_checker=overlap_checker,
        )

    def _create(self, scheduler, **overrides):
        params = {
            "client_id": "client",
            "professional_id": "prof",
            "service_id": "svc",
            "start_time": START,
        }
        params.update(overrides)
        return scheduler.create(**params)

    def test_creates_pending_appointment_with_effective_details(self, scheduler, repository):
        appointment = self._create(scheduler, notes="  fade on the sides  ")

        kwargs = repository.create.call_args.kwargs
        assert kwargs["status"] == "PENDING"
        assert kwargs["end_time"] == START + timedelta(minutes=45)
        assert kwargs["total_price_cents"] == 5000
        assert kwargs["notes"] == "fade on the sides"
        assert appointment.id == "01HAPPT"
        repository.lock_professional_calendar.assert_called_once_with("prof")

    def test_blank_notes_become_none(self, scheduler, repository):
        self._create(scheduler, notes="   ")

        assert repository.create.call_args.kwargs["notes"] is None

    def test_naive_start_time_is_utc(self, scheduler, repository):
        self._create(scheduler, start_time=datetime(2030, 1, 7, 10, 0))

        assert repository.create.call_args.kwargs["start_time"] == START

    @pytest.mark.parametrize("missing", ["client_id", "professional_id", "service_id", "start_time"])
    def test_missing_required_field(self, scheduler, resolver, repository, missing):
        with pytest.raises(ValidationException) as exc_info:
            self._create(scheduler, **{missing: None})

        assert exc_info.value.details["missing"] == [missing]
        resolver.resolve.assert_not_called()
        repository.create.assert_not_called()

    def test_blank_identifier_counts_as_missing(self, scheduler):
        with pytest.raises(ValidationException):
            self._create(scheduler, client_id="  ")

    def test_start_time_without_room_for_duration(self, scheduler, repository):
        with pytest.raises(ValidationException) as exc_info:
            self._create(
                scheduler, start_time=datetime(9999, 12, 31, 23, 50, tzinfo=timezone.utc)
            )

        assert exc_info.value.code == "INVALID_START_TIME"
        repository.create.assert_not_called()

    def test_unknown_service_is_invalid_service(self, scheduler, resolver, repository):
        resolver.resolve.side_effect = NotFoundException("Service svc not found")

        with pytest.raises(InvalidServiceException) as exc_info:
            self._create(scheduler)

        assert exc_info.value.code == "INVALID_SERVICE"
        repository.create.assert_not_called()

    def test_inactive_service_rejected_by_default(self, scheduler, resolver, repository):
        resolver.resolve.return_value = EffectiveServiceDetails(
            duration_minutes=30, price_cents=100, is_active=False
        )

        with pytest.raises(InvalidServiceException):
            self._create(scheduler)

        repository.create.assert_not_called()

    def test_inactive_service_allowed_when_configured(self, scheduler, resolver, monkeypatch):
        monkeypatch.setattr(settings, "allow_inactive_services", True)
        resolver.resolve.return_value = EffectiveServiceDetails(
            duration_minutes=30, price_cents=100, is_active=False
        )

        assert self._create(scheduler).status == "PENDING"

    def test_overlap_raises_conflict_without_insert(self, scheduler, overlap_checker, repository):
        blocking = Appointment(
            id="01HOTHER",
            start_time=START,
            end_time=START + timedelta(minutes=30),
            status="CONFIRMED",
        )
        overlap_checker.find_conflicts.return_value = [blocking]

        with pytest.raises(AppointmentConflictException) as exc_info:
            self._create(scheduler)

        conflicts = exc_info.value.details["conflicting_appointments"]
        assert [c["id"] for c in conflicts] == ["01HOTHER"]
        repository.create.assert_not_called()

    def test_exclusion_constraint_violation_is_a_conflict(self, scheduler, repository):
        db_error = IntegrityError(
            "INSERT INTO appointments ...",
            {},
            _PgError(
                'conflicting key value violates exclusion constraint '
                '"appointments_no_overlap_per_professional"',
                "23P01",
            ),
        )
        repository.create.side_effect = _repository_error(db_error)

        with pytest.raises(AppointmentConflictException):
            self._create(scheduler)

        repository.create.assert_called_once()

    def test_foreign_key_violation_is_invalid_service(self, scheduler, repository):
        db_error = IntegrityError(
            "INSERT INTO appointments ...",
            {},
            _PgError("insert or update violates foreign key constraint", "23503"),
        )
        repository.create.side_effect = _repository_error(db_error)

        with pytest.raises(InvalidServiceException):
            self._create(scheduler)

    @patch("barberbook.database.time.sleep")
    def test_serialization_failures_are_retried_then_internal_error(
        self, mock_sleep, scheduler, repository, monkeypatch
    ):
        monkeypatch.setattr(settings, "booking_max_attempts", 3)
        repository.create.side_effect = [
            _repository_error(
                OperationalError(
                    "INSERT INTO appointments ...",
                    {},
                    _PgError("could not serialize access due to concurrent update", "40001"),
                )
            )
            for _ in range(3)
        ]

        with pytest.raises(ServiceException) as exc_info:
            self._create(scheduler)

        assert exc_info.value.code == "STORE_CONFLICT_RETRIES_EXHAUSTED"
        assert repository.create.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("barberbook.database.time.sleep")
    def test_transient_failure_then_success(self, mock_sleep, scheduler, repository):
        created = Appointment(id="01HAPPT", status="PENDING")
        repository.create.side_effect = [
            _repository_error(
                OperationalError("INSERT ...", {}, _PgError("deadlock detected", "40P01"))
            ),
            created,
        ]

        assert self._create(scheduler) is created
        assert repository.lock_professional_calendar.call_count == 2

    def test_conflict_is_never_retried(self, scheduler, overlap_checker, repository):
        overlap_checker.find_conflicts.return_value = [
            Appointment(
                id="01HOTHER",
                start_time=START,
                end_time=START + timedelta(minutes=30),
                status="PENDING",
            )
        ]

        with pytest.raises(AppointmentConflictException):
            self._create(scheduler)

        overlap_checker.find_conflicts.assert_called_once()
