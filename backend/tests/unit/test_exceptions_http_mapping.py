# backend/tests/unit/test_exceptions_http_mapping.py
"""
Domain exception to HTTP status mapping.
"""

import pytest

from barberbook.core.exceptions import (
    AppointmentConflictException,
    InvalidServiceException,
    InvalidTransitionException,
    NotFoundException,
    ProfessionalLockTimeout,
    ServiceException,
    ValidationException,
)


@pytest.mark.unit
class TestHttpMapping:
    @pytest.mark.parametrize(
        "exc, status_code, code",
        [
            (
                ValidationException("missing", code="MISSING_REQUIRED_FIELDS"),
                400,
                "MISSING_REQUIRED_FIELDS",
            ),
            (InvalidServiceException(), 400, "INVALID_SERVICE"),
            (AppointmentConflictException(), 409, "APPOINTMENT_CONFLICT"),
            (NotFoundException("gone", code="APPOINTMENT_NOT_FOUND"), 404, "APPOINTMENT_NOT_FOUND"),
            (InvalidTransitionException("id", "COMPLETED", "CANCELLED"), 422, "INVALID_TRANSITION"),
            (ServiceException("db down"), 500, "ServiceException"),
            (ProfessionalLockTimeout("prof", 10.0), 500, "LOCK_TIMEOUT"),
        ],
    )
    def test_status_and_code(self, exc, status_code, code):
        http_exc = exc.to_http_exception()

        assert http_exc.status_code == status_code
        assert http_exc.detail["code"] == code
        assert http_exc.detail["message"] == exc.message

    def test_invalid_service_is_a_validation_error(self):
        assert isinstance(InvalidServiceException(), ValidationException)

    def test_details_are_carried(self):
        exc = InvalidTransitionException("01HAPPT", "COMPLETED", "CANCELLED")

        assert exc.to_http_exception().detail["details"] == {
            "appointment_id": "01HAPPT",
            "current_status": "COMPLETED",
            "target_status": "CANCELLED",
        }
