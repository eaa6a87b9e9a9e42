# backend/barberbook/core/exceptions.py
"""
Scheduling errors.

Services raise DomainException subclasses; routes turn them into HTTP
responses with ``to_http_exception()``. Each class fixes the status code, and
``code`` is the stable machine-readable identifier clients switch on.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Error with an HTTP status, a stable code and structured details."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when the request is malformed or misses required data."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when the request collides with existing state."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails for reasons outside the caller's control."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Specific business exceptions


class InvalidServiceException(ValidationException):
    """Raised when a service (or the professional it is booked with) cannot be resolved."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "Invalid service",
            code="INVALID_SERVICE",
            details=details or {},
        )


class AppointmentConflictException(ConflictException):
    """Raised when an appointment overlaps an existing commitment of the professional."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing appointment",
            code="APPOINTMENT_CONFLICT",
            details=details or {},
        )


class InvalidTransitionException(BusinessRuleException):
    """Raised when an appointment cannot move from its current status to the requested one."""

    def __init__(self, appointment_id: str, current_status: str, target_status: str):
        super().__init__(
            message=f"Appointment cannot move from {current_status} to {target_status}",
            code="INVALID_TRANSITION",
            details={
                "appointment_id": appointment_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class ProfessionalLockTimeout(ServiceException):
    """Raised when the per-professional booking lock cannot be acquired in time."""

    def __init__(self, professional_id: str, timeout_s: float):
        super().__init__(
            message="Scheduling is busy for this professional, please retry",
            code="LOCK_TIMEOUT",
            details={"professional_id": professional_id, "timeout_s": timeout_s},
        )


class RepositoryException(Exception):
    """
    A data access call failed.

    Not a DomainException: services translate it. The SQLAlchemy error is
    chained as ``__cause__`` so the driver's SQLSTATE stays reachable.
    """
