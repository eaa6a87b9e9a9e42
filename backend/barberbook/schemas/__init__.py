"""Request and response schemas for the HTTP layer."""

from .appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    ClientAppointmentSummary,
    ProfessionalAppointmentSummary,
)

__all__ = [
    "AppointmentCreate",
    "AppointmentResponse",
    "AppointmentStatusUpdate",
    "ClientAppointmentSummary",
    "ProfessionalAppointmentSummary",
]
