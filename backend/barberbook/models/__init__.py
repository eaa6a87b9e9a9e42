from .appointment import (
    BLOCKING_STATUSES,
    NON_BLOCKING_STATUSES,
    TERMINAL_STATUSES,
    Appointment,
    AppointmentStatus,
)
from .professional import Barbershop, Professional
from .service_catalog import ProfessionalService, Service
from .user import User, UserRole

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "BLOCKING_STATUSES",
    "NON_BLOCKING_STATUSES",
    "TERMINAL_STATUSES",
    "Barbershop",
    "Professional",
    "ProfessionalService",
    "Service",
    "User",
    "UserRole",
]
