# backend/barberbook/api/dependencies.py
"""
Service layer dependencies for dependency injection.

Each request gets its own DB session (``get_db``) and services are built
around it, so no connection state is shared between requests.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.appointment_lifecycle import AppointmentLifecycle
from ..services.appointment_query_service import AppointmentQueryService
from ..services.appointment_scheduler import AppointmentScheduler


def get_appointment_scheduler(db: Session = Depends(get_db)) -> AppointmentScheduler:
    return AppointmentScheduler(db)


def get_appointment_lifecycle(db: Session = Depends(get_db)) -> AppointmentLifecycle:
    return AppointmentLifecycle(db)


def get_appointment_query_service(db: Session = Depends(get_db)) -> AppointmentQueryService:
    return AppointmentQueryService(db)


__all__ = [
    "get_appointment_lifecycle",
    "get_appointment_query_service",
    "get_appointment_scheduler",
    "get_db",
]
