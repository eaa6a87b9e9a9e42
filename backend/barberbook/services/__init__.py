"""
Service layer for barberbook.

Each service owns business rules and transactions for one concern and is
constructed per request with the request's DB session.
"""

from .appointment_lifecycle import ALLOWED_TRANSITIONS, AppointmentLifecycle
from .appointment_query_service import AppointmentListing, AppointmentQueryService
from .appointment_scheduler import AppointmentScheduler
from .base import BaseService
from .overlap_checker import OverlapChecker, intervals_overlap
from .service_detail_resolver import EffectiveServiceDetails, ServiceDetailResolver

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AppointmentLifecycle",
    "AppointmentListing",
    "AppointmentQueryService",
    "AppointmentScheduler",
    "BaseService",
    "EffectiveServiceDetails",
    "OverlapChecker",
    "ServiceDetailResolver",
    "intervals_overlap",
]
