# backend/barberbook/repositories/factory.py
"""
Repository Factory for barberbook.

Services build their default repositories here so tests can pass mocks
through the service constructors instead.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .appointment_repository import AppointmentRepository
    from .service_catalog_repository import ServiceCatalogRepository


class RepositoryFactory:
    @staticmethod
    def create_appointment_repository(db: Session) -> "AppointmentRepository":
        from .appointment_repository import AppointmentRepository

        return AppointmentRepository(db)

    @staticmethod
    def create_service_catalog_repository(db: Session) -> "ServiceCatalogRepository":
        from .service_catalog_repository import ServiceCatalogRepository

        return ServiceCatalogRepository(db)
