"""
Repository layer for barberbook.

Repositories own every SQL query; services own transactions and rules.
"""

from .appointment_repository import AppointmentRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .service_catalog_repository import ServiceCatalogRepository

__all__ = [
    "AppointmentRepository",
    "BaseRepository",
    "RepositoryFactory",
    "ServiceCatalogRepository",
]
