# backend/barberbook/services/service_detail_resolver.py
"""
Service Detail Resolver for barberbook.

Turns a (professional, service) pair into the duration and price that a
booking actually uses. A professional may override either field of a
catalog entry; each field falls back to the catalog default on its own.
"""

from dataclasses import dataclass
import logging
from typing import Optional, TypeVar

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.service_catalog import ProfessionalService, Service
from ..repositories import RepositoryFactory
from ..repositories.service_catalog_repository import ServiceCatalogRepository
from .base import BaseService

logger = logging.getLogger(__name__)

V = TypeVar("V")


def _prefer(override: Optional[V], default: V) -> V:
    return default if override is None else override


@dataclass(frozen=True)
class EffectiveServiceDetails:
    """Duration and price applied to a booking after override resolution."""

    duration_minutes: int
    price_cents: int
    service_name: str = ""
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")
        if self.price_cents < 0:
            raise ValueError(f"price_cents must be non-negative, got {self.price_cents}")

    @classmethod
    def from_catalog(
        cls, service: Service, override: Optional[ProfessionalService]
    ) -> "EffectiveServiceDetails":
        duration_override = override.duration_override if override is not None else None
        price_override = override.price_override if override is not None else None
        return cls(
            duration_minutes=_prefer(duration_override, service.duration_min),
            price_cents=_prefer(price_override, service.price_cents),
            service_name=service.name,
            is_active=bool(service.is_active),
        )


class ServiceDetailResolver(BaseService):
    """
    Resolves effective service details.

    Read-only and uncached: the catalog may change between bookings, so every
    booking attempt resolves again. Whether an inactive service is bookable is
    the caller's decision; ``is_active`` is reported, not enforced.
    """

    def __init__(self, db: Session, repository: Optional[ServiceCatalogRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_service_catalog_repository(db)

    @BaseService.measure_operation("resolve_service_details")
    def resolve(self, professional_id: str, service_id: str) -> EffectiveServiceDetails:
        """
        Resolve duration and price for ``service_id`` as offered by ``professional_id``.

        Raises:
            NotFoundException: If no catalog service has ``service_id``
        """
        row = self.repository.get_service_with_override(professional_id, service_id)
        if row is None:
            raise NotFoundException(
                f"Service {service_id} not found",
                code="SERVICE_NOT_FOUND",
                details={"service_id": service_id},
            )

        service, override = row
        details = EffectiveServiceDetails.from_catalog(service, override)
        self.logger.debug(
            "Resolved service details",
            extra={
                "professional_id": professional_id,
                "service_id": service_id,
                "has_override": override is not None,
                "duration_minutes": details.duration_minutes,
                "price_cents": details.price_cents,
            },
        )
        return details
