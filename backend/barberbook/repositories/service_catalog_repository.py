# backend/barberbook/repositories/service_catalog_repository.py
"""
Service Catalog Repository for barberbook.

Read-only access to catalog services and the per-professional overrides
layered on top of them.
"""

import logging
from typing import Optional, Tuple, cast

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.service_catalog import ProfessionalService, Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceCatalogRepository(BaseRepository[Service]):
    """Repository for catalog lookups used during booking."""

    def __init__(self, db: Session):
        super().__init__(db, Service)

    def get_service_with_override(
        self, professional_id: str, service_id: str
    ) -> Optional[Tuple[Service, Optional[ProfessionalService]]]:
        """
        Fetch a catalog service together with the professional's override, if any.

        Single query with a LEFT OUTER JOIN on (service_id, professional_id):
        a missing override yields ``(service, None)``; a missing service yields
        ``None`` regardless of the professional.
        """
        try:
            row = (
                self.db.query(Service, ProfessionalService)
                .outerjoin(
                    ProfessionalService,
                    and_(
                        ProfessionalService.service_id == Service.id,
                        ProfessionalService.professional_id == professional_id,
                    ),
                )
                .filter(Service.id == service_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error resolving service {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to resolve service: {str(e)}") from e

        if row is None:
            return None
        service, override = row
        return cast(Service, service), cast(Optional[ProfessionalService], override)
