# backend/barberbook/routes/v1/professionals.py
"""
Professional routes - API v1

Endpoints:
    GET /{professional_id}/appointments?date=YYYY-MM-DD - Agenda for one day
"""

import asyncio
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from ...api.dependencies import get_appointment_query_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...schemas.appointment import ProfessionalAppointmentSummary
from ...services.appointment_query_service import AppointmentQueryService

router = APIRouter(tags=["professionals-v1"])


@router.get(
    "/{professional_id}/appointments",
    response_model=List[ProfessionalAppointmentSummary],
)
async def list_professional_appointments(
    professional_id: str = Path(..., description="Professional ULID"),
    day: Optional[date] = Query(
        None, alias="date", description="UTC calendar day (YYYY-MM-DD); defaults to today"
    ),
    query_service: AppointmentQueryService = Depends(get_appointment_query_service),
) -> List[ProfessionalAppointmentSummary]:
    """Active appointments starting on the given day, earliest first."""
    target_day = day or datetime.now(timezone.utc).date()
    try:
        listings = await asyncio.to_thread(
            query_service.list_professional_appointments_for_date, professional_id, target_day
        )
        return [ProfessionalAppointmentSummary.from_listing(listing) for listing in listings]
    except DomainException as e:
        handle_domain_exception(e)
