# backend/barberbook/routes/v1/clients.py
"""
Client routes - API v1

Endpoints:
    GET /{client_id}/appointments - Appointment history, latest first
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends, Path

from ...api.dependencies import get_appointment_query_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...schemas.appointment import ClientAppointmentSummary
from ...services.appointment_query_service import AppointmentQueryService

router = APIRouter(tags=["clients-v1"])


@router.get("/{client_id}/appointments", response_model=List[ClientAppointmentSummary])
async def list_client_appointments(
    client_id: str = Path(..., description="Client user ULID"),
    query_service: AppointmentQueryService = Depends(get_appointment_query_service),
) -> List[ClientAppointmentSummary]:
    """All appointments of a client, any status, newest start time first."""
    try:
        listings = await asyncio.to_thread(query_service.list_client_appointments, client_id)
        return [ClientAppointmentSummary.from_listing(listing) for listing in listings]
    except DomainException as e:
        handle_domain_exception(e)
