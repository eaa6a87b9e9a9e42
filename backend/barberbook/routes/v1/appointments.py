# backend/barberbook/routes/v1/appointments.py
"""
Appointment routes - API v1

Versioned appointment endpoints under /api/v1/appointments.
All business logic is delegated to the scheduling services.

Endpoints:
    POST / - Book an appointment
    GET /{appointment_id} - Appointment details
    PATCH /{appointment_id}/cancel - Cancel an appointment
    POST /{appointment_id}/status - Move an appointment to another status
"""

import asyncio
import logging

from fastapi import APIRouter, Body, Depends, Path, status

from ...api.dependencies import (
    get_appointment_lifecycle,
    get_appointment_query_service,
    get_appointment_scheduler,
)
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...schemas.appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
)
from ...services.appointment_lifecycle import AppointmentLifecycle
from ...services.appointment_query_service import AppointmentQueryService
from ...services.appointment_scheduler import AppointmentScheduler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["appointments-v1"])


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing field or invalid service"},
        409: {"description": "Time slot already taken"},
    },
)
async def create_appointment(
    payload: AppointmentCreate = Body(...),
    scheduler: AppointmentScheduler = Depends(get_appointment_scheduler),
) -> AppointmentResponse:
    """Book a service with a professional. The appointment starts as PENDING."""
    try:
        appointment = await asyncio.to_thread(
            scheduler.create,
            client_id=payload.client_id,
            professional_id=payload.professional_id,
            service_id=payload.service_id,
            start_time=payload.start_time,
            notes=payload.notes,
        )
        return AppointmentResponse.from_appointment(appointment)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str = Path(..., description="Appointment ULID"),
    query_service: AppointmentQueryService = Depends(get_appointment_query_service),
) -> AppointmentResponse:
    try:
        appointment = await asyncio.to_thread(query_service.get_appointment, appointment_id)
        return AppointmentResponse.from_appointment(appointment)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    responses={404: {"description": "Appointment not found"}},
)
async def cancel_appointment(
    appointment_id: str = Path(..., description="Appointment ULID"),
    lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle),
) -> AppointmentResponse:
    """Cancel an appointment and free its time slot. Repeating the call is harmless."""
    try:
        appointment = await asyncio.to_thread(lifecycle.cancel, appointment_id)
        return AppointmentResponse.from_appointment(appointment)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    responses={
        400: {"description": "Unknown status"},
        404: {"description": "Appointment not found"},
        422: {"description": "Transition not allowed from the current status"},
    },
)
async def transition_appointment(
    appointment_id: str = Path(..., description="Appointment ULID"),
    payload: AppointmentStatusUpdate = Body(...),
    lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle),
) -> AppointmentResponse:
    try:
        appointment = await asyncio.to_thread(lifecycle.transition, appointment_id, payload.status)
        return AppointmentResponse.from_appointment(appointment)
    except DomainException as e:
        handle_domain_exception(e)
