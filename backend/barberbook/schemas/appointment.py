# backend/barberbook/schemas/appointment.py
"""
Appointment schemas for barberbook.

Request fields accept both snake_case and the camelCase names used by
existing clients (``clientId``, ``startTime``...). Required booking fields
are declared optional here so that a missing field reaches the scheduler and
is reported as a 400 ValidationException, like every other booking error.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, Field

from ..models.appointment import Appointment, AppointmentStatus
from ..services.appointment_query_service import AppointmentListing
from ._strict_base import StrictModel, StrictRequestModel


class AppointmentCreate(StrictRequestModel):
    """Booking request for one service with one professional."""

    client_id: Optional[str] = Field(None, validation_alias=AliasChoices("client_id", "clientId"))
    professional_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("professional_id", "professionalId")
    )
    service_id: Optional[str] = Field(None, validation_alias=AliasChoices("service_id", "serviceId"))
    start_time: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("start_time", "startTime"),
        description="ISO-8601 start; values without an offset are read as UTC",
    )
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentStatusUpdate(StrictRequestModel):
    """Target status for a lifecycle transition."""

    status: str = Field(..., description="One of PENDING, CONFIRMED, COMPLETED, CANCELLED, NO_SHOW")


class AppointmentResponse(StrictModel):
    id: str
    client_id: str
    professional_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    total_price_cents: int
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            client_id=appointment.client_id,
            professional_id=appointment.professional_id,
            service_id=appointment.service_id,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            status=appointment.status_enum,
            total_price_cents=appointment.total_price_cents,
            notes=appointment.notes,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )


class ClientAppointmentSummary(StrictModel):
    """Row of a client's appointment history."""

    id: str
    professional_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    total_price_cents: int
    notes: Optional[str] = None
    service_name: str
    professional_name: str

    @classmethod
    def from_listing(cls, listing: AppointmentListing) -> "ClientAppointmentSummary":
        appointment = listing.appointment
        return cls(
            id=appointment.id,
            professional_id=appointment.professional_id,
            service_id=appointment.service_id,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            status=appointment.status_enum,
            total_price_cents=appointment.total_price_cents,
            notes=appointment.notes,
            service_name=listing.service_name,
            professional_name=listing.counterpart_name,
        )


class ProfessionalAppointmentSummary(StrictModel):
    """Row of a professional's agenda for one day."""

    id: str
    client_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    total_price_cents: int
    notes: Optional[str] = None
    service_name: str
    client_name: str

    @classmethod
    def from_listing(cls, listing: AppointmentListing) -> "ProfessionalAppointmentSummary":
        appointment = listing.appointment
        return cls(
            id=appointment.id,
            client_id=appointment.client_id,
            service_id=appointment.service_id,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            status=appointment.status_enum,
            total_price_cents=appointment.total_price_cents,
            notes=appointment.notes,
            service_name=listing.service_name,
            client_name=listing.counterpart_name,
        )
