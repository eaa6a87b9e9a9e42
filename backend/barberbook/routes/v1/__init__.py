"""Versioned API routers."""

from fastapi import APIRouter

from . import appointments, clients, professionals

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(appointments.router, prefix="/appointments")
api_v1.include_router(clients.router, prefix="/clients")
api_v1.include_router(professionals.router, prefix="/professionals")

__all__ = ["api_v1"]
