from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_current_principal, require_roles
from app.db.models import Booking
from app.db.session import get_session
from app.schemas.auth import Principal
from app.schemas.booking import (
    BookingCreate,
    BookingReschedule,
    BookingResponse,
    BookingStatsResponse,
    BookingStatus,
    BookingStatusUpdate,
)
from app.schemas.facility import FacilityRef
from app.services.booking_service import BookingService
from app.services.slot_generator import format_slot

router = APIRouter()

async def get_booking_service(session: AsyncSession = Depends(get_session)) -> BookingService:
    return BookingService(session)

def construct_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        doctor_id=booking.doctor_id,
        facility_ref=FacilityRef(type=booking.facility_type, id=booking.facility_id),
        appointment_date=booking.appointment_date,
        start_time=format_slot(booking.start_time),
        end_time=format_slot(booking.end_time),
        patient_id=booking.patient_id,
        reason=booking.reason,
        appointment_type=booking.appointment_type,
        status=booking.status,
        cancellation_reason=booking.cancellation_reason,
        cancelled_by=booking.cancelled_by,
        created_at=booking.created_at,
        updated_at=booking.updated_at
    )

@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    request: BookingCreate,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.create_booking(request, principal)
    return construct_response(booking)

@router.get("/mine", response_model=List[BookingResponse])
async def read_my_bookings(
    status: Optional[List[BookingStatus]] = Query(default=None),
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service)
):
    bookings = await service.list_my_bookings(principal, status)
    return [construct_response(b) for b in bookings]

@router.get("/stats", response_model=BookingStatsResponse)
async def read_booking_stats(
    doctor_id: Optional[UUID] = None,
    principal: Principal = Depends(require_roles("doctor", "admin")),
    service: BookingService = Depends(get_booking_service)
):
    return await service.get_booking_stats(principal, doctor_id)

@router.get("/{booking_id}", response_model=BookingResponse)
async def read_booking(
    booking_id: UUID,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.get_booking(booking_id)
    await service.ensure_can_access(booking, principal)
    return construct_response(booking)

@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    request: BookingStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.transition_status(
        booking_id, request.status, principal, request.cancellation_reason
    )
    return construct_response(booking)

@router.patch("/{booking_id}/reschedule", response_model=BookingResponse)
async def reschedule_booking(
    booking_id: UUID,
    request: BookingReschedule,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.reschedule_booking(booking_id, request, principal)
    return construct_response(booking)
