from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import require_roles
from app.api.v1.bookings import construct_response
from app.db.session import get_session
from app.schemas.auth import Principal
from app.schemas.booking import BookingResponse, BookingStatus
from app.schemas.doctor import DoctorCreate, DoctorResponse
from app.schemas.schedule import ScheduleCreate, ScheduleResponse
from app.services.booking_service import BookingService
from app.services.doctor_service import DoctorService
from app.services.schedule_service import ScheduleService

router = APIRouter()

@router.post("/", response_model=DoctorResponse, status_code=201)
async def create_doctor(
    doctor_data: DoctorCreate,
    principal: Principal = Depends(require_roles("admin")),
    session: AsyncSession = Depends(get_session)
):
    return await DoctorService(session).create_doctor(doctor_data)

@router.get("/", response_model=List[DoctorResponse])
async def read_doctors(
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session)
):
    return await DoctorService(session).get_doctors(skip, limit)

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def read_doctor(doctor_id: UUID, session: AsyncSession = Depends(get_session)):
    return await DoctorService(session).get_doctor(doctor_id)

@router.put("/{doctor_id}/schedules", response_model=List[ScheduleResponse])
async def replace_schedules(
    doctor_id: UUID,
    schedules: List[ScheduleCreate],
    principal: Principal = Depends(require_roles("doctor", "admin")),
    session: AsyncSession = Depends(get_session)
):
    return await ScheduleService(session).replace_schedules(doctor_id, schedules, principal)

@router.get("/{doctor_id}/schedules", response_model=List[ScheduleResponse])
async def read_schedules(
    doctor_id: UUID,
    facility_id: Optional[UUID] = None,
    include_inactive: bool = False,
    session: AsyncSession = Depends(get_session)
):
    return await ScheduleService(session).list_schedules(doctor_id, facility_id, include_inactive)

@router.get("/{doctor_id}/bookings", response_model=List[BookingResponse])
async def read_doctor_bookings(
    doctor_id: UUID,
    date: date,
    status: Optional[List[BookingStatus]] = Query(default=None),
    principal: Principal = Depends(require_roles("doctor", "admin")),
    session: AsyncSession = Depends(get_session)
):
    bookings = await BookingService(session).list_doctor_bookings(doctor_id, date, status, principal)
    return [construct_response(b) for b in bookings]
