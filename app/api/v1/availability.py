from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.db.session import get_session
from app.schemas.availability import AvailabilityResponse, WeeklyAvailabilityResponse
from app.services.availability_service import AvailabilityService
from app.services.slot_generator import format_slot

router = APIRouter()

async def get_availability_service(session: AsyncSession = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(session)

@router.get("", response_model=AvailabilityResponse)
async def read_availability(
    doctor_id: UUID,
    facility_id: UUID,
    date: date,
    service: AvailabilityService = Depends(get_availability_service)
):
    slots = await service.get_available_slots(doctor_id, facility_id, date)
    return AvailabilityResponse(
        doctor_id=doctor_id,
        facility_id=facility_id,
        date=date.isoformat(),
        slots=[format_slot(s) for s in slots]
    )

@router.get("/week", response_model=WeeklyAvailabilityResponse)
async def read_weekly_availability(
    doctor_id: UUID,
    facility_id: UUID,
    start_date: date,
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.get_weekly_slots(doctor_id, facility_id, start_date)
