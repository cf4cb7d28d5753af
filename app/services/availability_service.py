from datetime import date, time, timedelta
from typing import Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.db.models import Booking, Schedule
from app.db.models.booking import ACTIVE_STATUSES
from app.db.session import store_call
from app.schemas.availability import DailySlots, WeeklyAvailabilityResponse
from app.services.doctor_service import DoctorService
from app.services.facility_service import FacilityService
from app.services.slot_generator import day_of_week, format_slot, generate_slots

class AvailabilityService:
    """
    Read-only view of bookable slots.

    Nothing here writes to the session, so any number of calls may run
    concurrently and repeated calls without intervening bookings agree.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _templates_for(self, doctor_id: UUID, facility_id: UUID, on_date: date) -> List[Schedule]:
        stmt = select(Schedule).where(
            Schedule.doctor_id == doctor_id,
            Schedule.facility_id == facility_id,
            Schedule.day_of_week == day_of_week(on_date),
            Schedule.is_active == True
        ).order_by(Schedule.start_time)
        result = await store_call(self.session.execute(stmt), "load_templates")
        return result.scalars().all()

    async def _booked_start_times(self, doctor_id: UUID, facility_id: UUID, on_date: date) -> set:
        stmt = select(Booking.start_time).where(
            Booking.doctor_id == doctor_id,
            Booking.facility_id == facility_id,
            Booking.appointment_date == on_date,
            Booking.status.in_(ACTIVE_STATUSES)
        )
        result = await store_call(self.session.execute(stmt), "load_bookings")
        return set(result.scalars().all())

    async def get_generated_slots(self, doctor_id: UUID, facility_id: UUID, on_date: date) -> Dict[time, Schedule]:
        """Every slot the active templates produce for the date, keyed by start time."""
        generated = {}
        for template in await self._templates_for(doctor_id, facility_id, on_date):
            for start in generate_slots(template, on_date):
                generated.setdefault(start, template)
        return dict(sorted(generated.items()))

    async def _ensure_exists(self, doctor_id: UUID, facility_id: UUID) -> None:
        await DoctorService(self.session).get_doctor(doctor_id)
        await FacilityService(self.session).get_facility(facility_id)

    async def _free_slots(self, doctor_id: UUID, facility_id: UUID, on_date: date) -> List[time]:
        generated = await self.get_generated_slots(doctor_id, facility_id, on_date)
        if not generated:
            return []

        booked = await self._booked_start_times(doctor_id, facility_id, on_date)
        return [start for start in generated if start not in booked]

    async def get_available_slots(self, doctor_id: UUID, facility_id: UUID, on_date: date) -> List[time]:
        await self._ensure_exists(doctor_id, facility_id)
        return await self._free_slots(doctor_id, facility_id, on_date)

    async def get_weekly_slots(self, doctor_id: UUID, facility_id: UUID, start_date: date) -> WeeklyAvailabilityResponse:
        await self._ensure_exists(doctor_id, facility_id)

        days = settings.AVAILABILITY_WINDOW_DAYS
        daily_slots_list = []
        for i in range(days):
            current_date = start_date + timedelta(days=i)
            slots = await self._free_slots(doctor_id, facility_id, current_date)
            daily_slots_list.append(DailySlots(
                date=current_date.isoformat(),
                slots=[format_slot(s) for s in slots]
            ))

        return WeeklyAvailabilityResponse(
            doctor_id=doctor_id,
            facility_id=facility_id,
            start_date=start_date.isoformat(),
            end_date=(start_date + timedelta(days=days - 1)).isoformat(),
            daily_slots=daily_slots_list
        )
