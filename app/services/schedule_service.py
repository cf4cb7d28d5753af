from typing import Dict, List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import delete, select

from app.core.logger import logger
from app.db.models import Schedule
from app.db.session import store_call
from app.schemas.auth import Principal
from app.schemas.schedule import ScheduleCreate, ScheduleUpdate
from app.services.doctor_service import DoctorService
from app.services.facility_service import FacilityService
from app.services.slot_generator import windows_overlap

def validate_template(schedule: Schedule) -> None:
    for field in ("start_time", "end_time", "break_start", "break_end"):
        value = getattr(schedule, field)
        if value is not None and (value.tzinfo is not None or value.second or value.microsecond):
            raise HTTPException(status_code=400, detail=f"{field} must be a whole-minute local time")
    if not 0 <= schedule.day_of_week <= 6:
        raise HTTPException(status_code=400, detail="day_of_week must be between 0 (Sunday) and 6 (Saturday)")
    if schedule.start_time >= schedule.end_time:
        raise HTTPException(status_code=400, detail="start_time must be before end_time")
    if schedule.slot_duration_minutes <= 0:
        raise HTTPException(status_code=400, detail="slot_duration_minutes must be positive")
    if (schedule.break_start is None) != (schedule.break_end is None):
        raise HTTPException(status_code=400, detail="break_start and break_end must be provided together")
    if schedule.break_start is not None:
        if schedule.break_start >= schedule.break_end:
            raise HTTPException(status_code=400, detail="break_start must be before break_end")
        if schedule.break_start < schedule.start_time or schedule.break_end > schedule.end_time:
            raise HTTPException(status_code=400, detail="break must fall within start_time and end_time")

def _ensure_no_overlap(schedules: List[Schedule]) -> None:
    ordered = sorted(schedules, key=lambda s: s.start_time)
    for previous, current in zip(ordered, ordered[1:]):
        if windows_overlap(previous, current):
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Schedules {previous.start_time.isoformat()}-{previous.end_time.isoformat()} and "
                    f"{current.start_time.isoformat()}-{current.end_time.isoformat()} overlap "
                    f"on day {current.day_of_week}"
                )
            )

class ScheduleService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace_schedules(
        self, doctor_id: UUID, schedules: List[ScheduleCreate], principal: Optional[Principal] = None
    ) -> List[Schedule]:
        """
        Replace the doctor's templates for every (facility, day) present in
        the input. Days and facilities not mentioned are left untouched.
        """
        doctor_service = DoctorService(self.session)
        doctor = await doctor_service.get_doctor(doctor_id)
        doctor_service.ensure_can_manage(doctor, principal)

        facility_service = FacilityService(self.session)
        groups: Dict[Tuple[str, UUID, int], List[Schedule]] = {}
        for s in schedules:
            await facility_service.resolve_ref(s.facility)
            schedule = Schedule(
                doctor_id=doctor_id,
                facility_type=s.facility.type,
                facility_id=s.facility.id,
                day_of_week=s.day_of_week,
                start_time=s.start_time,
                end_time=s.end_time,
                slot_duration_minutes=s.slot_duration_minutes or doctor.default_slot_minutes,
                break_start=s.break_start,
                break_end=s.break_end,
            )
            validate_template(schedule)
            key = (s.facility.type, s.facility.id, s.day_of_week)
            groups.setdefault(key, []).append(schedule)

        new_schedules = []
        for (facility_type, facility_id, day), day_schedules in groups.items():
            _ensure_no_overlap(day_schedules)

            stmt = delete(Schedule).where(
                Schedule.doctor_id == doctor_id,
                Schedule.facility_type == facility_type,
                Schedule.facility_id == facility_id,
                Schedule.day_of_week == day
            )
            await store_call(self.session.execute(stmt), "delete_schedules")

            for schedule in day_schedules:
                self.session.add(schedule)
                new_schedules.append(schedule)

        await store_call(self.session.commit(), "replace_schedules")
        for schedule in new_schedules:
            await store_call(self.session.refresh(schedule))

        logger.info(f"Schedules replaced | Doctor: {doctor_id} | Templates: {len(new_schedules)}")
        return new_schedules

    async def list_schedules(
        self,
        doctor_id: UUID,
        facility_id: Optional[UUID] = None,
        include_inactive: bool = False,
    ) -> List[Schedule]:
        stmt = select(Schedule).where(Schedule.doctor_id == doctor_id)
        if facility_id:
            stmt = stmt.where(Schedule.facility_id == facility_id)
        if not include_inactive:
            stmt = stmt.where(Schedule.is_active == True)
        stmt = stmt.order_by(Schedule.day_of_week, Schedule.start_time)
        result = await store_call(self.session.execute(stmt), "list_schedules")
        return result.scalars().all()

    async def get_schedule(self, schedule_id: UUID) -> Schedule:
        schedule = await store_call(self.session.get(Schedule, schedule_id), "get_schedule")
        if not schedule:
            raise HTTPException(status_code=404, detail="Schedule not found")
        return schedule

    async def _ensure_owner(self, schedule: Schedule, principal: Optional[Principal]) -> None:
        doctor_service = DoctorService(self.session)
        doctor = await doctor_service.get_doctor(schedule.doctor_id)
        doctor_service.ensure_can_manage(doctor, principal)

    async def update_schedule(
        self, schedule_id: UUID, schedule_update: ScheduleUpdate, principal: Optional[Principal] = None
    ) -> Schedule:
        schedule = await self.get_schedule(schedule_id)
        await self._ensure_owner(schedule, principal)

        update_data = schedule_update.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(schedule, key, value)
        validate_template(schedule)

        if schedule.is_active:
            stmt = select(Schedule).where(
                Schedule.doctor_id == schedule.doctor_id,
                Schedule.facility_id == schedule.facility_id,
                Schedule.day_of_week == schedule.day_of_week,
                Schedule.is_active == True,
                Schedule.id != schedule.id
            )
            # Keep the pending edits out of the query's autoflush
            with self.session.no_autoflush:
                result = await store_call(self.session.execute(stmt), "list_schedules")
            _ensure_no_overlap([schedule, *result.scalars().all()])

        self.session.add(schedule)
        await store_call(self.session.commit(), "update_schedule")
        await store_call(self.session.refresh(schedule))
        return schedule

    async def deactivate_schedule(self, schedule_id: UUID, principal: Optional[Principal] = None) -> dict:
        schedule = await self.get_schedule(schedule_id)
        await self._ensure_owner(schedule, principal)

        schedule.is_active = False
        self.session.add(schedule)
        await store_call(self.session.commit(), "deactivate_schedule")
        return {"message": "Schedule deactivated successfully"}
