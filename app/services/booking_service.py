from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.exceptions import InvalidTransition, SlotConflict, SlotUnavailable
from app.core.logger import logger
from app.core.utils import local_today, utcnow
from app.db.models import AuditLog, Booking, Facility
from app.db.models.booking import ACTIVE_STATUSES
from app.db.session import store_call
from app.schemas.auth import Principal
from app.schemas.booking import BookingCreate, BookingReschedule, BookingStatus
from app.services.availability_service import AvailabilityService
from app.services.doctor_service import DoctorService
from app.services.facility_service import FacilityService
from app.services.slot_generator import format_slot, parse_slot, slot_end

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING.value: {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value},
    BookingStatus.CONFIRMED.value: {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value},
}

STAFF_ROLES = ("doctor", "admin")

def initial_status() -> str:
    if settings.BOOKING_REQUIRES_CONFIRMATION:
        return BookingStatus.PENDING.value
    return BookingStatus.CONFIRMED.value

class BookingService:
    """
    Creates bookings and moves them through their lifecycle.

    The slot check and the insert run in one transaction, and the partial
    unique index on the bookings table settles any race the check misses:
    the losing request gets SlotConflict.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _resolve_patient(self, data: BookingCreate, principal: Principal) -> UUID:
        if principal.role == "patient":
            return principal.subject_id
        if data.patient_id is None:
            raise HTTPException(status_code=400, detail="patient_id is required when booking on behalf of a patient")
        return data.patient_id

    async def ensure_can_access(self, booking: Booking, principal: Principal) -> None:
        if principal.role == "patient":
            if booking.patient_id != principal.subject_id:
                raise HTTPException(status_code=403, detail="Not authorized to access this booking")
        elif principal.role == "doctor":
            doctor_service = DoctorService(self.session)
            doctor = await doctor_service.get_doctor(booking.doctor_id)
            doctor_service.ensure_can_manage(doctor, principal)

    async def _active_booking_at(
        self, doctor_id: UUID, facility_id: UUID, on_date: date, start
    ) -> Optional[Booking]:
        stmt = select(Booking).where(
            Booking.doctor_id == doctor_id,
            Booking.facility_id == facility_id,
            Booking.appointment_date == on_date,
            Booking.start_time == start,
            Booking.status.in_(ACTIVE_STATUSES)
        )
        result = await store_call(self.session.execute(stmt), "find_active_booking")
        return result.scalars().first()

    async def _claim_slot(
        self, doctor_id: UUID, facility: Facility, on_date: date, start_time: str
    ):
        """Return (start, template) for a free slot or raise."""
        # "Today" is the calendar date at the facility, not at the server
        if on_date < local_today(facility.timezone):
            raise SlotUnavailable(f"{on_date.isoformat()} is in the past")

        start = parse_slot(start_time)
        generated = await AvailabilityService(self.session).get_generated_slots(doctor_id, facility.id, on_date)
        template = generated.get(start)
        if template is None:
            raise SlotUnavailable(
                f"{start_time} on {on_date.isoformat()} is not an available slot for this doctor"
            )

        if await self._active_booking_at(doctor_id, facility.id, on_date, start):
            logger.info(f"Slot conflict | Doctor: {doctor_id} | Date: {on_date} | Slot: {start_time}")
            raise SlotConflict(f"{start_time} on {on_date.isoformat()} is already booked")

        return start, template

    async def _commit_or_conflict(self, operation: str, slot_label: str) -> None:
        try:
            await store_call(self.session.commit(), operation)
        except IntegrityError as exc:
            await self.session.rollback()
            logger.info(f"Slot conflict on commit | Operation: {operation} | Slot: {slot_label}")
            raise SlotConflict(f"{slot_label} was booked by another request") from exc

    async def create_booking(self, data: BookingCreate, principal: Principal) -> Booking:
        patient_id = self._resolve_patient(data, principal)
        doctor_service = DoctorService(self.session)
        doctor = await doctor_service.get_doctor(data.doctor_id)
        if principal.role == "doctor":
            doctor_service.ensure_can_manage(doctor, principal)
        facility = await FacilityService(self.session).resolve_ref(data.facility_ref)

        start, template = await self._claim_slot(
            data.doctor_id, facility, data.appointment_date, data.start_time
        )

        booking = Booking(
            doctor_id=data.doctor_id,
            facility_type=data.facility_ref.type,
            facility_id=data.facility_ref.id,
            appointment_date=data.appointment_date,
            start_time=start,
            end_time=slot_end(template, start),
            patient_id=patient_id,
            reason=data.reason,
            appointment_type=data.appointment_type,
            status=initial_status(),
        )
        self.session.add(booking)
        self.session.add(AuditLog(
            actor_id=principal.subject_id,
            booking_id=booking.id,
            action="booking.created",
            payload={
                "date": data.appointment_date.isoformat(),
                "start_time": data.start_time,
                "status": booking.status,
            }
        ))

        await self._commit_or_conflict("create_booking", f"{data.start_time} on {data.appointment_date.isoformat()}")
        await store_call(self.session.refresh(booking))

        logger.info(
            f"Booking created | Id: {booking.id} | Doctor: {booking.doctor_id} | "
            f"Date: {booking.appointment_date} | Slot: {data.start_time} | Status: {booking.status}"
        )
        return booking

    async def get_booking(self, booking_id: UUID, for_update: bool = False) -> Booking:
        stmt = select(Booking).where(Booking.id == booking_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await store_call(self.session.execute(stmt), "get_booking")
        booking = result.scalars().first()
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    async def transition_status(
        self,
        booking_id: UUID,
        new_status: BookingStatus,
        principal: Principal,
        cancellation_reason: Optional[str] = None,
    ) -> Booking:
        booking = await self.get_booking(booking_id, for_update=True)
        await self.ensure_can_access(booking, principal)

        current = booking.status
        requested = BookingStatus(new_status).value
        if requested not in ALLOWED_TRANSITIONS.get(current, set()):
            raise InvalidTransition(current, requested)

        if requested != BookingStatus.CANCELLED.value and principal.role not in STAFF_ROLES:
            raise HTTPException(status_code=403, detail="Only doctors and admins can confirm or complete bookings")

        booking.status = requested
        booking.updated_at = utcnow()
        if requested == BookingStatus.CANCELLED.value:
            booking.cancellation_reason = cancellation_reason or "Cancelled by user"
            booking.cancelled_by = principal.subject_id

        self.session.add(booking)
        self.session.add(AuditLog(
            actor_id=principal.subject_id,
            booking_id=booking.id,
            action="booking.status_changed",
            payload={"from": current, "to": requested, "reason": cancellation_reason}
        ))
        await store_call(self.session.commit(), "transition_status")
        await store_call(self.session.refresh(booking))

        logger.info(f"Booking status changed | Id: {booking.id} | {current} -> {requested}")
        return booking

    async def reschedule_booking(
        self, booking_id: UUID, data: BookingReschedule, principal: Principal
    ) -> Booking:
        """Cancel an active booking and book the new slot in one transaction."""
        booking = await self.get_booking(booking_id, for_update=True)
        await self.ensure_can_access(booking, principal)

        if booking.status not in ACTIVE_STATUSES:
            raise InvalidTransition(booking.status, "rescheduled")

        facility = await FacilityService(self.session).get_facility(booking.facility_id)
        start, template = await self._claim_slot(
            booking.doctor_id, facility, data.appointment_date, data.start_time
        )

        previous = {
            "date": booking.appointment_date.isoformat(),
            "start_time": format_slot(booking.start_time),
        }
        booking.status = BookingStatus.CANCELLED.value
        booking.cancellation_reason = "Rescheduled"
        booking.cancelled_by = principal.subject_id
        booking.updated_at = utcnow()
        self.session.add(booking)
        # The old row must leave the active set before the new one is inserted
        await store_call(self.session.flush(), "reschedule_booking")

        replacement = Booking(
            doctor_id=booking.doctor_id,
            facility_type=booking.facility_type,
            facility_id=booking.facility_id,
            appointment_date=data.appointment_date,
            start_time=start,
            end_time=slot_end(template, start),
            patient_id=booking.patient_id,
            reason=booking.reason,
            appointment_type=booking.appointment_type,
            status=initial_status(),
        )
        self.session.add(replacement)
        self.session.add(AuditLog(
            actor_id=principal.subject_id,
            booking_id=replacement.id,
            action="booking.rescheduled",
            payload={
                "previous_booking_id": str(booking.id),
                "from": previous,
                "to": {"date": data.appointment_date.isoformat(), "start_time": data.start_time},
            }
        ))

        await self._commit_or_conflict("reschedule_booking", f"{data.start_time} on {data.appointment_date.isoformat()}")
        await store_call(self.session.refresh(replacement))

        logger.info(f"Booking rescheduled | Old: {booking.id} | New: {replacement.id}")
        return replacement

    async def list_patient_bookings(
        self, patient_id: UUID, status: Optional[List[BookingStatus]] = None
    ) -> List[Booking]:
        stmt = select(Booking).where(Booking.patient_id == patient_id)
        if status:
            stmt = stmt.where(Booking.status.in_([BookingStatus(s).value for s in status]))
        stmt = stmt.order_by(Booking.appointment_date, Booking.start_time)
        result = await store_call(self.session.execute(stmt), "list_patient_bookings")
        return result.scalars().all()

    async def list_my_bookings(
        self, principal: Principal, status: Optional[List[BookingStatus]] = None
    ) -> List[Booking]:
        """A patient's own bookings, or every booking of the caller's doctor profile."""
        if principal.role != "doctor":
            return await self.list_patient_bookings(principal.subject_id, status)

        doctor = await DoctorService(self.session).get_doctor_for_user(principal.subject_id)
        if doctor is None:
            return []
        stmt = select(Booking).where(Booking.doctor_id == doctor.id)
        if status:
            stmt = stmt.where(Booking.status.in_([BookingStatus(s).value for s in status]))
        stmt = stmt.order_by(Booking.appointment_date, Booking.start_time)
        result = await store_call(self.session.execute(stmt), "list_doctor_bookings")
        return result.scalars().all()

    async def list_doctor_bookings(
        self,
        doctor_id: UUID,
        on_date: date,
        status: Optional[List[BookingStatus]] = None,
        principal: Optional[Principal] = None,
    ) -> List[Booking]:
        doctor_service = DoctorService(self.session)
        doctor = await doctor_service.get_doctor(doctor_id)
        doctor_service.ensure_can_manage(doctor, principal)

        stmt = select(Booking).where(
            Booking.doctor_id == doctor_id,
            Booking.appointment_date == on_date
        )
        if status:
            stmt = stmt.where(Booking.status.in_([BookingStatus(s).value for s in status]))
        stmt = stmt.order_by(Booking.start_time)
        result = await store_call(self.session.execute(stmt), "list_doctor_bookings")
        return result.scalars().all()

    async def get_booking_stats(self, principal: Principal, doctor_id: Optional[UUID] = None) -> dict:
        """
        Per-status booking counts and the share of bookings completed.

        Doctors always see their own profile's figures. Admins see every
        booking, or one doctor's when ``doctor_id`` is given.
        """
        doctor_service = DoctorService(self.session)
        if principal.role == "doctor":
            doctor = await doctor_service.get_doctor_for_user(principal.subject_id)
            if doctor is None:
                raise HTTPException(status_code=404, detail="Doctor profile not found")
            if doctor_id is not None and doctor_id != doctor.id:
                raise HTTPException(status_code=403, detail="Not authorized to manage this doctor")
            doctor_id = doctor.id
        elif doctor_id is not None:
            await doctor_service.get_doctor(doctor_id)

        stmt = select(Booking.status, func.count()).group_by(Booking.status)
        if doctor_id is not None:
            stmt = stmt.where(Booking.doctor_id == doctor_id)
        result = await store_call(self.session.execute(stmt), "booking_stats")

        status_counts = {s.value: 0 for s in BookingStatus}
        for status, count in result.all():
            status_counts[status] = count
        total = sum(status_counts.values())
        completed = status_counts[BookingStatus.COMPLETED.value]

        return {
            "doctor_id": doctor_id,
            "total_bookings": total,
            "status_counts": status_counts,
            "completion_rate": (completed / total) * 100 if total else 0.0,
        }
