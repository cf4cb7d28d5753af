from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, date, time
from app.core.utils import utcnow
from uuid import UUID, uuid4
from sqlalchemy import DateTime, Index, text

ACTIVE_STATUSES = ("pending", "confirmed")

_active_slot_filter = text("status IN ('pending', 'confirmed')")

class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        # At most one active booking per doctor, facility, date and start time
        Index(
            "uq_bookings_active_slot",
            "doctor_id",
            "facility_type",
            "facility_id",
            "appointment_date",
            "start_time",
            unique=True,
            postgresql_where=_active_slot_filter,
            sqlite_where=_active_slot_filter,
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    doctor_id: UUID = Field(foreign_key="doctors.id", index=True)
    facility_type: str
    facility_id: UUID = Field(foreign_key="facilities.id")
    appointment_date: date = Field(index=True)
    start_time: time
    end_time: time
    patient_id: UUID = Field(index=True)
    reason: str
    appointment_type: str = Field(default="consultation")
    status: str # pending, confirmed, completed, cancelled
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[UUID] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
