from pydantic import BaseModel, Field
from enum import Enum
from uuid import UUID
from datetime import date, datetime
from typing import Dict, Optional, Literal

from app.schemas.facility import FacilityRef

SLOT_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"

class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

AppointmentType = Literal["consultation", "follow-up", "emergency", "routine-checkup"]

class BookingCreate(BaseModel):
    doctor_id: UUID
    facility_ref: FacilityRef
    appointment_date: date
    start_time: str = Field(pattern=SLOT_PATTERN)
    reason: str = Field(min_length=1)
    appointment_type: AppointmentType = "consultation"
    # Only honoured when an admin books on behalf of a patient
    patient_id: Optional[UUID] = None

class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    cancellation_reason: Optional[str] = None

class BookingReschedule(BaseModel):
    appointment_date: date
    start_time: str = Field(pattern=SLOT_PATTERN)

class BookingResponse(BaseModel):
    id: UUID
    doctor_id: UUID
    facility_ref: FacilityRef
    appointment_date: date
    start_time: str
    end_time: str
    patient_id: UUID
    reason: str
    appointment_type: str
    status: BookingStatus
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

class BookingStatsResponse(BaseModel):
    doctor_id: Optional[UUID] = None
    total_bookings: int
    status_counts: Dict[str, int]
    completion_rate: float
