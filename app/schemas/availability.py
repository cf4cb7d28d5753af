from pydantic import BaseModel
from typing import List
from uuid import UUID

class AvailabilityResponse(BaseModel):
    doctor_id: UUID
    facility_id: UUID
    date: str
    slots: List[str]

class DailySlots(BaseModel):
    date: str
    slots: List[str]

class WeeklyAvailabilityResponse(BaseModel):
    doctor_id: UUID
    facility_id: UUID
    start_date: str
    end_date: str
    daily_slots: List[DailySlots]
