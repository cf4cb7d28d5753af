from pydantic import AfterValidator, BaseModel, Field, model_validator
from datetime import time
from typing import Annotated, Optional
from uuid import UUID

from app.schemas.facility import FacilityRef

def check_wall_clock(value: time) -> time:
    # Templates are local wall-clock times on a whole-minute grid
    if value.tzinfo is not None:
        raise ValueError("times must not carry a UTC offset")
    if value.second or value.microsecond:
        raise ValueError("times must be whole minutes (HH:MM)")
    return value

WallClockTime = Annotated[time, AfterValidator(check_wall_clock)]

class ScheduleCreate(BaseModel):
    facility: FacilityRef
    day_of_week: int = Field(ge=0, le=6) # 0=Sunday..6=Saturday
    start_time: WallClockTime
    end_time: WallClockTime
    # Falls back to the doctor's default_slot_minutes
    slot_duration_minutes: Optional[int] = Field(default=None, gt=0)
    break_start: Optional[WallClockTime] = None
    break_end: Optional[WallClockTime] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("break_start and break_end must be provided together")
        if self.break_start is not None:
            if self.break_start >= self.break_end:
                raise ValueError("break_start must be before break_end")
            if self.break_start < self.start_time or self.break_end > self.end_time:
                raise ValueError("break must fall within start_time and end_time")
        return self

class ScheduleUpdate(BaseModel):
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[WallClockTime] = None
    end_time: Optional[WallClockTime] = None
    slot_duration_minutes: Optional[int] = Field(default=None, gt=0)
    break_start: Optional[WallClockTime] = None
    break_end: Optional[WallClockTime] = None
    is_active: Optional[bool] = None

class ScheduleResponse(BaseModel):
    id: UUID
    doctor_id: UUID
    facility_type: str
    facility_id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    slot_duration_minutes: int
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    is_active: bool

    class Config:
        from_attributes = True
