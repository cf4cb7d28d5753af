from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import time
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .doctor import Doctor

class Schedule(SQLModel, table=True):
    """Recurring weekly availability of a doctor at one facility."""
    __tablename__ = "schedules"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    doctor_id: UUID = Field(foreign_key="doctors.id", index=True)
    facility_type: str
    facility_id: UUID = Field(foreign_key="facilities.id", index=True)
    day_of_week: int # 0=Sunday..6=Saturday
    start_time: time
    end_time: time
    slot_duration_minutes: int
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    is_active: bool = Field(default=True)

    doctor: Optional["Doctor"] = Relationship(back_populates="schedules")
