from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import DateTime
from app.core.utils import utcnow
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .schedule import Schedule

class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    user_id: Optional[UUID] = Field(default=None, unique=True, index=True) # account that acts as this doctor
    specialty: Optional[str] = None
    medical_degree: Optional[str] = None
    registration_number: Optional[str] = None
    default_slot_minutes: int = Field(default=15)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    schedules: List["Schedule"] = Relationship(back_populates="doctor")
