from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

class DoctorBase(BaseModel):
    name: str
    user_id: Optional[UUID] = None
    specialty: Optional[str] = None
    medical_degree: Optional[str] = None
    registration_number: Optional[str] = None
    default_slot_minutes: int = Field(default=15, gt=0)

class DoctorCreate(DoctorBase):
    pass

class DoctorResponse(DoctorBase):
    id: UUID
    created_at: datetime

    class Config:
        from_attributes = True
