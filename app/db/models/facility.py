from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from sqlalchemy import DateTime
from app.core.utils import utcnow
from uuid import UUID, uuid4

class Facility(SQLModel, table=True):
    __tablename__ = "facilities"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    facility_type: str = Field(index=True) # clinic, hospital
    city: str = Field(index=True)
    address: Optional[str] = None
    phone: Optional[str] = None
    timezone: str = Field(default="UTC")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
