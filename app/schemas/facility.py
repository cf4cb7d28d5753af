from pydantic import BaseModel, field_validator
from typing import Optional, Literal
from uuid import UUID
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

FacilityType = Literal["clinic", "hospital"]

class FacilityBase(BaseModel):
    name: str
    facility_type: FacilityType
    city: str
    address: Optional[str] = None
    phone: Optional[str] = None
    timezone: str = "UTC"

class FacilityCreate(FacilityBase):
    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {value}") from exc
        return value

class FacilityResponse(FacilityBase):
    id: UUID
    created_at: datetime

    class Config:
        from_attributes = True

class FacilityRef(BaseModel):
    type: FacilityType
    id: UUID
