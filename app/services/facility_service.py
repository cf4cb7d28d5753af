from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from uuid import UUID
from typing import List, Optional

from app.db.models import Facility
from app.db.session import store_call
from app.schemas.facility import FacilityCreate, FacilityRef
from fastapi import HTTPException

class FacilityService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_facility(self, facility_data: FacilityCreate) -> Facility:
        facility = Facility(**facility_data.model_dump())
        self.session.add(facility)
        await store_call(self.session.commit(), "create_facility")
        await store_call(self.session.refresh(facility))
        return facility

    async def get_facilities(
        self,
        city: Optional[str] = None,
        facility_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Facility]:
        query = select(Facility)
        if city:
            query = query.where(Facility.city == city)
        if facility_type:
            query = query.where(Facility.facility_type == facility_type)
        query = query.order_by(Facility.name).offset(skip).limit(limit)
        result = await store_call(self.session.execute(query), "list_facilities")
        return result.scalars().all()

    async def get_facility(self, facility_id: UUID) -> Facility:
        facility = await store_call(self.session.get(Facility, facility_id), "get_facility")
        if not facility:
            raise HTTPException(status_code=404, detail="Facility not found")
        return facility

    async def resolve_ref(self, ref: FacilityRef) -> Facility:
        facility = await self.get_facility(ref.id)
        if facility.facility_type != ref.type:
            raise HTTPException(
                status_code=400,
                detail=f"Facility {ref.id} is a {facility.facility_type}, not a {ref.type}"
            )
        return facility
