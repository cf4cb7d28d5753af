from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import require_roles
from app.db.session import get_session
from app.schemas.auth import Principal
from app.schemas.facility import FacilityCreate, FacilityResponse
from app.services.facility_service import FacilityService

router = APIRouter()

@router.post("/", response_model=FacilityResponse, status_code=201)
async def create_facility(
    facility_data: FacilityCreate,
    principal: Principal = Depends(require_roles("admin")),
    session: AsyncSession = Depends(get_session)
):
    service = FacilityService(session)
    return await service.create_facility(facility_data)

@router.get("/", response_model=List[FacilityResponse])
async def read_facilities(
    city: Optional[str] = None,
    facility_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session)
):
    service = FacilityService(session)
    return await service.get_facilities(city, facility_type, skip, limit)

@router.get("/{facility_id}", response_model=FacilityResponse)
async def read_facility(facility_id: UUID, session: AsyncSession = Depends(get_session)):
    service = FacilityService(session)
    return await service.get_facility(facility_id)
