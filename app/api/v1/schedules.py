from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import require_roles
from app.db.session import get_session
from app.schemas.auth import Principal
from app.schemas.schedule import ScheduleResponse, ScheduleUpdate
from app.services.schedule_service import ScheduleService

router = APIRouter()

async def get_schedule_service(session: AsyncSession = Depends(get_session)) -> ScheduleService:
    return ScheduleService(session)

@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def read_schedule(
    schedule_id: UUID,
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.get_schedule(schedule_id)

@router.patch("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: UUID,
    schedule_update: ScheduleUpdate,
    principal: Principal = Depends(require_roles("doctor", "admin")),
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.update_schedule(schedule_id, schedule_update, principal)

@router.delete("/{schedule_id}")
async def deactivate_schedule(
    schedule_id: UUID,
    principal: Principal = Depends(require_roles("doctor", "admin")),
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.deactivate_schedule(schedule_id, principal)
