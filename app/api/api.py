from fastapi import APIRouter
from app.api.v1 import availability, bookings, doctors, facilities, schedules

api_router = APIRouter()

api_router.include_router(facilities.router, prefix="/facilities", tags=["facilities"])
api_router.include_router(doctors.router, prefix="/doctors", tags=["doctors"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["schedules"])
api_router.include_router(availability.router, prefix="/availability", tags=["availability"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
