from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.db.models import Doctor
from app.db.session import store_call
from app.schemas.auth import Principal
from app.schemas.doctor import DoctorCreate

class DoctorService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_doctor(self, doctor_data: DoctorCreate) -> Doctor:
        doctor = Doctor(**doctor_data.model_dump())
        self.session.add(doctor)
        await store_call(self.session.commit(), "create_doctor")
        await store_call(self.session.refresh(doctor))
        return doctor

    async def get_doctors(self, skip: int = 0, limit: int = 100) -> List[Doctor]:
        query = select(Doctor).order_by(Doctor.name).offset(skip).limit(limit)
        result = await store_call(self.session.execute(query), "list_doctors")
        return result.scalars().all()

    async def get_doctor(self, doctor_id: UUID) -> Doctor:
        doctor = await store_call(self.session.get(Doctor, doctor_id), "get_doctor")
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return doctor

    async def get_doctor_for_user(self, user_id: UUID) -> Optional[Doctor]:
        query = select(Doctor).where(Doctor.user_id == user_id)
        result = await store_call(self.session.execute(query), "get_doctor_for_user")
        return result.scalars().first()

    def ensure_can_manage(self, doctor: Doctor, principal: Optional[Principal]) -> None:
        """Doctors may only act on their own directory entry; admins on any."""
        if principal is None or principal.role == "admin":
            return
        if principal.role != "doctor" or doctor.user_id != principal.subject_id:
            raise HTTPException(status_code=403, detail="Not authorized to manage this doctor")
