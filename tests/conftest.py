"""Shared fixtures: a file-backed SQLite database per test and an API client bound to it."""

import uuid
from datetime import date, time, timedelta
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.security import create_access_token
from app.db.models import Doctor, Facility, Schedule
from app.db.session import get_session
from app.main import app
from app.schemas.auth import Principal
from app.services.slot_generator import day_of_week

MONDAY = 1

PATIENT_ID = uuid.UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
OTHER_PATIENT_ID = uuid.UUID("cccccccc-cccc-cccc-cccc-cccccccccccc")
DOCTOR_USER_ID = uuid.UUID("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb")
ADMIN_ID = uuid.UUID("dddddddd-dddd-dddd-dddd-dddddddddddd")
OTHER_DOCTOR_USER_ID = uuid.UUID("eeeeeeee-eeee-eeee-eeee-eeeeeeeeeeee")


def next_weekday(dow: int, weeks_ahead: int = 0) -> date:
    """First future date (after today) falling on ``dow`` (0=Sunday)."""
    current = date.today() + timedelta(days=1)
    while day_of_week(current) != dow:
        current += timedelta(days=1)
    return current + timedelta(weeks=weeks_ahead)


def auth_headers(subject_id: uuid.UUID, role: str) -> dict:
    token = create_access_token({"sub": str(subject_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


def make_principal(subject_id: uuid.UUID, role: str) -> Principal:
    return Principal(subject_id=subject_id, role=role)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine(tmp_path):
    # A file database gives every session its own connection, like a real server
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'careslot.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as sess:
        yield sess


@pytest_asyncio.fixture
async def seed(session: AsyncSession):
    """A clinic, a hospital, one doctor linked to DOCTOR_USER_ID, and a Monday 09:00-10:00 template of 20 minute slots."""
    clinic = Facility(name="Lakeside Clinic", facility_type="clinic", city="Kochi")
    hospital = Facility(name="City Hospital", facility_type="hospital", city="Kochi")
    doctor = Doctor(
        name="Dr. Meera Nair", user_id=DOCTOR_USER_ID, specialty="Cardiology", default_slot_minutes=20
    )
    session.add_all([clinic, hospital, doctor])
    await session.commit()

    template = Schedule(
        doctor_id=doctor.id,
        facility_type="clinic",
        facility_id=clinic.id,
        day_of_week=MONDAY,
        start_time=time(9, 0),
        end_time=time(10, 0),
        slot_duration_minutes=20,
    )
    session.add(template)
    await session.commit()

    return {
        "clinic": clinic,
        "hospital": hospital,
        "doctor": doctor,
        "template": template,
        "monday": next_weekday(MONDAY),
    }


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(session_factory, seed):
    async def _override_get_session():
        async with session_factory() as sess:
            try:
                yield sess
            except Exception:
                await sess.rollback()
                raise

    app.dependency_overrides[get_session] = _override_get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def patient_headers():
    return auth_headers(PATIENT_ID, "patient")


@pytest.fixture
def doctor_headers():
    return auth_headers(DOCTOR_USER_ID, "doctor")


@pytest.fixture
def other_doctor_headers():
    return auth_headers(OTHER_DOCTOR_USER_ID, "doctor")


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, "admin")


def booking_payload(seed: dict, start_time: str = "09:20", on_date: Optional[date] = None) -> dict:
    return {
        "doctor_id": str(seed["doctor"].id),
        "facility_ref": {"type": "clinic", "id": str(seed["clinic"].id)},
        "appointment_date": (on_date or seed["monday"]).isoformat(),
        "start_time": start_time,
        "reason": "Chest pain follow-up",
    }
