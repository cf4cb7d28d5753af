from sqlmodel import SQLModel
from .facility import Facility
from .doctor import Doctor
from .schedule import Schedule
from .booking import Booking
from .audit_log import AuditLog

__all__ = [
    "SQLModel",
    "Facility",
    "Doctor",
    "Schedule",
    "Booking",
    "AuditLog",
]
