from pydantic import BaseModel
from typing import Literal
from uuid import UUID

Role = Literal["patient", "doctor", "admin"]

class Principal(BaseModel):
    """Caller identity decoded from the bearer token of one request."""
    subject_id: UUID
    role: Role
