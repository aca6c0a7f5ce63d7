"""Auth Pydantic schemas."""


import uuid
from typing import Optional

from pydantic import BaseModel


class MeResponse(BaseModel):
    user_id: uuid.UUID
    role: str
    email: Optional[str] = None
    full_name: str = ""
    company_id: Optional[uuid.UUID] = None
    company_name: Optional[str] = None
    owner_id: Optional[uuid.UUID] = None
    supervisor_id: Optional[uuid.UUID] = None
    permissions: list[str] = []
