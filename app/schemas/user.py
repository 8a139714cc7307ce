# app/schemas/user.py
from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import Field
from app.schemas.auth import CamelModel


class MembershipOut(CamelModel):
    client_id: str
    client_name: Optional[str] = None
    role: str

class ProfileOut(CamelModel):
    id: str
    tenant_id: str
    email: str
    name: str
    role: str
    created_at: Optional[datetime] = None
    memberships: List[MembershipOut] = []

class UpdateMeRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=8)
