# app/schemas/auth.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)

class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)

class TokenPair(CamelModel):
    access_token: str
    refresh_token: str

class Message(BaseModel):
    message: str

class AccessClaims(BaseModel):
    """Identity carried by a verified access token."""
    id: str
    email: str
    tenant_id: str
