from datetime import datetime

from pydantic import EmailStr, Field

from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)


class UserLoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserRead(CamelModel):
    id: int
    email: EmailStr
    name: str
    role: str
    created_at: datetime


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
