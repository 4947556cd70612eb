from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .models import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)
    role: UserRole = UserRole.CUSTOMER
    phone: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    email: Optional[str]
    phone: Optional[str]
    name: str
    role: str
    is_active: bool

    class Config:
        from_attributes = True


class OtpSendRequest(BaseModel):
    phone: str = Field(min_length=6)


class OtpSendResponse(BaseModel):
    success: bool = True
    expires_in: int


class OtpVerifyRequest(BaseModel):
    phone: str = Field(min_length=6)
    code: str = Field(min_length=6, max_length=6)
    name: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
