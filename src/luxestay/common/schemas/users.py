from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from luxestay.common.models.users import UserRole
import re

PASSWORD_REGEX = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{12,}$")


class SignupRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=100)
    password: str
    phone_number: Optional[str] = Field(default=None, min_length=10, max_length=10)
    role: Optional[UserRole] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str):
        if not PASSWORD_REGEX.fullmatch(v):
            raise ValueError(
                "Password must be at least 12 characters long and contain "
                "uppercase, lowercase, digit, and special character"
            )
        return v

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: Optional[str]):
        if v is not None and not v.isdigit():
            raise ValueError("Invalid phone number")
        return v

    @field_validator("role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or None
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
