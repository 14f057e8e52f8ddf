from pydantic import BaseModel, EmailStr, Field, field_validator
import re

from hostel.models.users import UserRole

PASSWORD_REGEX = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{12,}$")


class SignupRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=3, max_length=60)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str):
        if not PASSWORD_REGEX.fullmatch(v):
            raise ValueError(
                "Password must be at least 12 characters long and contain "
                "uppercase, lowercase, digit, and special character"
            )
        return v


class CreateUserRequest(SignupRequest):
    role: UserRole

    @field_validator("role", mode="before")
    @classmethod
    def normalise_role(cls, v):
        return v.upper() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
