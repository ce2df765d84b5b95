from datetime import datetime

from pydantic import BaseModel, field_validator

from .shared.validators import validate_email, validate_password, validate_required_text


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return validate_required_text(v, "Name")

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserProfileResponse(BaseModel):
    id: int
    name: str
    email: str
    createdAt: datetime

    @classmethod
    def from_model(cls, user) -> "UserProfileResponse":
        return cls(id=user.id, name=user.name, email=user.email, createdAt=user.created_at)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse
