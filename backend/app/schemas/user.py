"""User schemas used for registration, profile and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from backend.app.models.user import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    name: Optional[str] = None
    role: Optional[UserRole] = None


class UserRead(BaseModel):
    id: int
    email: EmailStr
    name: Optional[str] = None
    role: Optional[UserRole] = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: int
    name: Optional[str] = None
    email: EmailStr

    model_config = ConfigDict(from_attributes=True)


class RoleUpdate(BaseModel):
    role: UserRole


class UserProfileRead(UserRead):
    created_at: Optional[datetime] = None


class UserProfileUpdate(BaseModel):
    name: str = Field(min_length=2, description="Name must be at least 2 characters")


class PasswordUpdate(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
    confirm_password: str = Field(min_length=1)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self
