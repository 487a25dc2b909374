"""
Request / response schemas for the auth endpoints.

Wire names are camelCase (``firstName``, ``_id``); Python attributes are
snake_case and mapped through aliases.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from database.models import User


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


DEFAULT_ROLE = Role.USER.value


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", max_length=128)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=128)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=str(user.user_id),
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            email=user.email,
            role=user.role,
        )


class LoginUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "LoginUser":
        return cls(id=str(user.user_id), email=user.email, role=user.role)


class UserData(BaseModel):
    user: UserSummary


class LoginUserData(BaseModel):
    user: LoginUser


class RegisterResponse(BaseModel):
    status: str = "success"
    token: str
    data: UserData


class LoginResponse(BaseModel):
    status: str = "success"
    token: str
    data: LoginUserData


class MeResponse(BaseModel):
    status: str = "success"
    data: UserData


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful register or login."""

    token: str
    user: User
