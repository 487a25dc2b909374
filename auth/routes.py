"""
Auth API routes — register, login, current user.

Route prefix: /api/auth
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_auth_service, get_current_user
from auth.models import (
    LoginRequest,
    LoginResponse,
    LoginUser,
    LoginUserData,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    UserData,
    UserSummary,
)
from auth.service import AuthService
from database.models import User

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Register a new user."""
    result = await service.register(
        first_name=req.first_name,
        last_name=req.last_name,
        email=req.email,
        password=req.password,
        role=req.role,
    )
    return RegisterResponse(
        token=result.token,
        data=UserData(user=UserSummary.from_user(result.user)),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return LoginResponse(
        token=result.token,
        data=LoginUserData(user=LoginUser.from_user(result.user)),
    )


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)) -> MeResponse:
    """Profile of the bearer of the request token."""
    return MeResponse(data=UserData(user=UserSummary.from_user(user)))
