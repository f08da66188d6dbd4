"""
Authentication and user routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core import config
from taskgate.core.database.engine import get_db
from taskgate.core.errors import Unauthenticated
from taskgate.features.permissions.identity import Actor
from taskgate.features.permissions.rbac import Role
from taskgate.features.users.dependencies import get_current_actor, limiter
from taskgate.features.users.schemas import (
    LoginRequest,
    SignupOrganization,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    UserResponse,
)
from taskgate.features.users.service import AuthService


auth_router = APIRouter(tags=["auth"])
router = APIRouter(tags=["users"])


@auth_router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(config.AUTH_RATE_LIMIT)
async def signup(
    request: Request,
    signup_data: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Register a new account. The response carries a session token."""
    return await AuthService(db).signup(signup_data)


@auth_router.post("/login", response_model=TokenResponse)
@limiter.limit(config.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Exchange email and password for a session token."""
    service = AuthService(db)
    user = await service.validate_user(login_data.email, login_data.password)
    if user is None:
        raise Unauthenticated("Invalid email or password")
    return TokenResponse(access_token=await service.login(user))


@auth_router.get("/signup-organizations", response_model=list[SignupOrganization])
async def list_signup_organizations(
    db: Annotated[AsyncSession, Depends(get_db)],
    role: Role | None = None
):
    """Organizations available to pick at signup for the given role."""
    return await AuthService(db).organizations_for_signup(role)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    actor: Annotated[Actor, Depends(get_current_actor)]
):
    """Get the current authenticated user's identity."""
    return UserResponse(
        id=actor.id,
        email=actor.email,
        role=actor.role,
        organization_id=actor.organization_id,
    )
