"""Auth API router: register, login, refresh, me."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from globalstay.api.deps import get_current_active_user, get_repositories
from globalstay.auth.jwt import REFRESH, TokenError, create_token_pair, subject_from_token
from globalstay.auth.passwords import hash_password, verify_password
from globalstay.models.user import User
from globalstay.repositories import Repositories, eq
from globalstay.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from globalstay.services.listing_service import user_is_host

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**create_token_pair(str(user.id))),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, repos: Repositories = Depends(get_repositories)) -> AuthResponse:
    """Register a new user with email and password."""
    email = body.email.lower()
    if await repos.users.exists(eq("email", email)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = await repos.users.save(
        User(email=email, username=body.username, hashed_password=hash_password(body.password))
    )
    logger.info("Registered user %s", user.id)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, repos: Repositories = Depends(get_repositories)) -> AuthResponse:
    """Authenticate with email and password."""
    user = await repos.users.find_one(eq("email", body.email.lower()))

    if user is None or user.hashed_password is None or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")

    return _auth_response(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, repos: Repositories = Depends(get_repositories)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    try:
        user_id = subject_from_token(body.refresh_token, REFRESH)
    except TokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    user = await repos.users.find_by_id(user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(**create_token_pair(str(user.id)))


@router.get("/me", response_model=MeResponse)
async def me(
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> MeResponse:
    """Return the current user's profile and whether they host a listing."""
    profile = UserResponse.model_validate(current_user).model_dump()
    return MeResponse(**profile, is_host=await user_is_host(repos, current_user))
