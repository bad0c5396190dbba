from __future__ import annotations

from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import get_current_active_user
from garment_erp.core.security import TOKEN_REFRESH, decode_token, issue_token_pair
from garment_erp.db.models.security import USER_STATUS_APPROVED, USER_STATUS_REJECTED, User
from garment_erp.db.session import get_async_session
from garment_erp.repositories.security import SecurityRepository
from garment_erp.schemas.auth import RefreshRequest, RegisterRequest, TokenPair, UserRead
from garment_erp.schemas.common import MessageResponse
from garment_erp.schemas.navigation import SidebarNodeRead
from garment_erp.services.media import discard_file, store_upload
from garment_erp.services.navigation import NavigationService
from garment_erp.services.users import UserAdminService

router = APIRouter(prefix="/auth", tags=["Auth"])


async def _issue_tokens(repo: SecurityRepository, user: User) -> TokenPair:
    roles: List[str] = await repo.role_names_for_user(user.id)
    access, refresh = issue_token_pair(str(user.id), roles)
    return TokenPair(access_token=access, refresh_token=refresh)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description=(
        "Create an account that waits for admin approval. The very first account "
        "is approved immediately and given the 'admin' role."
    ),
)
async def register_user(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    """Register a new user."""
    svc = UserAdminService(session)
    user = await svc.register(payload)
    return await svc.to_read(user)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description="Authenticate using OAuth2 password form and receive access/refresh tokens.",
)
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Authenticate user and issue tokens. Pending and rejected accounts get 403."""
    svc = UserAdminService(session)
    user = await svc.authenticate(form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    if user.status == USER_STATUS_REJECTED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account request was rejected")
    if user.status != USER_STATUS_APPROVED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account pending approval")
    return await _issue_tokens(svc.repo, user)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new access token from a valid refresh token.",
)
async def refresh_token(
    payload: RefreshRequest,
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Validate refresh token and issue a new access token pair."""
    try:
        claims: Dict[str, Any] = decode_token(payload.refresh_token, expected_type=TOKEN_REFRESH)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    repo = SecurityRepository(session)
    try:
        user = await repo.get_user_by_id(UUID(str(claims.get("sub"))))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if not user or not user.is_active or user.status != USER_STATUS_APPROVED:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return await _issue_tokens(repo, user)


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Stateless logout. Clients should discard tokens. No server state maintained.",
)
async def logout() -> MessageResponse:
    """Acknowledge logout in stateless JWT systems."""
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the current authenticated user, their roles and approval status.",
)
async def read_current_user(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    return await UserAdminService(session).to_read(user)


# PUBLIC_INTERFACE
@router.get(
    "/me/sidebar",
    response_model=List[SidebarNodeRead],
    summary="Current user's sidebar",
    description="Effective sidebar tree from the user's role permissions or personal overrides.",
)
async def read_my_sidebar(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> List[SidebarNodeRead]:
    return await NavigationService(session).sidebar_for(user)


# PUBLIC_INTERFACE
@router.put(
    "/me/avatar",
    response_model=UserRead,
    summary="Upload profile picture",
    description="Store an image as the current user's avatar; the previous image is removed.",
)
async def upload_my_avatar(
    file: UploadFile = File(..., description="Image file"),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    stored = await store_upload(file, "avatars")
    previous = await svc.set_avatar(user, stored.url)
    discard_file(previous)
    return await svc.to_read(user)
