from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext

from garment_erp.core.settings import get_app_settings

TOKEN_ACCESS = "access"
TOKEN_REFRESH = "refresh"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a login password; accounts without a stored hash never match."""
    if not hashed_password:
        return False
    return _pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    return _pwd_context.hash(password)


def _encode(claims: Dict[str, Any], lifetime: timedelta, token_type: str) -> str:
    settings = get_app_settings()
    now = datetime.now(tz=timezone.utc)
    body = dict(claims, exp=now + lifetime, iat=now, type=token_type)
    return jwt.encode(body, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def create_access_token(subject: str, roles: Optional[Iterable[str]] = None) -> str:
    """Short-lived bearer token carrying the user id and role names."""
    minutes = get_app_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode({"sub": subject, "roles": sorted(roles or [])}, timedelta(minutes=minutes), TOKEN_ACCESS)


# PUBLIC_INTERFACE
def create_refresh_token(subject: str) -> str:
    """Long-lived token accepted only by the refresh endpoint."""
    minutes = get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES
    return _encode({"sub": subject}, timedelta(minutes=minutes), TOKEN_REFRESH)


# PUBLIC_INTERFACE
def issue_token_pair(subject: str, roles: Optional[Iterable[str]] = None) -> Tuple[str, str]:
    """(access, refresh) tokens for a signed-in user."""
    return create_access_token(subject, roles), create_refresh_token(subject)


# PUBLIC_INTERFACE
def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Validate signature and expiry and return the claims.

    With expected_type set, a token of another type is rejected the same way
    as a forged one. Raises jose.JWTError.
    """
    settings = get_app_settings()
    claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if expected_type is not None and claims.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    if not claims.get("sub"):
        raise JWTError("Token has no subject")
    return claims
