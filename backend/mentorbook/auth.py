# backend/mentorbook/auth.py
"""
Access token handling.

Tokens are issued by the platform's auth service; this module only decodes
them (and issues them for tests and local tooling). Claims: ``sub`` is the
user id, ``role`` one of RoleName.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
import jwt
from jwt import PyJWTError

from .core.config import settings
from .core.enums import RoleName
from .principal import UserPrincipal

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

ACCESS_TOKEN_EXPIRE_MINUTES = 60


def decode_access_token(token: str) -> Dict[str, Any]:
    payload_raw = jwt.decode(
        token,
        settings.secret_key.get_secret_value(),
        algorithms=[settings.algorithm],
        options={"verify_aud": False},
    )
    return cast(Dict[str, Any], payload_raw)


def create_access_token(
    user_id: str, role: RoleName, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed access token for ``user_id`` with ``role``."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": user_id, "role": role.value, "exp": expire}
    return cast(
        str,
        jwt.encode(to_encode, settings.secret_key.get_secret_value(), algorithm=settings.algorithm),
    )


def get_current_principal(
    token: Optional[str] = Depends(oauth2_scheme_optional),
) -> UserPrincipal:
    """
    Dependency resolving the authenticated caller from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    invalid_credentials = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.error(f"JWT validation error: {str(e)}")
        raise invalid_credentials

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        logger.warning("Token payload missing 'sub' field")
        raise invalid_credentials
    try:
        role = RoleName(payload.get("role"))
    except ValueError:
        logger.warning("Token payload has unknown role %r", payload.get("role"))
        raise invalid_credentials

    return UserPrincipal(user_id=user_id, role=role)
