"""
placement_api/core/security.py

Purpose: Caller authentication and role checks

- Bearer JWT verification (python-jose)
- FastAPI dependency resolving the caller identity
- Declarative role requirement applied at router level
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from placement_api.core.config import settings
from placement_api.core.exceptions import AuthenticationError, PermissionDeniedError
from placement_api.core.logging import get_logger
from placement_api.models.user import Role
from placement_api.utils.validation_utils import is_valid_object_id

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: Role


def create_access_token(user_id: str, role: Role, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token for a user."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload = {"sub": user_id, "role": Role(role).value, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> CurrentUser:
    """
    Verifies a token and extracts the caller identity.

    Raises:
        AuthenticationError: signature, expiry or claims are invalid
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError("Invalid or expired token") from e

    user_id = payload.get("sub")
    if not user_id or not is_valid_object_id(user_id):
        raise AuthenticationError("Invalid or expired token")

    try:
        role = Role(payload.get("role"))
    except ValueError as e:
        raise AuthenticationError("Invalid or expired token") from e

    return CurrentUser(id=user_id, role=role)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: CurrentUser = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")
    return decode_token(credentials.credentials)


def require_roles(*roles: Role):
    """
    Builds a dependency that admits only callers holding one of ``roles``.

    Usage:
        router = APIRouter(dependencies=[Depends(require_roles(Role.ADMIN))])
    """
    allowed = frozenset(roles)

    async def check_role(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                "Role check failed",
                extra={"user_id": user.id, "role": user.role.value}
            )
            raise PermissionDeniedError(
                f"{', '.join(sorted(r.value for r in allowed))} access required"
            )
        return user

    return check_role
