"""
Authentication and Authorization Module

Provides the bearer-token dependency used by every college endpoint.
Tokens are issued by the login service; this module only validates them
and extracts the college user's claims.

Role strings are normalised to upper case here so the rest of the code
only ever compares ``UserRole`` members.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fest_api.core.security import decode_token
from fest_api.modules.users.models import UserRole

logger = logging.getLogger(__name__)

# Missing headers are reported through AuthenticationError, not FastAPI's 403
security = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token issued at college login",
)

COLLEGE_ROLES = frozenset({UserRole.PRINCIPAL, UserRole.MANAGER})

TOKEN_EXPIRED_MESSAGE = "Token expired. Redirecting to login..."


class AuthenticationError(Exception):
    """Missing, malformed or expired credential. The client should log in again."""

    def __init__(self, message: str = TOKEN_EXPIRED_MESSAGE):
        self.message = message
        super().__init__(message)


class AuthorizationError(Exception):
    """Valid credential with a role that may not use college endpoints."""

    def __init__(self, message: str = "Unauthorized: Principal or Manager role required"):
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class CollegeUser:
    """
    Represents an authenticated principal or team manager.

    Attributes:
        user_id: The user's id
        college_id: The college the user acts for
        role: Normalised role (PRINCIPAL or MANAGER)
    """

    user_id: int
    college_id: int
    role: UserRole

    @property
    def is_principal(self) -> bool:
        return self.role == UserRole.PRINCIPAL

    def __str__(self) -> str:
        return f"CollegeUser(id={self.user_id}, college={self.college_id}, role={self.role.value})"


def normalize_role(raw_role: object) -> UserRole | None:
    """Map a role claim to ``UserRole`` regardless of its casing."""
    if not isinstance(raw_role, str):
        return None
    try:
        return UserRole(raw_role.strip().upper())
    except ValueError:
        return None


def authenticate_token(token: str) -> CollegeUser:
    """
    Validate a JWT and build the college user from its claims.

    Args:
        token: Raw JWT from the Authorization header

    Returns:
        CollegeUser for a principal or manager

    Raises:
        AuthenticationError: If the token is invalid, expired or lacks ids
        AuthorizationError: If the role is not PRINCIPAL or MANAGER
    """
    payload = decode_token(token)
    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise AuthenticationError()

    try:
        user_id = int(payload.get("user_id") or payload["sub"])
        college_id = int(payload["college_id"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise AuthenticationError() from e

    role = normalize_role(payload.get("role"))
    if role not in COLLEGE_ROLES:
        logger.warning(
            f"Access denied: user {user_id} has role '{payload.get('role')}', "
            "but PRINCIPAL or MANAGER is required"
        )
        raise AuthorizationError()

    return CollegeUser(user_id=user_id, college_id=college_id, role=role)


async def get_current_college_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CollegeUser:
    """
    FastAPI dependency that validates the bearer token.

    Usage:
        @router.post("/endpoint")
        async def endpoint(auth: CollegeUser = Depends(get_current_college_user)):
            ...

    Raises:
        AuthenticationError: If the header is missing or the token is invalid
        AuthorizationError: If the user is not a principal or manager
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()

    user = authenticate_token(credentials.credentials)
    logger.debug(f"Authenticated {user}")
    return user


__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "CollegeUser",
    "authenticate_token",
    "get_current_college_user",
    "normalize_role",
]
