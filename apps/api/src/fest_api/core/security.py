"""
Security Utilities

JWT encoding and decoding with python-jose. Token issuance belongs to the
login service; ``create_access_token`` is kept for seeding and tests.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from fest_api.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(
    subject: str | int,
    additional_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed access token.

    Args:
        subject: User identifier stored in ``sub`` (and ``user_id``)
        additional_claims: Extra claims such as ``college_id`` and ``role``
        expires_delta: Token lifetime, defaults to the configured expiry

    Returns:
        Encoded JWT string
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict[str, Any] = {
        "sub": str(subject),
        "user_id": subject,
        "exp": expire,
        "type": "access",
    }
    if additional_claims:
        payload.update(additional_claims)

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and verify a JWT.

    Signature, algorithm and expiry are all checked by python-jose.

    Returns:
        The claims dict, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None
