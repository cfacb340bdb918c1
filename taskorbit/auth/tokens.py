"""
JWT access tokens.

Tokens are HS256 signed and carry the user id in "sub" along with the
email and role at issue time.
"""
import logging
from datetime import datetime, timedelta, UTC
from typing import Any, Dict

import jwt

from taskorbit.config import Settings
from taskorbit.exceptions import AuthenticationError
from taskorbit.models.user_models import User

logger = logging.getLogger(__name__)

TOKEN_TYPE = "access"


def create_access_token(user: User, settings: Settings) -> str:
    """
    Create a signed access token for a user.

    Expires after settings.jwt_expires_minutes (seven days by default).
    """
    now = datetime.now(UTC)
    payload = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
        "type": TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Decode and validate an access token.

    Returns:
        Decoded payload

    Raises:
        AuthenticationError: If the token is expired, malformed or has the wrong signature
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected token: {e}")
        raise AuthenticationError("Invalid token")

    if payload.get("type") != TOKEN_TYPE or not payload.get("sub"):
        raise AuthenticationError("Invalid token")
    return payload
