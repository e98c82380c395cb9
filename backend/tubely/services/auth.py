"""Bearer JWT handling for authenticated endpoints."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from jose import JWTError, jwt

from tubely.errors import AuthFailure

ALGORITHM = "HS256"
ISSUER = "tubely-access"


def create_access_token(user_id: uuid.UUID, secret: str, expires_delta: timedelta) -> str:
    """Create a signed access token for a user.

    Args:
        user_id: User UUID, stored in the "sub" claim
        secret: HMAC signing secret
        expires_delta: Token lifetime

    Returns:
        str: The encoded token
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iss": ISSUER,
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def validate_access_token(token: str, secret: str) -> uuid.UUID:
    """Verify a token and return the user id it was issued to."""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], issuer=ISSUER)
    except JWTError as e:
        raise AuthFailure("Couldn't validate JWT", details={"reason": str(e)})

    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthFailure("JWT subject is not a user id")


def get_bearer_token(headers: Mapping[str, str]) -> str:
    """Extract the token from an "Authorization: Bearer <token>" header."""
    authorization: Optional[str] = headers.get("authorization") or headers.get("Authorization")
    if not authorization:
        raise AuthFailure("Couldn't find JWT")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthFailure("Malformed authorization header")
    return token
