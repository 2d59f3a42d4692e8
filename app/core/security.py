"""
Bearer token helpers
"""
from datetime import datetime, timedelta, timezone
from typing import Mapping
from uuid import UUID
from jose import jwt, JWTError

TOKEN_ISSUER = "tubely-access"
ALGORITHM = "HS256"


class AuthError(Exception):
    pass


def get_bearer_token(headers: Mapping[str, str]) -> str:
    auth_header = headers.get("Authorization")
    if not auth_header:
        raise AuthError("no auth header included in request")
    parts = auth_header.split()
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthError("malformed authorization header")
    return parts[1]


def make_jwt(user_id: UUID, secret: str, expires_in: timedelta, algorithm: str = ALGORITHM) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": now + expires_in,
        "sub": str(user_id),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def validate_jwt(token: str, secret: str, algorithm: str = ALGORITHM) -> UUID:
    """
    Validate a signed access token
    Returns: the user id stored in the subject claim
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm], issuer=TOKEN_ISSUER)
    except JWTError as e:
        raise AuthError(f"invalid token: {e}") from e

    subject = claims.get("sub")
    if not subject:
        raise AuthError("token has no subject")
    try:
        return UUID(subject)
    except ValueError as e:
        raise AuthError("invalid user id in token") from e
