"""JWT helpers for identifying the acting user."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from components.core.config import get_settings

settings = get_settings()


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None, **claims) -> str:
    """
    Issue a signed token naming `subject` as the acting user.

    Extra claims are copied into the payload as given.
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {**claims, "sub": subject, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Verify a JWT token and return its payload, or None if invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def token_subject(token: str) -> Optional[str]:
    """Return the acting user named by a valid token."""
    payload = verify_token(token)
    if not payload or not payload.get("sub"):
        return None
    return str(payload["sub"])
