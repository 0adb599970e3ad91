"""Acting user resolution from bearer tokens."""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from components.core.security import token_subject

# Tokens are issued upstream; this service only reads them
bearer_scheme = HTTPBearer(auto_error=False, description="JWT whose subject is the acting user")


async def get_acting_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Return the token subject as the acting user identifier.

    Only identifies the caller for kardex details; permissions are decided
    upstream.
    """
    acting_user = token_subject(credentials.credentials) if credentials else None
    if acting_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return acting_user
