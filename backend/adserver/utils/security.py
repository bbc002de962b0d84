import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings

# Bearer scheme - auto_error off so a missing header gives 401, not 403
bearer_scheme = HTTPBearer(auto_error=False)


def require_api_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """Guard for admin routes: static bearer token from API_TOKEN"""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not settings.API_TOKEN or credentials is None:
        raise unauthorized
    if not secrets.compare_digest(credentials.credentials.encode(), settings.API_TOKEN.encode()):
        raise unauthorized
    return credentials.credentials
