from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from photo_api.config import Settings, get_settings
from photo_api.handler import PhotoHandler
from photo_api.models import Principal
from photo_api.storage import PhotoStorage, get_storage_backend
from photo_api.utils.jwt import decode_access_token

security = HTTPBearer(auto_error=False)


def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Principal | None:
    """
    Dependency to get the calling principal from a JWT bearer token.
    Returns None when the authorization gate is disabled; otherwise raises 401
    if the token is missing, invalid or lacks the principal claim.
    """
    if not settings.auth_enabled:
        return None
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    claims = decode_access_token(credentials.credentials, settings)
    identity = claims.get(settings.principal_claim)
    if not isinstance(identity, str) or not identity:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Principal(name=identity)


@lru_cache
def _storage_for(settings: Settings) -> PhotoStorage:
    return get_storage_backend(settings)


def get_storage(settings: Annotated[Settings, Depends(get_settings)]) -> PhotoStorage:
    """
    Dependency providing the storage backend, shared for a given Settings.
    """
    return _storage_for(settings)


def get_photo_handler(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[PhotoStorage, Depends(get_storage)],
) -> PhotoHandler:
    return PhotoHandler(settings=settings, storage=storage)
