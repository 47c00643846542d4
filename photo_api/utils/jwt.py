"""
JWT utility functions for encoding and decoding tokens.

Tokens are verified either with a shared HS256 secret or, when an OIDC
authority is configured, against the authority's published signing keys.
"""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import jwt
import requests
from fastapi import HTTPException, status
from jwt import PyJWKClient, PyJWTError

from photo_api.config import Settings

ALGORITHM = "HS256"
OIDC_ALGORITHMS = ["RS256"]
ACCESS_TOKEN_EXPIRE_MINUTES = 60
_DISCOVERY_TIMEOUT = 10  # seconds


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_secret_key(settings: Settings) -> str:
    if not settings.jwt_secret_key:
        msg = "JWT_SECRET_KEY not set in environment"
        raise RuntimeError(msg)
    return settings.jwt_secret_key


def create_access_token(
    data: dict[str, Any], secret: str, expires_delta: timedelta | None = None
) -> str:
    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire  # PyJWT handles timestamp conversion
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


@lru_cache(maxsize=8)
def get_oidc_keys(authority: str) -> tuple[str, PyJWKClient]:
    """
    Resolve the issuer and jwks_uri from the authority's OpenID discovery
    document. Cached per authority; PyJWKClient caches the keys themselves.
    """
    url = f"{authority.rstrip('/')}/.well-known/openid-configuration"
    resp = requests.get(url, timeout=_DISCOVERY_TIMEOUT)
    resp.raise_for_status()
    document = resp.json()
    if not isinstance(document, dict):
        error_message = f"OpenID configuration at {url} is not a JSON object"
        raise ValueError(error_message)
    jwks_uri = document.get("jwks_uri")
    if not jwks_uri:
        error_message = f"OpenID configuration at {url} has no jwks_uri"
        raise ValueError(error_message)
    return document.get("issuer", authority), PyJWKClient(jwks_uri)


def _decode_oidc_token(token: str, settings: Settings) -> dict[str, Any]:
    issuer, jwk_client = get_oidc_keys(settings.oidc_authority or "")
    signing_key = jwk_client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=OIDC_ALGORITHMS,
        audience=settings.oidc_audience,
        issuer=issuer,
        options={"verify_aud": settings.oidc_audience is not None},
    )


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode a JWT token and return the claims dict. Raises 401 if invalid.
    """
    try:
        if settings.oidc_authority:
            return _decode_oidc_token(token, settings)
        return jwt.decode(
            token,
            get_secret_key(settings),
            algorithms=[ALGORITHM],
            audience=settings.oidc_audience,
            options={"verify_aud": settings.oidc_audience is not None},
        )
    except (PyJWTError, requests.RequestException, RuntimeError, ValueError) as exc:
        raise _unauthorized() from exc
