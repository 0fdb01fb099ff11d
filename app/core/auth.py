"""
JWT authentication + tenant resolution.

Validates Bearer tokens against the identity provider's JWKS endpoint
and yields the tenant the request acts for. Disabled in development
via AUTH_ENABLED=false.
"""
from __future__ import annotations

from typing import Optional

import httpx
import structlog
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import Settings, get_settings

logger = structlog.get_logger()
security = HTTPBearer(auto_error=False)

_jwks_cache: Optional[dict] = None

DEV_CLAIMS = {"sub": "dev-user", "organization_id": "dev-tenant"}


async def _fetch_jwks(issuer_url: str) -> dict:
    global _jwks_cache
    if _jwks_cache:
        return _jwks_cache
    async with httpx.AsyncClient() as client:
        resp = await client.get(f"{issuer_url}/protocol/openid-connect/certs")
        resp.raise_for_status()
        _jwks_cache = resp.json()
        return _jwks_cache


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    FastAPI dependency: extracts and validates the JWT.
    Returns the decoded token payload (claims).
    """
    if not settings.auth_enabled:
        return dict(DEV_CLAIMS)

    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    token = credentials.credentials
    try:
        jwks = await _fetch_jwks(settings.auth_issuer_url)
        unverified_header = jwt.get_unverified_header(token)
        key = next(
            (k for k in jwks.get("keys", []) if k["kid"] == unverified_header.get("kid")),
            None,
        )
        if not key:
            raise HTTPException(status_code=401, detail="Invalid token signing key")

        payload = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer_url,
        )
        return payload

    except JWTError as e:
        logger.warning("jwt_validation_failed", error=str(e))
        raise HTTPException(status_code=401, detail=f"Token validation failed: {e}")


def get_tenant_id(
    claims: dict = Depends(verify_token),
    settings: Settings = Depends(get_settings),
) -> str:
    """Tenant claim if present, otherwise the subject (single-user tenants)."""
    tenant_id = claims.get(settings.auth_tenant_claim) or claims.get("sub")
    if not tenant_id:
        raise HTTPException(status_code=403, detail="Token carries no tenant")
    return str(tenant_id)
