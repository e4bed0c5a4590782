"""
JWT Authentication Middleware

Verifies bearer tokens against the public keys published at AUTH_JWKS_URL
and yields the caller's user id (the token's "sub" claim).
"""
import time
import logging
from typing import Optional
from fastapi import HTTPException, Header
from jose import jwt, jwk
import httpx

from task_api import config

logger = logging.getLogger(__name__)

# JWKS cache
_jwks_cache: Optional[dict] = None
_jwks_cache_time: float = 0
JWKS_CACHE_DURATION = 60 * 60  # 1 hour in seconds


def get_jwks_url() -> str:
    """Get the JWKS URL from configuration"""
    if not config.AUTH_JWKS_URL:
        raise HTTPException(
            status_code=500,
            detail="Authentication is not properly configured"
        )
    return config.AUTH_JWKS_URL


async def get_jwks() -> dict:
    """
    Fetch and cache the JWKS
    Returns cached JWKS if available and not expired
    """
    global _jwks_cache, _jwks_cache_time

    now = time.time()

    # Return cached JWKS if available and not expired
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_DURATION:
        return _jwks_cache

    jwks_url = get_jwks_url()
    logger.info(f"Fetching JWKS: {jwks_url}")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            _jwks_cache = response.json()
            _jwks_cache_time = now
            logger.info("JWKS cached successfully")
            return _jwks_cache
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch JWKS: {e}")
        # If we have a cached version, use it even if expired
        if _jwks_cache:
            logger.warning("Using expired JWKS cache due to fetch failure")
            return _jwks_cache
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch authentication keys"
        )


async def verify_token(token: str) -> dict:
    """
    Verify a JWT using the JWKS public keys (ES256 or RS256).

    Returns the decoded JWT payload
    Raises HTTPException if verification fails
    """
    try:
        jwks = await get_jwks()

        # Decode token header to get the key ID
        unverified_header = jwt.get_unverified_header(token)
        kid = unverified_header.get("kid")

        if not kid:
            raise HTTPException(
                status_code=401,
                detail="Token missing key ID (kid)"
            )

        key_data = None
        for jwk_key in jwks.get("keys", []):
            if jwk_key.get("kid") == kid:
                key_data = jwk_key
                break

        if not key_data:
            raise HTTPException(
                status_code=401,
                detail=f"Key with ID '{kid}' not found in JWKS"
            )

        key = jwk.construct(key_data)

        return jwt.decode(
            token,
            key,
            algorithms=["ES256", "RS256"],
            audience=config.AUTH_AUDIENCE,
            issuer=config.AUTH_ISSUER,
            options={"verify_aud": config.AUTH_AUDIENCE is not None},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=401,
            detail="Token has expired"
        )
    except jwt.JWTClaimsError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Token validation failed: {str(e)}"
        )
    except jwt.JWTError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Invalid token: {str(e)}"
        )


def get_user_id_from_payload(payload: dict) -> str:
    """
    Extract user ID from JWT payload
    Raises HTTPException if user ID is not present
    """
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail="Invalid token: no user ID"
        )
    return str(user_id)


async def get_current_user_id(
    authorization: Optional[str] = Header(None)
) -> str:
    """
    FastAPI dependency to extract and verify JWT token from Authorization header
    Returns the authenticated user ID
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Authorization header missing"
        )

    # Extract token from "Bearer <token>" format
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format. Expected 'Bearer <token>'"
        )

    payload = await verify_token(token.strip())
    return get_user_id_from_payload(payload)
