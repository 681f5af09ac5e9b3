# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and role checks.
#
# Token verification supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Roles come from public.users; a user without a profile row is treated
# as admin (accounts created before roles existed).
#
# Usage:
#   from app.auth import get_current_user_with_role, require_roles, UserRole
#
#   @router.get("/sessions")
#   async def sessions(user: CRMUser = Depends(require_roles(UserRole.FORMATEUR))):
#       ...
# =============================================================================

import logging
import time
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser, CRMUser, UserRole
from app.config import settings
from app.exceptions import ForbiddenError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _fetch_jwks() -> dict:
    """Fetch the project's JWKS, cached for an hour."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    jwks_url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = now
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except Exception as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # An expired cache is better than nothing
        return _jwks_cache or {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Pick the key that signed a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token.

    Raises:
        HTTPException: 401 if token is invalid, expired or has no user ID
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated",
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_uuid, email=payload.get("email"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    Returns:
        AuthUser: The authenticated user

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    user = decode_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_with_role(
    user: AuthUser = Depends(get_current_user)
) -> CRMUser:
    """
    Authenticated user with role and full name from public.users.

    Users without a profile row, or whose row has no role, default to
    admin. A role that is set but not recognised is denied outright.

    Raises:
        ForbiddenError: If the stored role is not a known role
    """
    profile = SupabaseClient.fetch_user(user.id)
    if not profile:
        logger.debug(f"No profile row for user {user.id}, defaulting to admin")
        return CRMUser(id=user.id, email=user.email)

    try:
        role = UserRole(profile.get("role") or UserRole.ADMIN.value)
    except ValueError:
        logger.warning(f"Unknown role {profile.get('role')!r} for user {user.id}, access denied")
        raise ForbiddenError([known.value for known in UserRole])

    return CRMUser(
        id=user.id,
        email=user.email or profile.get("email"),
        role=role,
        full_name=profile.get("full_name"),
    )


def require_roles(*roles: UserRole):
    """
    Build a dependency that only lets the given roles through.

    Admins always pass.

    Example:
        @router.delete("/{lead_id}")
        async def delete_lead(user: CRMUser = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    allowed = {UserRole(role) for role in roles} | {UserRole.ADMIN}

    async def checker(
        user: CRMUser = Depends(get_current_user_with_role)
    ) -> CRMUser:
        if user.role not in allowed:
            logger.warning(f"User {user.id} ({user.role.value}) denied, needs {sorted(r.value for r in allowed)}")
            raise ForbiddenError(sorted(role.value for role in allowed))
        return user

    return checker
