"""
Caller identity resolution

One resolver per request, trying in order:
1. Authorization: Bearer <access token>
2. access-token cookie
3. raw user-id cookie (unverified, can be disabled)

Tokens are identity-provider JWTs (HS256) verified with the shared secret.
Bulk endpoints authenticate with a shared API key instead.
"""
import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Query, Request
from jose import jwt, JWTError

from app.config import settings
from app.services.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "supabase-access-token"
USER_ID_COOKIE = "supabase-user-id"
ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None
    method: str = "bearer"  # bearer | cookie_token | cookie_id


def decode_access_token(token: str) -> Optional[dict]:
    """Verify an access token; None when it is missing, expired or forged"""
    if not token or not settings.SUPABASE_JWT_SECRET:
        return None
    
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        logger.info("Access token expired")
        return None
    except JWTError as e:
        logger.info(f"Access token rejected: {type(e).__name__}")
        return None


def _identity_from_token(token: str, method: str) -> Optional[Identity]:
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return None
    
    email = payload.get("email")
    return Identity(
        user_id=str(payload["sub"]),
        email=email.lower() if email else None,
        method=method,
    )


def _clean_cookie_id(value: Optional[str]) -> Optional[str]:
    if not value or value in ("undefined", "null"):
        return None
    return value


class IdentityResolver:
    """Turns a request into an Identity, or None when nothing usable was presented"""
    
    def __init__(self, allow_user_id_cookie: bool = None):
        if allow_user_id_cookie is None:
            allow_user_id_cookie = settings.ALLOW_USER_ID_COOKIE
        self.allow_user_id_cookie = allow_user_id_cookie
    
    def resolve(self, request: Request) -> Optional[Identity]:
        auth_header = request.headers.get("authorization", "")
        if auth_header.lower().startswith("bearer "):
            identity = _identity_from_token(auth_header[7:].strip(), "bearer")
            if identity:
                return identity
        
        cookie_id = _clean_cookie_id(request.cookies.get(USER_ID_COOKIE))
        access_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        
        if access_token:
            identity = _identity_from_token(access_token, "cookie_token")
            if identity:
                return identity
        
        if cookie_id and self.allow_user_id_cookie:
            logger.debug(f"Using unverified user id cookie: {cookie_id}")
            return Identity(user_id=cookie_id, method="cookie_id")
        
        return None


# Global instance
identity_resolver = IdentityResolver()


def get_identity(request: Request) -> Optional[Identity]:
    """FastAPI dependency: resolved identity or None"""
    return identity_resolver.resolve(request)


def require_identity(request: Request) -> Identity:
    """FastAPI dependency: resolved identity, or 401"""
    identity = get_identity(request)
    if identity is None:
        raise NotAuthenticatedError("No user ID available")
    return identity


def require_api_key(api_key: Optional[str] = Query(None)) -> str:
    """FastAPI dependency for bulk/admin endpoints: ?api_key= must match ADMIN_API_KEY"""
    expected = settings.ADMIN_API_KEY
    if not expected or not api_key or not hmac.compare_digest(api_key, expected):
        raise NotAuthenticatedError("Invalid API key")
    return api_key
