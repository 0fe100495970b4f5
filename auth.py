"""
Identity provider: password hashing, bearer tokens and the FastAPI
dependencies that resolve the caller of a request.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from config import settings
from errors import Unauthenticated
from log import logger

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# auto_error=False so a missing header is reported as 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be identified")
        return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: Dict[str, Any] = {"sub": user_id, "exp": expire, "type": "access"}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def resolve_caller(token: Optional[str]) -> str:
    """Return the user id bound to ``token`` or raise Unauthenticated."""
    if not token:
        raise Unauthenticated("Unauthorized, please login first")
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise Unauthenticated("Session expired, please login again")
    except JWTError:
        raise Unauthenticated("Please login first")

    user_id = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise Unauthenticated("Please login first")
    return user_id


def require_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    return resolve_caller(credentials.credentials if credentials else None)


def optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    if credentials is None:
        return None
    try:
        return resolve_caller(credentials.credentials)
    except Unauthenticated:
        # a stale token on a public read is treated as anonymous
        return None
