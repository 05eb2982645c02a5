from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext

from covid_portal import config


INVALID_TOKEN_MESSAGE = "Invalid JWT Token"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
_bearer = HTTPBearer(auto_error=False)


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    """Hash a plaintext password."""
    return _pwd_context.hash(password)


# PUBLIC_INTERFACE
def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    try:
        return _pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Stored value is not a recognizable hash
        logger.warning("Stored password hash could not be parsed")
        return False


def _create_access_token(payload: Dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = payload.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.jwt_secret(), algorithm=config.jwt_algorithm())


# PUBLIC_INTERFACE
def create_access_token(username: str) -> str:
    """Create a signed JWT access token carrying the username."""
    return _create_access_token(
        {"username": username},
        expires_delta=timedelta(minutes=config.jwt_expires_minutes()),
    )


# PUBLIC_INTERFACE
def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry of a token and return its claims. Raises JWTError."""
    payload = jwt.decode(token, config.jwt_secret(), algorithms=[config.jwt_algorithm()])
    if not payload.get("username"):
        raise JWTError("Token carries no username")
    return payload


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN_MESSAGE)


# PUBLIC_INTERFACE
def require_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> str:
    """
    Dependency gating protected routes on a valid bearer token.

    Returns the username from the token. Handlers only use it for logging;
    access is not restricted by identity.
    """
    if credentials is None:
        logger.info("Rejected request without bearer token")
        raise _unauthorized()

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.info("Rejected bearer token: {}", e)
        raise _unauthorized()
    return str(payload["username"])
