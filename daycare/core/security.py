# daycare/core/security.py

from datetime import datetime, timedelta, timezone
import secrets
from typing import Dict, Optional, Any
from jose import JWTError, jwt

from daycare.core.config import get_jwt_settings, get_token_expires_delta
from daycare.core.exceptions import UnauthenticatedError
from daycare.core.logging import logger
from daycare.schemas.enums import UserRole

ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    user_id: int,
    role: UserRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Mint a signed bearer token whose subject is the user id"""
    jwt_settings = get_jwt_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or get_token_expires_delta())
    to_encode = {
        "sub": str(user_id),
        "role": UserRole(role).value,
        "type": ACCESS_TOKEN_TYPE,
        "iss": jwt_settings["token_issuer"],
        "exp": expire,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(to_encode, jwt_settings["secret_key"], algorithm=jwt_settings["algorithm"])


def verify_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Dict[str, Any]:
    """
    Verify a JWT and check its type and issuer.
    Raises UnauthenticatedError on any failure.
    """
    jwt_settings = get_jwt_settings()
    try:
        payload = jwt.decode(
            token,
            jwt_settings["secret_key"],
            algorithms=[jwt_settings["algorithm"]],
            issuer=jwt_settings["token_issuer"],
        )
    except JWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        raise UnauthenticatedError("Could not validate credentials")

    if payload.get("type") != token_type:
        raise UnauthenticatedError(f"Invalid token type. Expected {token_type}")

    if not str(payload.get("sub", "")).isdigit():
        raise UnauthenticatedError("Token subject is not a user id")

    return payload
