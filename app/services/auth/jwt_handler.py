import logging
import jwt
from typing import Optional
from app.core.config import settings

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError:
        return None


def get_current_user(token: str) -> Optional[str]:
    """Extract the user id from an access token issued by the auth provider"""
    payload = decode_access_token(token)
    if not payload:
        return None
    # Hosted auth providers put the user id in "sub"
    return payload.get("user_id") or payload.get("sub")
