from fastapi import Header, HTTPException
from app.services.auth.jwt_handler import get_current_user


def get_current_user_id(access_token: str = Header(..., description="Access token (with or without Bearer)")):
    """Extract current user ID from JWT token"""
    if access_token.startswith("Bearer "):
        access_token = access_token[len("Bearer "):]
    user_id = get_current_user(access_token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id
