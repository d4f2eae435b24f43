from typing import List
from jose import jwt
from app.core.config import settings

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT token.
    
    Tokens are issued by the identity service; this backend only verifies them.
    
    Args:
        token: JWT token string
    
    Returns:
        Dictionary containing token claims
    
    Raises:
        JWTError: If token is invalid or expired
    """
    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    return payload


def roles_from_claims(payload: dict) -> List[str]:
    """Raw role strings from a token payload: a `roles` list, else a single `role`."""
    roles = payload.get("roles")
    if isinstance(roles, list):
        return [str(r) for r in roles]
    role = payload.get("role")
    return [str(role)] if role else []
