from typing import List
from fastapi import Depends, HTTPException, status, Request
from jose import JWTError
from app.core.security import verify_token, roles_from_claims
from app.services.capabilities import normalize_roles


async def get_current_roles(request: Request) -> List[str]:
    """
    Extract and validate the JWT from the Authorization Bearer header and
    return the caller's normalized roles.
    
    Args:
        request: FastAPI Request to extract Authorization header
    
    Returns:
        Normalized role names (possibly empty)
    
    Raises:
        HTTPException: If the token is missing or invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        raise credentials_exception
    
    token = authorization.replace("Bearer ", "")
    try:
        payload = verify_token(token)
    except JWTError:
        raise credentials_exception
    
    return normalize_roles(roles_from_claims(payload))


def require_roles(*allowed: str):
    """Dependency factory rejecting callers that hold none of the given roles."""
    def checker(roles: List[str] = Depends(get_current_roles)) -> List[str]:
        if not any(r in allowed for r in roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role"
            )
        return roles
    return checker
