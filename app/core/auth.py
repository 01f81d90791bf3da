# app/core/auth.py
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from app.core.security import decode_token

reusable_oauth2 = HTTPBearer()

@dataclass(frozen=True)
class Operator:
    """Authenticated school staff member, as described by the token claims."""
    id: str
    email: Optional[str]
    role: str

    @property
    def display_name(self) -> str:
        return self.email or self.id

async def get_current_user(
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> Operator:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token.credentials)
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    return Operator(id=str(user_id), email=payload.get("email"), role=payload.get("role") or "user")


async def get_current_admin(
    current_user: Operator = Depends(get_current_user)
) -> Operator:
    if current_user.role != "admin":
        raise HTTPException(403, "Admin access required")
    return current_user
