from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import PyJWTError
from pydantic import ValidationError
from app.core.config import settings
from app.core.security import decode_access_token
from app.schemas.auth import Principal

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.TOKEN_URL)

async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        return Principal(subject_id=subject, role=payload.get("role"))
    except (PyJWTError, ValidationError):
        raise credentials_exception

def require_roles(*roles: str):
    async def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(status_code=403, detail="Not authorized to perform this action")
        return principal
    return checker
