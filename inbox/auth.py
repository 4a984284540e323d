from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from .config import JWT_SECRET as SECRET, JWT_ALGORITHM as ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from .errors import Unauthenticated

bearer = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({'exp': expire})
    encoded = jwt.encode(to_encode, SECRET, algorithm=ALGORITHM)
    return encoded


def decode_token(token: str):
    try:
        payload = jwt.decode(token, SECRET, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None


def _user_id_from(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[int]:
    if not credentials:
        return None
    payload = decode_token(credentials.credentials)
    if not payload or payload.get('id') is None:
        return None
    try:
        return int(payload['id'])
    except (TypeError, ValueError):
        return None


async def get_optional_user(credentials: HTTPAuthorizationCredentials = Depends(bearer)) -> Optional[int]:
    """Current user id, or None. Used by reads that degrade instead of failing."""
    return _user_id_from(credentials)


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer)) -> int:
    user_id = _user_id_from(credentials)
    if user_id is None:
        raise Unauthenticated()
    return user_id
