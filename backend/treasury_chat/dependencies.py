from fastapi import Depends, HTTPException, status, WebSocket
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from treasury_chat.config import settings
from treasury_chat.schemas.user import TokenData
from sqlalchemy.orm import Session
from treasury_chat.database import get_db
from treasury_chat.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# Roles allowed to see every trade
REVIEWER_ROLES = (UserRole.admin, UserRole.super_user)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(seconds=settings.jwt_expiration)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt

def get_current_user_from_token(token: str, db: Session) -> User:
    """Resolve a bearer token to a user (shared by REST and WebSocket auth)"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        email: str = payload.get("sub")
        role: str = payload.get("role")
        if email is None or role is None:
            raise credentials_exception
        token_data = TokenData(email=email, role=role)
    except JWTError:
        raise credentials_exception
    user = db.query(User).filter(User.email == token_data.email).first()
    if user is None:
        raise credentials_exception
    return user

async def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    return get_current_user_from_token(token, db)

async def get_super_user(current_user: User = Depends(get_current_user)):
    if current_user.role != UserRole.super_user:
        raise HTTPException(status_code=403, detail="Not authorized as Super User")
    return current_user

async def get_trade_reviewer(current_user: User = Depends(get_current_user)):
    if current_user.role not in REVIEWER_ROLES:
        raise HTTPException(status_code=403, detail="Not authorized to review trades")
    return current_user

async def get_token_from_websocket(websocket: WebSocket) -> str:
    """
    Extract token from WebSocket query parameters.
    The token is expected in the format: ws://server/ws/notifications?token=xyz
    """
    token = websocket.query_params.get("token")
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
        )
    return token
