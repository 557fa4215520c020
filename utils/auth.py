import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from database import USERS, document_key, get_db, serialize

load_dotenv()

logger = logging.getLogger(__name__)

# Configuration
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _password_bytes(password: str) -> bytes:
    # bcrypt only uses the first 72 bytes
    return password.encode('utf-8')[:72]


def get_password_hash(password: str) -> str:
    """Hash password with bcrypt"""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode('utf-8'))
    except ValueError as e:
        logger.warning("Password verification error: %s", e)
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Create a JWT access token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str):
    """Decode and verify JWT token"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


async def _user_from_token(token: Optional[str], db) -> Optional[dict]:
    if not token:
        return None
    payload = decode_token(token)
    if payload is None or payload.get("uid") is None:
        return None

    user = await db[USERS].find_one({"_id": document_key(payload["uid"])})
    if user is None:
        return None

    user = serialize(user)
    # Authorization decisions use the claims baked into the token
    user["claims"] = {"role": payload.get("role")}
    return user


async def get_current_user(token: str = Depends(oauth2_scheme), db=Depends(get_db)):
    """Get current logged-in user"""
    user = await _user_from_token(token, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_user_optional(token: Optional[str] = Depends(optional_oauth2_scheme),
                                    db=Depends(get_db)):
    """Current user, or None for anonymous requests"""
    return await _user_from_token(token, db)


def is_admin(user: Optional[dict]) -> bool:
    return bool(user) and user.get("claims", {}).get("role") == "admin"


async def require_admin(current_user: dict = Depends(get_current_user)):
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return current_user
