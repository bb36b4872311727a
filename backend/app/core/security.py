import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.core.config import settings

# CryptContext handles password hashing using bcrypt
# 'deprecated="auto"' allows passlib to handle deprecation warnings automatically
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    # bcrypt generates a salt per hash, so equal passwords hash differently
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token with expiration and a unique token id"""
    # Copy data to avoid mutating the original dict
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(
            timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # 'jti' identifies this token in the revocation store after logout
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})

    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token"""
    try:
        # Verify signature and expiration automatically
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        # Token is invalid - could be expired, tampered, or wrong secret key
        return None


def issue_token(user_id: int) -> str:
    """Issue an access token for a user id"""
    return create_access_token(data={"sub": str(user_id)})


def verify_token(token: str) -> Optional[int]:
    """Return the user id a token was issued for, or None if it is invalid"""
    payload = decode_access_token(token)
    if payload is None:
        return None

    # Token stores the user id as a string in the standard 'sub' claim
    try:
        return int(payload.get("sub"))
    except (ValueError, TypeError):
        return None
