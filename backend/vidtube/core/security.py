# vidtube/core/security.py
"""
Security module for authentication.
Handles password hashing and creation/validation of access and refresh tokens.
"""
import datetime as dt
import secrets
import jwt  # PyJWT
from passlib.context import CryptContext

from vidtube.config import settings

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: str, username: str, email: str) -> str:
    """
    Create a short-lived JWT access token.

    Token payload includes:
        - sub: Subject (user ID)
        - username / email: for display without a DB round trip
        - iat / exp: issued-at and expiration timestamps
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "username": username,
        "email": email,
        "type": "access",
        "iat": now,
        "exp": now + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.access_token_secret, algorithm=JWT_ALG)


def create_refresh_token(user_id: str) -> str:
    """
    Create a long-lived JWT refresh token.

    The token is also stored on the user row; a refresh is only honoured
    when the presented token equals the stored one (rotation on every use).
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "type": "refresh",
        # jti keeps two refreshes within the same second distinct
        "jti": secrets.token_urlsafe(12),
        "iat": now,
        "exp": now + dt.timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.refresh_token_secret, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate an access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or malformed
    """
    return jwt.decode(token, settings.access_token_secret, algorithms=[JWT_ALG])


def decode_refresh_token(token: str) -> dict:
    """
    Decode and validate a refresh token.

    Raises:
        jwt.InvalidTokenError: If token is invalid, expired or not a refresh token
    """
    payload = jwt.decode(token, settings.refresh_token_secret, algorithms=[JWT_ALG])
    if payload.get("type") != "refresh":
        raise jwt.InvalidTokenError("not a refresh token")
    return payload
