# vidtube/api/v1/deps.py
from typing import Optional

import jwt
from fastapi import Header, Request

from vidtube.core.errors import AuthenticationError
from vidtube.core.security import decode_access_token
from vidtube.models.user import User


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: accessToken
    if not token:
        token = request.cookies.get("accessToken")
    return token or None


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    This dependency extracts and validates the JWT token from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    The resolved user is passed explicitly to route handlers; nothing is
    attached to the request object.

    Returns:
        User: The authenticated user object from database

    Raises:
        AuthenticationError (401): No token, invalid/expired token, or unknown user

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            ...
    """
    token = _extract_token(request, authorization)
    if not token:
        raise AuthenticationError("Unauthorized request")

    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid access token")

    user = await User.get_or_none(id=payload.get("sub"))
    if not user:
        raise AuthenticationError("Invalid access token")
    return user


async def get_optional_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Optional[User]:
    """
    Like `get_current_user`, but anonymous requests resolve to None.

    Used by public read endpoints that personalise their output
    (isLiked / isSubscribed) when a viewer is known.
    """
    token = _extract_token(request, authorization)
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        return None
    return await User.get_or_none(id=payload.get("sub"))
