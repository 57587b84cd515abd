# vidtube/api/v1/routers/users.py
import logging
from typing import Optional

import jwt
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from vidtube.api.v1.deps import get_current_user, get_optional_user
from vidtube.config import settings
from vidtube.core.errors import AuthenticationError, BadRequestError, ConflictError, NotFoundError
from vidtube.core.responses import api_response
from vidtube.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from vidtube.models.user import User
from vidtube.schemas.auth import ChangePasswordIn, LoginIn, RefreshIn, UpdateAccountIn
from vidtube.schemas.content import patch_fields
from vidtube.services import projections as shape
from vidtube.services import views
from vidtube.services.asset_store import AssetStore, get_asset_store, store_upload

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/users", tags=["users"])


def _set_auth_cookies(response: JSONResponse, access_token: str, refresh_token: str) -> None:
    opts = {"httponly": True, "secure": settings.cookie_secure, "samesite": "lax"}
    response.set_cookie("accessToken", access_token, **opts)
    response.set_cookie("refreshToken", refresh_token, **opts)


async def _issue_tokens(user: User) -> tuple[str, str]:
    """Create a token pair and make the refresh token the only one honoured."""
    access_token = create_access_token(user.id, user.username, user.email)
    refresh_token = create_refresh_token(user.id)
    await User.filter(id=user.id).update(refresh_token=refresh_token)
    return access_token, refresh_token


@router.post("/register")
async def register(
    fullname: str = Form(default=""),
    email: str = Form(default=""),
    username: str = Form(default=""),
    password: str = Form(default=""),
    avatar: Optional[UploadFile] = File(default=None),
    coverImage: Optional[UploadFile] = File(default=None),
    store: AssetStore = Depends(get_asset_store),
):
    """
    Register a new user account (multipart form).

    Username and email are stored trimmed and lowercased and must be unique.
    The avatar is required and uploaded to the asset store; the cover image
    is optional.

    Raises:
        BadRequestError (400): Blank field, missing avatar or avatar upload failure
        ConflictError (409): Username or email already taken
    """
    fullname, email, username = fullname.strip(), email.strip().lower(), username.strip().lower()
    if not all([fullname, email, username, password.strip()]):
        raise BadRequestError("All fields are required")
    if await User.filter(Q(username=username) | Q(email=email)).exists():
        raise ConflictError("Username or email already exists")
    if avatar is None or not avatar.filename:
        raise BadRequestError("Avatar is required")

    avatar_asset = await store_upload(store, avatar, resource_type="image")
    if not avatar_asset:
        raise BadRequestError("Avatar upload failed")
    cover_asset = await store_upload(store, coverImage, resource_type="image")

    try:
        user = await User.create(
            fullname=fullname,
            email=email,
            username=username,
            password_hash=hash_password(password),
            avatar=avatar_asset.url,
            cover_image=cover_asset.url if cover_asset else "",
        )
    except IntegrityError:
        # Lost a race against a concurrent registration
        raise ConflictError("Username or email already exists")
    logger.info("[users] registered %s (%s)", user.username, user.id)
    return api_response(shape.user_doc(user), "User registered successfully", status.HTTP_201_CREATED)


@router.post("/login")
async def login(body: LoginIn):
    """
    Authenticate by username or email and issue access + refresh tokens.

    Both tokens are returned in the body and set as HttpOnly cookies.

    Raises:
        BadRequestError (400): Neither username nor email, or blank password
        NotFoundError (404): No such user
        AuthenticationError (401): Wrong password
    """
    username = (body.username or "").strip().lower()
    email = (body.email or "").strip().lower()
    if not username and not email:
        raise BadRequestError("Username or email is required")
    if not body.password:
        raise BadRequestError("Password is required")

    lookup = [Q(username=username)] if username else []
    if email:
        lookup.append(Q(email=email))
    user = await User.filter(Q(*lookup, join_type="OR")).first()
    if not user:
        raise NotFoundError("User not found")
    if not verify_password(body.password, user.password_hash):
        raise AuthenticationError("Invalid user credentials")

    access_token, refresh_token = await _issue_tokens(user)
    response = api_response(
        {"user": shape.user_doc(user), "accessToken": access_token, "refreshToken": refresh_token},
        "User logged in successfully",
    )
    _set_auth_cookies(response, access_token, refresh_token)
    return response


@router.post("/logout")
async def logout(user: User = Depends(get_current_user)):
    """Forget the stored refresh token and clear both cookies."""
    await User.filter(id=user.id).update(refresh_token=None)
    response = api_response({}, "User logged out successfully")
    response.delete_cookie("accessToken")
    response.delete_cookie("refreshToken")
    return response


@router.post("/refresh-token")
async def refresh_access_token(request: Request, body: Optional[RefreshIn] = None):
    """
    Exchange a refresh token (cookie first, then body) for a new token pair.

    The presented token must equal the one stored on the user; it is
    rotated on every successful call, so a token works only once.
    """
    incoming = request.cookies.get("refreshToken") or (body.refreshToken if body else None)
    if not incoming:
        raise AuthenticationError("Unauthorized request")
    try:
        payload = decode_refresh_token(incoming)
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid refresh token")

    user = await User.get_or_none(id=payload.get("sub"))
    if not user:
        raise AuthenticationError("Invalid refresh token")
    if incoming != user.refresh_token:
        raise AuthenticationError("Refresh token is expired or used")

    access_token, refresh_token = await _issue_tokens(user)
    response = api_response(
        {"accessToken": access_token, "refreshToken": refresh_token},
        "Access token refreshed",
    )
    _set_auth_cookies(response, access_token, refresh_token)
    return response


@router.post("/change-password")
async def change_password(body: ChangePasswordIn, user: User = Depends(get_current_user)):
    if not body.newPassword.strip():
        raise BadRequestError("New password is required")
    if not verify_password(body.oldPassword, user.password_hash):
        raise AuthenticationError("Current password is incorrect")
    await User.filter(id=user.id).update(password_hash=hash_password(body.newPassword))
    return api_response({}, "Password changed successfully")


@router.get("/current-user")
async def current_user(user: User = Depends(get_current_user)):
    return api_response(shape.user_doc(user), "Current user fetched successfully")


@router.patch("/update-account")
async def update_account(body: UpdateAccountIn, user: User = Depends(get_current_user)):
    """
    Patch fullname and/or email.

    Raises:
        BadRequestError (400): Neither field given, or a given field is blank
        ConflictError (409): Email belongs to another account
    """
    patch = {}
    for name, value in patch_fields(body).items():
        value = (value or "").strip()
        if not value:
            raise BadRequestError(f"{name.capitalize()} cannot be empty")
        patch[name] = value.lower() if name == "email" else value
    if not patch:
        raise BadRequestError("Fullname or email is required")
    if "email" in patch and await User.filter(email=patch["email"]).exclude(id=user.id).exists():
        raise ConflictError("Email already in use")

    try:
        await User.filter(id=user.id).update(**patch)
    except IntegrityError:
        raise ConflictError("Email already in use")
    user = await User.get(id=user.id)
    return api_response(shape.user_doc(user), "Account details updated successfully")


async def _replace_image(user: User, upload: Optional[UploadFile], store: AssetStore, column: str, label: str):
    if upload is None or not upload.filename:
        raise BadRequestError(f"{label} is required")
    asset = await store_upload(store, upload, resource_type="image")
    if not asset:
        raise BadRequestError(f"Error while uploading {label.lower()}")
    await User.filter(id=user.id).update(**{column: asset.url})
    return await User.get(id=user.id)


@router.patch("/avatar")
async def update_avatar(
    avatar: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    store: AssetStore = Depends(get_asset_store),
):
    user = await _replace_image(user, avatar, store, "avatar", "Avatar")
    return api_response(shape.user_doc(user), "Avatar updated successfully")


@router.patch("/cover-image")
async def update_cover_image(
    coverImage: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    store: AssetStore = Depends(get_asset_store),
):
    user = await _replace_image(user, coverImage, store, "cover_image", "Cover image")
    return api_response(shape.user_doc(user), "Cover image updated successfully")


@router.get("/c/{username}")
async def channel_profile(username: str, viewer: Optional[User] = Depends(get_optional_user)):
    if not username.strip():
        raise BadRequestError("Username is missing")
    profile = await views.channel_profile(username, viewer.id if viewer else None)
    return api_response(profile, "Channel profile fetched successfully")


@router.get("/history")
async def watch_history(user: User = Depends(get_current_user)):
    history = await views.watch_history(user.id)
    return api_response(history, "Watch history fetched successfully")
